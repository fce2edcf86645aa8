"""
Contains ballot file parser functions.

Every parser takes the path to a ballot file and returns a dictionary with two keys:
'candidates', the list of candidate names, and 'ballots', a list of raw ballots of the
form ``{'voter_id': str, 'rankings': [{'candidate': str, 'rank': int}, ...]}``.
"""

from typing import Dict, List, Optional, Union

import json
import logging
import os
import pathlib

import pandas as pd

from rcv_tally.ballots import DO_NOT_RANK, get_raw_rankings, get_voter_id
from rcv_tally.package_types import ElectionDict, ParserDict

_log = logging.getLogger(__name__)


def add_parser(new_parsers: ParserDict) -> None:
    """Add custom parser functions to the module parser dictionary.

    :param new_parsers: A dictionary containing parser functions, with their names as keys.
    :type new_parsers: Dict
    """
    parser_dict.update(new_parsers)


def get_parser_dict() -> ParserDict:
    """Returns the module parser dictionary. Including both package parsers and
    custom parsers added with :func:`add_parser`.

    :return: A dictionary of parser functions. Keys are parser name strings.
    :rtype: Dict
    """
    return parser_dict


def _read_candidate_file(cvr_path: pathlib.Path) -> Optional[List[str]]:
    """Read 'candidates.csv' from the ballot file's directory, if there is one."""
    candidates_fpath = cvr_path.parent / "candidates.csv"
    if not os.path.isfile(candidates_fpath):
        return None

    _log.info("Reading candidates: %s", candidates_fpath)
    df = pd.read_csv(candidates_fpath, encoding="utf8", dtype=str)
    if "candidate" not in df.columns:
        raise RuntimeError(f'{candidates_fpath} does not contain a "candidate" column')
    return df["candidate"].dropna().str.strip().tolist()


def _first_appearance(ballots: List[Dict]) -> List[str]:
    candidates = []
    for ballot in ballots:
        for ranking in ballot["rankings"]:
            if ranking["candidate"] not in candidates:
                candidates.append(ranking["candidate"])
    return candidates


def election_json(cvr_path: Union[str, pathlib.Path]) -> ElectionDict:
    """Reads a JSON election file of the form ``{"candidates": [...], "ballots": [...]}``.

    Ballots may name the voter with 'voterId', 'voter_id' or 'voter' and the rankings
    with 'rankings' or 'ranks'. They are returned in the standard parser shape.

    :param cvr_path: The path to the JSON file.
    :type cvr_path: Union[str, pathlib.Path]
    :raises RuntimeError: if the file is missing the 'candidates' or 'ballots' key.
    :return: Dictionary with 'candidates' and 'ballots'
    :rtype: Dict[str, List]
    """
    cvr_path = pathlib.Path(cvr_path)
    _log.info("Reading ballots: %s", cvr_path)

    with open(cvr_path, encoding="utf8") as cvr_file:
        election = json.load(cvr_file)

    for key in ("candidates", "ballots"):
        if key not in election:
            raise RuntimeError(f'{cvr_path} does not contain field "{key}"')

    ballots = [
        {
            "voter_id": str(get_voter_id(raw)),
            "rankings": [{"candidate": r["candidate"], "rank": int(r["rank"])} for r in get_raw_rankings(raw)],
        }
        for raw in election["ballots"]
    ]

    return {"candidates": list(election["candidates"]), "ballots": ballots}


def rank_long_csv(cvr_path: Union[str, pathlib.Path]) -> ElectionDict:
    """Reads ballots stored in long csv format, one row per ballot entry, with columns
    'voter_id', 'candidate' and 'rank'. A blank rank, or rank 0, means do not rank.

    :param cvr_path: The path to the CVR file. If a file called "candidates.csv" exists in the same directory, its "candidate" column is used as the candidate list. Otherwise candidates are listed in order of first appearance.
    :type cvr_path: Union[str, pathlib.Path]
    :raises RuntimeError: if a required column is missing.
    :return: Dictionary with 'candidates' and 'ballots'
    :rtype: Dict[str, List]
    """
    cvr_path = pathlib.Path(cvr_path)
    _log.info("Reading ballots: %s", cvr_path)

    df = pd.read_csv(cvr_path, encoding="utf8", dtype={"voter_id": str, "candidate": str})

    missing = {"voter_id", "candidate", "rank"}.difference(df.columns)
    if missing:
        raise RuntimeError(f"{cvr_path} is missing columns: {sorted(missing)}")

    df["candidate"] = df["candidate"].str.strip()
    df["rank"] = df["rank"].fillna(DO_NOT_RANK).astype(int)

    ballots = []
    for voter_id, group in df.groupby("voter_id", sort=False):
        ballots.append({
            "voter_id": voter_id,
            "rankings": [
                {"candidate": cand, "rank": int(rank)}
                for cand, rank in zip(group["candidate"].tolist(), group["rank"].tolist())
            ],
        })

    candidates = _read_candidate_file(cvr_path)
    if candidates is None:
        candidates = _first_appearance(ballots)

    _log.info("Read %d ballots, %d candidates.", len(ballots), len(candidates))
    return {"candidates": candidates, "ballots": ballots}


def rank_column_csv(cvr_path: Union[str, pathlib.Path]) -> ElectionDict:
    """Reads ballot ranking information stored in csv format.
    One ballot per row, with ranking columns appearing in order and named with the word "rank"
    (e.x. "rank1", "rank2", etc). Cells hold candidate names, blank cells are skipped rankings
    and later rankings move up to fill them. An optional 'voter_id' column names each ballot,
    otherwise the row number is used.

    :param cvr_path: The path to the CVR file. A "candidates.csv" file in the same directory is used as the candidate list if present.
    :type cvr_path: Union[str, pathlib.Path]
    :raises RuntimeError: if no rank columns are found.
    :return: Dictionary with 'candidates' and 'ballots'
    :rtype: Dict[str, List]
    """
    cvr_path = pathlib.Path(cvr_path)
    _log.info("Reading ballots: %s", cvr_path)

    df = pd.read_csv(cvr_path, encoding="utf8", dtype=str)

    # find rank columns
    rank_col = [col for col in df.columns if "rank" in col.lower()]
    if not rank_col:
        raise RuntimeError(f'{cvr_path} has no columns containing "rank"')

    if "voter_id" in df.columns:
        voter_ids = df["voter_id"].tolist()
    else:
        voter_ids = [str(i) for i in range(1, len(df) + 1)]

    ballots = []
    for voter_id, (_, row) in zip(voter_ids, df[rank_col].iterrows()):
        marks = [str(mark).strip() for mark in row.tolist() if not pd.isna(mark) and str(mark).strip()]
        ballots.append({
            "voter_id": voter_id,
            "rankings": [{"candidate": cand, "rank": rank} for rank, cand in enumerate(marks, start=1)],
        })

    candidates = _read_candidate_file(cvr_path)
    if candidates is None:
        candidates = _first_appearance(ballots)

    _log.info("Read %d ballots, %d candidates.", len(ballots), len(candidates))
    return {"candidates": candidates, "ballots": ballots}


parser_dict = {
    "election_json": election_json,
    "rank_long_csv": rank_long_csv,
    "rank_column_csv": rank_column_csv,
}
