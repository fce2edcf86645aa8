"""
Input checks run on candidate lists and raw ballots before they are tabulated.

The tabulator assumes every ballot it receives passed these checks. Its behavior on
ballots with duplicate or non-sequential ranks is unspecified.
"""

from typing import Dict, Iterable, List

import logging

from rcv_tally.ballots import DO_NOT_RANK, get_raw_rankings, get_voter_id
from rcv_tally.package_types import RawBallot

_log = logging.getLogger(__name__)


def has_duplicates(values: Iterable) -> bool:
    values = list(values)
    return len(values) != len(set(values))


def are_sequential(ranks: Iterable[int]) -> bool:
    """True if the distinct nonzero ranks are exactly 1..k."""
    uniques = sorted(set(r for r in ranks if r != DO_NOT_RANK))
    return uniques == list(range(1, len(uniques) + 1))


def validate_candidates(names: Iterable[str]) -> List[str]:
    """Check candidate names are non-blank strings and unique.

    :raises TypeError: if a name is not a string
    :raises ValueError: if a name is blank or repeated
    :return: the names, as a list
    """
    names = list(names)
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"candidate name must be a string, got {name!r}")
        if not name.strip():
            raise ValueError("candidate name cannot be blank")

    if has_duplicates(names):
        dupes = sorted(set(n for n in names if names.count(n) > 1))
        raise ValueError(f"candidate names must be unique, repeated: {dupes}")

    return names


def validate_ballot(raw_ballot: RawBallot, candidate_names: Iterable[str]) -> None:
    """Check one raw ballot against the input contract.

    - each candidate appears at most once
    - every candidate is registered
    - ranks are integers >= 0
    - nonzero ranks are unique and sequential starting at 1

    :raises ValueError: describing the first problem found
    """
    voter = get_voter_id(raw_ballot)
    rankings = list(get_raw_rankings(raw_ballot))
    registered = set(candidate_names)

    names = [r["candidate"] for r in rankings]
    if has_duplicates(names):
        raise ValueError(f"ballot {voter!r} lists a candidate more than once")

    unknown = [n for n in names if n not in registered]
    if unknown:
        raise ValueError(f"ballot {voter!r} ranks unregistered candidates: {unknown}")

    ranks = []
    for r in rankings:
        rank = r["rank"]
        if isinstance(rank, bool) or not isinstance(rank, int) or rank < 0:
            raise ValueError(f"ballot {voter!r} has invalid rank {rank!r} for {r['candidate']!r}")
        ranks.append(rank)

    nonzero = [rank for rank in ranks if rank != DO_NOT_RANK]
    if has_duplicates(nonzero):
        raise ValueError(f"ballot {voter!r}: all items must have a unique rank")

    if not are_sequential(nonzero):
        raise ValueError(f"ballot {voter!r}: all ranks must be sequential, starting with 1")


def dedupe_voters(raw_ballots: Iterable[RawBallot]) -> List[RawBallot]:
    """Keep only the latest ballot cast by each voter id, in order of each voter's first ballot."""
    latest: Dict[str, RawBallot] = {}
    for raw in raw_ballots:
        voter = get_voter_id(raw)
        if voter in latest:
            _log.info("voter %r cast more than one ballot, keeping the latest", voter)
        latest[voter] = raw
    return list(latest.values())


def validate_election(candidate_names: Iterable[str], raw_ballots: Iterable[RawBallot]) -> List[RawBallot]:
    """Validate the candidate list and every ballot, and drop superseded ballots.

    :return: the ballots to tabulate, one per voter id
    :raises ValueError: on the first invalid candidate name or ballot
    """
    names = validate_candidates(candidate_names)
    ballots = dedupe_voters(raw_ballots)
    for raw in ballots:
        validate_ballot(raw, names)
    return ballots
