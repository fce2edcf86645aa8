"""
Contains the Ballot class and the ballot preparation step run before tabulation.
"""

from __future__ import annotations
from typing import Iterable, List, NamedTuple, Tuple, Union

import logging

from rcv_tally.package_types import RawBallot, RawRanking

_log = logging.getLogger(__name__)

# rank given to a candidate the voter chose not to rank
DO_NOT_RANK = 0


class Ranking(NamedTuple):
    candidate: str
    rank: int

    @property
    def is_ranked(self) -> bool:
        return self.rank != DO_NOT_RANK


class Ballot:
    """One voter's ranking, plus the allocation state carried between rounds."""

    ACTIVE = "active"
    EXHAUSTED = "exhausted"

    def __init__(self, voter_id: str, rankings: Iterable[Ranking]) -> None:
        self.voter_id = voter_id
        self.rankings: Tuple[Ranking, ...] = tuple(rankings)
        self.status = Ballot.ACTIVE

        # position of the last ranking found active, allocation resumes here next round
        self.current_rank_index = 0

    def __repr__(self) -> str:
        return f"Ballot({self.voter_id!r}, status={self.status!r}, index={self.current_rank_index})"

    @property
    def is_active(self) -> bool:
        return self.status == Ballot.ACTIVE

    def exhaust(self) -> None:
        self.status = Ballot.EXHAUSTED


def get_voter_id(raw_ballot: RawBallot) -> str:
    for key in ("voter_id", "voterId", "voter"):
        if key in raw_ballot:
            return raw_ballot[key]
    raise KeyError(f"ballot has no voter id field: {raw_ballot!r}")


def get_raw_rankings(raw_ballot: RawBallot) -> List[RawRanking]:
    for key in ("rankings", "ranks"):
        if key in raw_ballot:
            return raw_ballot[key]
    raise KeyError(f"ballot has no rankings field: {raw_ballot!r}")


def normalize(voter_id: str, raw_rankings: Iterable[Union[RawRanking, Ranking]]) -> Ballot:
    """Order a single ballot: ranked entries ascending by rank, then the do-not-rank entries.

    Do-not-rank entries keep their input order. Malformed rank sequences are not
    checked here, see :mod:`rcv_tally.validate`.

    :rtype: Ballot
    """
    rankings = [r if isinstance(r, Ranking) else Ranking(r["candidate"], int(r["rank"])) for r in raw_rankings]

    ranked = sorted((r for r in rankings if r.is_ranked), key=lambda r: r.rank)
    dnrs = [r for r in rankings if not r.is_ranked]

    return Ballot(voter_id, ranked + dnrs)


def prepare(raw_ballots: Iterable[Union[RawBallot, Ballot]]) -> List[Ballot]:
    """Build a fresh, active Ballot for every raw ballot.

    Accepts mappings in the input contract shape (`voter_id`/`voterId` plus
    `rankings` of `{'candidate', 'rank'}` dicts) or existing Ballot objects, which
    are copied and reset rather than shared.

    :param raw_ballots: ballots to prepare
    :return: new Ballot objects, in input order
    :rtype: List[Ballot]
    """
    prepared = []
    for raw in raw_ballots:
        if isinstance(raw, Ballot):
            prepared.append(normalize(raw.voter_id, raw.rankings))
        else:
            prepared.append(normalize(get_voter_id(raw), get_raw_rankings(raw)))

    _log.debug("prepared %d ballots", len(prepared))
    return prepared
