"""
Single round allocation and counting.
"""
from typing import Dict, List, Optional, Sequence

import collections
import logging

from rcv_tally import util
from rcv_tally.ballots import Ballot
from rcv_tally.candidates import Candidate
from rcv_tally.results import CandidateResult, RoundResult

_log = logging.getLogger(__name__)


def allocate(ballot: Ballot, candidates_by_name: Dict[str, Candidate]) -> Optional[str]:
    """Find the highest ranked active candidate on a ballot, resuming from its last position.

    The ballot's `current_rank_index` is moved to the allocated position. If a
    do-not-rank entry or the end of the ballot is reached first the ballot is marked
    exhausted and None is returned.

    :raises KeyError: if the ballot ranks a candidate that was never registered
    """
    for idx in range(ballot.current_rank_index, len(ballot.rankings)):
        ranking = ballot.rankings[idx]

        # do-not-rank entries are sorted last, nothing after them can receive the vote
        if not ranking.is_ranked:
            break

        try:
            candidate = candidates_by_name[ranking.candidate]
        except KeyError:
            raise KeyError(
                f"ballot {ballot.voter_id!r} ranks unregistered candidate {ranking.candidate!r}"
            ) from None

        if candidate.is_active:
            ballot.current_rank_index = idx
            return candidate.name

    ballot.exhaust()
    return None


def count_round(candidates: Sequence[Candidate], ballots: Sequence[Ballot], round_number: int) -> RoundResult:
    """Allocate every active ballot and tally one round.

    Candidate round votes and percentages are overwritten. Eliminated candidates
    always report zero. The percentage denominator is the number of ballots active
    when the round started, including those that exhaust during this round.

    :param candidates: all registered candidates, active and eliminated
    :param ballots: all prepared ballots, active and exhausted
    :param round_number: 1-based number of the round being counted
    :rtype: RoundResult
    """
    for candidate in candidates:
        candidate.reset_round()

    candidates_by_name = {c.name: c for c in candidates}
    active_ballots: List[Ballot] = [b for b in ballots if b.is_active]
    total_active = len(active_ballots)

    vote_alloc = collections.Counter()
    for ballot in active_ballots:
        allocated = allocate(ballot, candidates_by_name)
        if allocated is not None:
            vote_alloc[allocated] += 1

    results = {}
    for candidate in candidates:
        if candidate.is_active:
            candidate.current_round_votes = vote_alloc[candidate.name]
            candidate.current_round_percentage = util.percent(candidate.current_round_votes, total_active)
        results[candidate.name] = CandidateResult(candidate.current_round_votes, candidate.current_round_percentage)

    _log.debug(
        "round %d: %d active ballots, %d exhausted this round, counts %s",
        round_number,
        total_active,
        total_active - sum(vote_alloc.values()),
        dict(vote_alloc),
    )

    return RoundResult(round_number=round_number, total_active_ballots=total_active, results=results)
