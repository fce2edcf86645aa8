"""
Result records returned from a tally and the aggregation step that assembles them.

Everything here is immutable. Round results are created as each round completes
and a TallyResult is assembled once the round loop has terminated.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Tuple

import dataclasses
import json
import types

from rcv_tally.candidates import Candidate


@dataclasses.dataclass(frozen=True)
class CandidateResult:
    """Vote count and whole percentage for one candidate in one round."""
    count: int
    percentage: int

    def to_dict(self) -> Dict:
        return {"count": self.count, "percentage": self.percentage}


@dataclasses.dataclass(frozen=True)
class RoundResult:
    """Represents one round of tabulation.

    `results` holds (candidate name, CandidateResult) pairs in candidate order. A mapping
    may be passed in its place and is stored as pairs.
    """
    round_number: int
    total_active_ballots: int
    results: Tuple[Tuple[str, CandidateResult], ...]

    def __post_init__(self):
        pairs = self.results.items() if isinstance(self.results, Mapping) else self.results
        object.__setattr__(self, "results", tuple((name, res) for name, res in pairs))

    @property
    def candidate_results(self) -> Mapping[str, CandidateResult]:
        """Read only view of `results` keyed by candidate name."""
        return types.MappingProxyType(dict(self.results))

    def counts(self) -> Dict[str, int]:
        return {name: res.count for name, res in self.results}

    def percentages(self) -> Dict[str, int]:
        return {name: res.percentage for name, res in self.results}

    def allocated(self) -> int:
        """Ballots that counted toward a candidate this round."""
        return sum(res.count for _, res in self.results)

    def exhausted(self) -> int:
        """Ballots that entered the round active but exhausted during allocation."""
        return self.total_active_ballots - self.allocated()

    def to_dict(self) -> Dict:
        return {
            "roundNumber": self.round_number,
            "totalActiveBallots": self.total_active_ballots,
            "candidateResults": {name: res.to_dict() for name, res in self.results},
        }


@dataclasses.dataclass(frozen=True)
class CandidateSnapshot:
    name: str
    status: str
    current_round_votes: int
    current_round_percentage: int

    @classmethod
    def from_candidate(cls, candidate: Candidate) -> CandidateSnapshot:
        # eliminated candidates report 0/0, as they do in every round after elimination
        if candidate.status == Candidate.ELIMINATED:
            return cls(name=candidate.name, status=candidate.status, current_round_votes=0, current_round_percentage=0)
        return cls(
            name=candidate.name,
            status=candidate.status,
            current_round_votes=candidate.current_round_votes,
            current_round_percentage=candidate.current_round_percentage,
        )

    @property
    def is_active(self) -> bool:
        return self.status == Candidate.ACTIVE

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "status": self.status,
            "currentRoundVotes": self.current_round_votes,
            "currentRoundPercentage": self.current_round_percentage,
        }


@dataclasses.dataclass(frozen=True)
class TallyResult:
    """
    Complete outcome of one tally.

    `winners` is normally a single name. It is empty if no candidate ever reached a
    majority and holds more than one name only if several candidates reached the
    threshold in the same round.
    """
    rounds: Tuple[RoundResult, ...]
    winners: Tuple[str, ...]
    candidates: Tuple[CandidateSnapshot, ...]

    def n_rounds(self) -> int:
        return len(self.rounds)

    def get_round(self, round_num: int) -> RoundResult:
        """Return the result of round `round_num` (1-based)."""
        if round_num < 1 or round_num > len(self.rounds):
            raise IndexError(f"round {round_num} out of range, tally has {len(self.rounds)} rounds")
        return self.rounds[round_num - 1]

    def candidate_names(self) -> List[str]:
        return [c.name for c in self.candidates]

    def to_dict(self) -> Dict:
        return {
            "rounds": [rnd.to_dict() for rnd in self.rounds],
            "winners": list(self.winners),
            "candidates": [c.to_dict() for c in self.candidates],
        }

    def to_json(self, **kwargs) -> str:
        return json.dumps(self.to_dict(), **kwargs)


def aggregate(
    rounds: Iterable[RoundResult],
    winners: Iterable[str],
    candidates: Iterable[Candidate],
) -> TallyResult:
    """Assemble the final TallyResult.

    Candidates are copied into snapshots, the live Candidate objects are only read.
    Eliminated candidates are snapshotted with 0 votes and 0%.

    :param rounds: round results in the order they were computed
    :param winners: winning candidate names
    :param candidates: candidate records in their post-tabulation state
    :rtype: TallyResult
    """
    return TallyResult(
        rounds=tuple(rounds),
        winners=tuple(winners),
        candidates=tuple(CandidateSnapshot.from_candidate(c) for c in candidates),
    )
