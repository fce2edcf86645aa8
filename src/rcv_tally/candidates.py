"""
Contains Candidate class
"""

from __future__ import annotations
from typing import Dict, Iterable, List


class Candidate:
    """One registered candidate and its standing in the current round."""

    ACTIVE = "active"
    ELIMINATED = "eliminated"

    def __init__(self, name: str) -> None:
        """Constructor. New candidates start active with no votes.

        :param name: Unique candidate name
        :type name: str
        :raises TypeError: if name is not a string
        """
        if not isinstance(name, str):
            raise TypeError(f"candidate name must be a string, got {type(name).__name__}")

        self.name = name
        self.status = Candidate.ACTIVE
        self.current_round_votes = 0
        self.current_round_percentage = 0

    def __repr__(self) -> str:
        return f"Candidate({self.name!r}, status={self.status!r}, votes={self.current_round_votes})"

    @property
    def is_active(self) -> bool:
        return self.status == Candidate.ACTIVE

    def reset(self) -> None:
        """Put the candidate back at the start of a fresh tally."""
        self.status = Candidate.ACTIVE
        self.reset_round()

    def reset_round(self) -> None:
        self.current_round_votes = 0
        self.current_round_percentage = 0

    def eliminate(self) -> None:
        # status never reverts within a tally
        self.status = Candidate.ELIMINATED

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "status": self.status,
            "currentRoundVotes": self.current_round_votes,
            "currentRoundPercentage": self.current_round_percentage,
        }


def register(names: Iterable[str]) -> List[Candidate]:
    """Create a fresh list of active candidates, one per name, in the order given.

    :param names: Candidate names. Must be unique.
    :type names: Iterable[str]
    :raises ValueError: if a name appears more than once
    :return: list of Candidate objects
    :rtype: List[Candidate]
    """
    candidates = []
    seen = set()
    for name in names:
        if name in seen:
            raise ValueError(f"candidate {name!r} is registered more than once")
        seen.add(name)
        candidates.append(Candidate(name))
    return candidates
