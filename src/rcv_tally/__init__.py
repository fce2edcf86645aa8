"""
Instant runoff (ranked choice) tabulation.

>>> from rcv_tally import tally
>>> result = tally(["A", "B"], [{"voter_id": "1", "rankings": [{"candidate": "A", "rank": 1}]}])
>>> result.winners
('A',)
"""

from rcv_tally.ballots import DO_NOT_RANK, Ballot, Ranking, prepare
from rcv_tally.candidates import Candidate
from rcv_tally.rcv import RCV, BatchElimination, SingleElimination, get_rcv_dict
from rcv_tally.results import CandidateResult, CandidateSnapshot, RoundResult, TallyResult
from rcv_tally.tabulation import tally

__version__ = "0.1.0"

__all__ = [
    "DO_NOT_RANK",
    "Ballot",
    "Ranking",
    "prepare",
    "Candidate",
    "RCV",
    "BatchElimination",
    "SingleElimination",
    "get_rcv_dict",
    "CandidateResult",
    "CandidateSnapshot",
    "RoundResult",
    "TallyResult",
    "tally",
]
