"""
Contains the RCV class.
Defines the round loop and adds in methods from rcv/stats.py and rcv/tables.py files.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Tuple, Type, Union

import abc
import json
import logging
import pathlib

from rcv_tally.ballots import Ballot, prepare
from rcv_tally.candidates import Candidate, register
from rcv_tally.package_types import RawBallot
from rcv_tally.rcv.rounds import count_round
from rcv_tally.rcv.stats import RCV_stats
from rcv_tally.rcv.tables import RCV_tables
from rcv_tally.results import RoundResult, TallyResult, aggregate

_log = logging.getLogger(__name__)

EXHAUST = "exhaust"


class RCV(abc.ABC, RCV_stats, RCV_tables):
    """
    Template class for single winner instant runoff tabulation. Subclasses decide which
    candidates are eliminated when no candidate reaches a majority.

    The tabulation runs in the constructor. Candidate and ballot inputs are copied,
    never modified.
    """

    @staticmethod
    def get_variant_name(rcv_obj: Type[RCV]) -> str:
        """Convenience function for batch script. Returns name of RCV class.

        :type rcv_obj: Type[RCV]
        :return: Name of class of object passed
        :rtype: str
        """
        return rcv_obj.__class__.__name__

    @staticmethod
    def write_round_by_round_table(rcv_obj: Type[RCV], save_dir: Union[str, pathlib.Path], uid: str) -> None:
        """Wrapper for `RCV.get_round_by_round_table` that writes out the table to path '{save_dir}/round_by_round_table/{uid}.csv'

        :param rcv_obj: RCV object or RCV subclass object
        :type rcv_obj: Type[RCV]
        :param save_dir: Directory path to write tables to
        :type save_dir: Union[str, pathlib.Path]
        :param uid: file name stub for the contest
        :type uid: str
        """
        save_path = pathlib.Path(save_dir) / "round_by_round_table"
        save_path.mkdir(exist_ok=True)
        rcv_obj.get_round_by_round_table().to_csv(save_path / f"{uid}.csv", index=False)

    @staticmethod
    def write_round_by_round_json(rcv_obj: Type[RCV], save_dir: Union[str, pathlib.Path], uid: str) -> None:
        """
        Wrapper for `RCV.get_round_by_round_dict` that writes out the dictionary to path '{save_dir}/round_by_round_json/{uid}.json'

        :param rcv_obj: RCV object
        :type rcv_obj: Type[RCV]
        :param save_dir: Path to create "round_by_round_json" directory and write out json files.
        :type save_dir: Union[pathlib.Path, str]
        :param uid: file name stub for the contest
        :type uid: str
        """
        save_path = pathlib.Path(save_dir) / "round_by_round_json"
        save_path.mkdir(exist_ok=True)

        with open(save_path / f"{uid}.json", "w") as outfile:
            json.dump(rcv_obj.get_round_by_round_dict(contest=uid), outfile, indent=2)

    @staticmethod
    def write_candidate_outcomes(rcv_obj: Type[RCV], save_dir: Union[str, pathlib.Path], uid: str) -> None:
        save_path = pathlib.Path(save_dir) / "candidate_outcomes"
        save_path.mkdir(exist_ok=True)
        rcv_obj.get_candidate_outcomes_table().to_csv(save_path / f"{uid}.csv", index=False)

    @staticmethod
    def write_rank_usage_table(rcv_obj: Type[RCV], save_dir: Union[str, pathlib.Path], uid: str) -> None:
        save_path = pathlib.Path(save_dir) / "rank_usage"
        save_path.mkdir(exist_ok=True)
        rcv_obj.get_rank_usage_table().to_csv(save_path / f"{uid}.csv", index=False)

    # override me
    @abc.abstractmethod
    def _set_round_losers(self) -> None:
        """
        Abstract method to be implemented by RCV variant subclass.
        This function should set self._round_losers to the list of active candidates
        to eliminate this round. Only called when no round winner was found and more
        than one candidate is still active.
        """
        pass

    def __init__(self, candidates: Iterable[str], ballots: Iterable[Union[RawBallot, Ballot]]) -> None:
        """
        Constructor. Registers candidates, prepares ballots and tabulates the contest.

        :param candidates: Unique candidate names
        :type candidates: Iterable[str]
        :param ballots: Raw ballots, see :func:`rcv_tally.ballots.prepare` for the accepted shapes
        :type ballots: Iterable[Union[RawBallot, Ballot]]
        """

        # CONTEST INPUTS
        self._candidates: List[Candidate] = register(candidates)
        self._initial_ballots: List[Ballot] = prepare(ballots)
        self._ballots: List[Ballot] = []

        # every non-final round eliminates at least one candidate
        self._max_rounds = len(self._candidates)

        # INIT STATE INFO

        # contest-level
        self._rounds: List[RoundResult] = []
        self._winners: List[str] = []
        self._stalled = False
        self._candidate_outcomes: Dict[str, Dict] = {}
        self._ballot_round_allocation: List[List[str]] = []

        # round-level
        self._round_num = 0
        self._round_winners: List[str] = []
        self._round_losers: List[str] = []

        # RUN
        self._run_contest()
        self._result = aggregate(self._rounds, self._winners, self._candidates)

    def _run_contest(self) -> None:
        # fresh state each run
        for candidate in self._candidates:
            candidate.reset()
        self._ballots = prepare(self._initial_ballots)
        self._candidate_outcomes = {
            c.name: {"name": c.name, "round_eliminated": None, "round_elected": None} for c in self._candidates
        }

        _log.info(
            "Starting %s tabulation: %d candidates, %d ballots",
            self.__class__.__name__,
            len(self._candidates),
            len(self._ballots),
        )
        self.reduce()
        _log.info("Tabulation complete after %d rounds, winners: %s", len(self._rounds), self._winners)

    def active_candidates(self) -> List[Candidate]:
        return [c for c in self._candidates if c.is_active]

    def _contest_not_complete(self) -> bool:
        """
        Return True if another round should be evaluated and False if the contest should complete.

        rules:
        - stop once a winner is found
        - stop if the last round eliminated nobody
        - stop once no candidates remain active
        - stop at the round ceiling (the number of candidates)
        """
        if self._winners or self._stalled:
            return False

        if not self.active_candidates():
            return False

        if self._round_num >= self._max_rounds:
            _log.warning("Stopping after %d rounds, round ceiling reached", self._round_num)
            return False

        return True

    def _set_round_winners(self) -> None:
        """
        Set self._round_winners to the list of candidates that won the round.

        rules:
        - winner is any active candidate with at least 50% of the round's active ballots and
          at least one vote. Two candidates can win together at exactly 50%.
        - if only one candidate remains active it wins, provided it holds any votes.
        """
        active = self.active_candidates()

        self._round_winners = [
            c.name for c in active if c.current_round_percentage >= 50 and c.current_round_votes > 0
        ]

        if not self._round_winners and len(active) == 1 and active[0].current_round_votes > 0:
            self._round_winners = [active[0].name]

    def _lowest_candidates(self) -> List[str]:
        """Names of the active candidates tied at the lowest round count."""
        active = self.active_candidates()
        loser_count = min(c.current_round_votes for c in active)
        return [c.name for c in active if c.current_round_votes == loser_count]

    def _eliminate_round_losers(self) -> None:
        for name in self._round_losers:
            candidate = next(c for c in self._candidates if c.name == name)
            candidate.eliminate()
            self._candidate_outcomes[name]["round_eliminated"] = self._round_num
            _log.debug("round %d: eliminated %s with %d votes", self._round_num, name, candidate.current_round_votes)

    def reduce(self) -> Tuple[List[RoundResult], List[str]]:
        """
        Run the rounds of the contest until a winner is found or no further progress is possible.

        :return: The list of round results and the list of winners (empty if no winner).
        :rtype: Tuple[List[RoundResult], List[str]]
        """
        while self._contest_not_complete():
            self._round_num += 1

            #############################################
            # CLEAR LAST ROUND VALUES
            self._round_winners = []
            self._round_losers = []

            #############################################
            # COUNT ROUND RESULTS
            self._rounds.append(count_round(self._candidates, self._ballots, self._round_num))
            self._ballot_round_allocation.append(
                [b.rankings[b.current_rank_index].candidate if b.is_active else EXHAUST for b in self._ballots]
            )

            #############################################
            # CHECK FOR ROUND WINNERS
            self._set_round_winners()
            if self._round_winners:
                for winner in self._round_winners:
                    self._candidate_outcomes[winner]["round_elected"] = self._round_num
                self._winners = list(self._round_winners)
                continue

            # a lone active candidate without votes cannot win and cannot be eliminated
            if len(self.active_candidates()) < 2:
                self._stalled = True
                continue

            #############################################
            # IDENTIFY AND ELIMINATE ROUND LOSERS
            self._set_round_losers()
            if not self._round_losers:
                _log.info("round %d: no candidate could be eliminated, stopping without a winner", self._round_num)
                self._stalled = True
                continue

            self._eliminate_round_losers()

        return self._rounds, self._winners

    def get_result(self) -> TallyResult:
        """Return the immutable result of the tabulation.

        :rtype: TallyResult
        """
        return self._result

    def get_candidate_outcomes(self) -> List[Dict]:
        """Return a list of dictionaries containing candidate outcome information. Keys are name, round_elected, and round_eliminated. Values for round_elected and round_eliminated are either integers indicating round numbers or None.

        :rtype: List[Dict]
        """
        return [dict(d) for d in self._candidate_outcomes.values()]

    def get_round_tally_dict(self, round_num: int, only_round_active_candidates: bool = False) -> Dict[str, int]:
        """
        Return a dictionary containing candidate names as keys and vote counts as values.

        :param round_num: Round number for which to return vote counts for.
        :type round_num: int
        :param only_round_active_candidates: If True, only candidates active at the start of the round are returned. Defaults to False
        :type only_round_active_candidates: bool, optional
        :rtype: Dict[str, int]
        """
        counts = self._result.get_round(round_num).counts()
        if only_round_active_candidates:
            counts = {
                cand: count
                for cand, count in counts.items()
                if self._candidate_outcomes[cand]["round_eliminated"] is None
                or self._candidate_outcomes[cand]["round_eliminated"] >= round_num
            }
        return counts

    def get_round_transfer_dict(self, round_num: int) -> Dict[str, Dict[str, int]]:
        """Return a dictionary describing where the ballots of candidates eliminated in `round_num` went in the next round. Keys are eliminated candidate names, values are dictionaries of receiving candidate (or 'exhaust') to ballot count.

        Candidates eliminated in the final round have empty transfer dictionaries.

        :param round_num: Round number to get transfer info for
        :type round_num: int
        :rtype: Dict[str, Dict[str, int]]
        """
        losers = [d["name"] for d in self._candidate_outcomes.values() if d["round_eliminated"] == round_num]
        transfers = {loser: {} for loser in losers}

        if round_num >= self.n_rounds():
            return transfers

        this_round = self._ballot_round_allocation[round_num - 1]
        next_round = self._ballot_round_allocation[round_num]
        for before, after in zip(this_round, next_round):
            if before in transfers:
                transfers[before][after] = transfers[before].get(after, 0) + 1

        return transfers

    def get_initial_ballots(self) -> List[Ballot]:
        return list(self._initial_ballots)

    def n_rounds(self) -> int:
        """Return the number of rounds used in tabulation.

        :rtype: int
        """
        return len(self._rounds)
