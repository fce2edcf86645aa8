from typing import Dict, Type

import logging

from rcv_tally.rcv.base import RCV

_log = logging.getLogger(__name__)


def get_rcv_dict() -> Dict[str, Type[RCV]]:
    """
    Return dictionary of rcv classes, class_name: class_obj (constructor function)
    """
    return {
        'BatchElimination': BatchElimination,
        'SingleElimination': SingleElimination,
    }


class BatchElimination(RCV):
    """
    Default instant runoff contest.
    - Winner is any candidate reaching 50% of the active round ballots.
    - Every candidate tied at the lowest round count is eliminated together.
    """
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)

    def _set_round_losers(self) -> None:
        """
        This function should set self._round_losers to the list of candidates eliminated this round

        rules:
        - all active candidates tied at the minimum round count
        """
        self._round_losers = self._lowest_candidates()


class SingleElimination(RCV):
    """
    Instant runoff contest eliminating exactly one candidate per round.
    - Winner rules are the same as BatchElimination.
    - Ties at the lowest round count are broken by looking back through earlier rounds,
      latest first, and eliminating the tied candidate with the fewest votes in the most
      recent round where the tied candidates differ.
    - A tie that persists through every round eliminates the last candidate in alpha order.
    """
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)

    def _set_round_losers(self) -> None:
        tied = self._lowest_candidates()

        # look back through prior rounds for a difference
        for prior in reversed(self._rounds[:-1]):
            if len(tied) == 1:
                break
            prior_counts = prior.counts()
            prior_min = min(prior_counts[cand] for cand in tied)
            tied = [cand for cand in tied if prior_counts[cand] == prior_min]

        if len(tied) > 1:
            _log.debug("round %d: unbroken tie between %s, eliminating last in alpha order", self._round_num, tied)

        self._round_losers = [sorted(tied)[-1]]
