from typing import Optional

import pandas as pd


class RCV_stats:
    """
    Mixin containing all reporting stats. Can be overriden by any rcv variant.
    """

    ####################
    # OUTCOME STATS

    def _winner(self) -> str:
        '''
        The winner(s) of the election, comma separated. Empty string if no winner.
        '''
        return ", ".join(self.get_result().winners)

    def _number_of_winners(self) -> int:
        return len(self.get_result().winners)

    def _number_of_rounds(self) -> int:
        return self.n_rounds()

    def _first_winner(self) -> Optional[str]:
        winners = self.get_result().winners
        return winners[0] if winners else None

    def _first_round_active_votes(self) -> int:
        '''
        The number of ballots active at the start of the first round.
        '''
        if not self.n_rounds():
            return 0
        return self.get_result().get_round(1).total_active_ballots

    def _final_round_active_votes(self) -> int:
        '''
        The number of ballots active at the start of the final round.
        '''
        if not self.n_rounds():
            return 0
        return self.get_result().get_round(self.n_rounds()).total_active_ballots

    def _total_exhausted(self) -> int:
        '''
        Ballots that did not count toward any candidate in the final round.
        '''
        if not self.n_rounds():
            return len(self.get_initial_ballots())
        final_round = self.get_result().get_round(self.n_rounds())
        return len(self.get_initial_ballots()) - final_round.allocated()

    def _first_round_winner_vote(self) -> Optional[int]:
        winner = self._first_winner()
        if winner is None:
            return None
        return self.get_round_tally_dict(1)[winner]

    def _first_round_winner_percent(self) -> Optional[int]:
        winner = self._first_winner()
        if winner is None:
            return None
        return self.get_result().get_round(1).percentages()[winner]

    def _final_round_winner_vote(self) -> Optional[int]:
        winner = self._first_winner()
        if winner is None:
            return None
        return self.get_round_tally_dict(self.n_rounds())[winner]

    def _final_round_winner_percent(self) -> Optional[int]:
        winner = self._first_winner()
        if winner is None:
            return None
        return self.get_result().get_round(self.n_rounds()).percentages()[winner]

    def _first_round_winner_place(self) -> Optional[int]:
        '''
        Place of the winner in the first round, ties share the higher place.
        '''
        winner = self._first_winner()
        if winner is None:
            return None
        first_round = self.get_round_tally_dict(1)
        return 1 + sum(count > first_round[winner] for count in first_round.values())

    def _come_from_behind(self) -> Optional[bool]:
        """
        True if rcv winner is not first round leader.
        """
        place = self._first_round_winner_place()
        if place is None:
            return None
        return place != 1

    def get_stats(self) -> pd.DataFrame:
        """Return the contest summary statistics as a single row dataframe.

        :rtype: pd.DataFrame
        """
        stats = {
            'rcv_type': self.get_variant_name(self),
            'winner': self._winner(),
            'number_of_winners': self._number_of_winners(),
            'number_of_rounds': self._number_of_rounds(),
            'number_of_candidates': len(self.get_result().candidates),
            'number_of_ballots': len(self.get_initial_ballots()),
            'first_round_active_votes': self._first_round_active_votes(),
            'final_round_active_votes': self._final_round_active_votes(),
            'total_exhausted': self._total_exhausted(),
            'first_round_winner_vote': self._first_round_winner_vote(),
            'first_round_winner_percent': self._first_round_winner_percent(),
            'first_round_winner_place': self._first_round_winner_place(),
            'final_round_winner_vote': self._final_round_winner_vote(),
            'final_round_winner_percent': self._final_round_winner_percent(),
            'come_from_behind': self._come_from_behind(),
        }
        return pd.DataFrame({k: [v] for k, v in stats.items()})
