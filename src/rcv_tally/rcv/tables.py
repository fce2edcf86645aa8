"""Contains RCV_tables class which is added into RCV.
"""

from typing import Dict, List

import collections

import pandas as pd

from rcv_tally import util
from rcv_tally.ballots import DO_NOT_RANK


class RCV_tables:
    """Extra methods added into RCV class"""

    def _ordered_candidate_names(self) -> List[str]:
        """
        Candidate names ordered for display:
        winners in ascending order of round won,
        followed by candidates never eliminated,
        followed by losers in descending order of round lost.
        Ties are ordered by first round count, then name.
        """
        first_round_dict = self.get_round_tally_dict(1) if self.n_rounds() else {}

        def order(d):
            if d["round_elected"] is not None:
                key = (0, d["round_elected"])
            elif d["round_eliminated"] is None:
                key = (1, 0)
            else:
                key = (2, -1 * d["round_eliminated"])
            return key + (-1 * first_round_dict.get(d["name"], 0), d["name"])

        return [d["name"] for d in sorted(self.get_candidate_outcomes(), key=order)]

    def _round_exhausted_counts(self) -> List[int]:
        """Cumulative number of ballots counting toward nobody, per round."""
        n_ballots = len(self.get_initial_ballots())
        return [n_ballots - rnd.allocated() for rnd in self.get_result().rounds]

    def get_round_by_round_table(self) -> pd.DataFrame:
        """Create a table containing round by round details for the tabulation.

        One row per candidate, plus an 'exhaust' row and a 'colsum' row. For each round n
        the columns r{n}_count, r{n}_percent and r{n}_transfer hold the round count, the
        whole percentage of active ballots, and the change in count going into the next round.

        :return: round by round table
        :rtype: pd.DataFrame
        """

        num_rounds = self.n_rounds()
        row_names = self._ordered_candidate_names() + ["exhaust"]

        rows = {name: {"candidate": name} for name in row_names + ["colsum"]}
        exhausted = self._round_exhausted_counts()

        # loop through rounds
        for rnd in range(1, num_rounds + 1):

            rnd_info = self.get_round_tally_dict(rnd)
            rnd_info["exhaust"] = exhausted[rnd - 1]
            rnd_percent = self.get_result().get_round(rnd).percentages()

            next_info = None
            if rnd < num_rounds:
                next_info = self.get_round_tally_dict(rnd + 1)
                next_info["exhaust"] = exhausted[rnd]

            rnd_count_col = f"r{rnd}_count"
            rnd_percent_col = f"r{rnd}_percent"
            rnd_transfer_col = f"r{rnd}_transfer"

            # add round data
            for cand in row_names:
                rows[cand][rnd_count_col] = rnd_info[cand]
                rows[cand][rnd_percent_col] = rnd_percent.get(cand, util.NAN)
                rows[cand][rnd_transfer_col] = next_info[cand] - rnd_info[cand] if next_info is not None else util.NAN

            # sum round columns
            rows["colsum"][rnd_count_col] = sum(rnd_info[cand] for cand in row_names)
            rows["colsum"][rnd_percent_col] = util.NAN
            rows["colsum"][rnd_transfer_col] = (
                sum(next_info[cand] - rnd_info[cand] for cand in row_names) if next_info is not None else util.NAN
            )

        rcv_df = pd.DataFrame(list(rows.values()))

        # convert from decimal to float
        value_cols = [col for col in rcv_df.columns if col != "candidate"]
        if value_cols:
            rcv_df[value_cols] = rcv_df[value_cols].astype(float)

        return rcv_df

    def get_round_by_round_dict(self, contest: str = "") -> Dict:
        """Create a dictionary containing election round by round information that matches the nesting structure of RCVIS upload format.

        :param contest: Contest name stored in the config section, defaults to ""
        :type contest: str, optional
        :return: Dictionary containing election round by round details
        :rtype: Dict
        """

        n_rounds = self.n_rounds()
        outcomes = self.get_candidate_outcomes()

        json_dict = {
            "config": {
                "contest": contest,
                "rcv_type": self.get_variant_name(self),
                "threshold": "50%",
            },
            "results": [],
        }

        for round_num in range(1, n_rounds + 1):

            tally_dict = {
                cand: str(count)
                for cand, count in self.get_round_tally_dict(round_num, only_round_active_candidates=True).items()
            }
            transfer_dicts = self.get_round_transfer_dict(round_num)
            transfer_list = []

            # who had an outcome this round
            for d in outcomes:
                if d["round_elected"] == round_num:
                    transfer_list.append({"elected": d["name"], "transfers": {}})

            for d in outcomes:
                if d["round_eliminated"] == round_num:
                    round_transfer = {key: str(val) for key, val in transfer_dicts[d["name"]].items()}
                    if "exhaust" in round_transfer:  # small rename
                        round_transfer["exhausted"] = round_transfer.pop("exhaust")
                    transfer_list.append({"eliminated": d["name"], "transfers": round_transfer})

            json_dict["results"].append(
                {
                    "round": round_num,
                    "tally": tally_dict,
                    "tallyResults": transfer_list,
                }
            )

        return json_dict

    def get_candidate_outcomes_table(self) -> pd.DataFrame:
        """Table of candidate outcomes with first and last counted votes.

        :return: One row per candidate, in display order
        :rtype: pd.DataFrame
        """
        outcomes = {d["name"]: d for d in self.get_candidate_outcomes()}
        rows = []
        for name in self._ordered_candidate_names():
            d = outcomes[name]
            last_round = d["round_elected"] or d["round_eliminated"] or self.n_rounds()
            rows.append({
                "candidate": name,
                "round_elected": d["round_elected"],
                "round_eliminated": d["round_eliminated"],
                "first_round_votes": self.get_round_tally_dict(1)[name] if self.n_rounds() else 0,
                "final_votes": self.get_round_tally_dict(last_round)[name] if last_round else 0,
            })
        return pd.DataFrame(rows, columns=[
            "candidate", "round_elected", "round_eliminated", "first_round_votes", "final_votes"
        ])

    def get_rank_usage_table(self) -> pd.DataFrame:
        """
        Count of ballots giving each candidate each rank, as entered and before any
        tabulation. Columns are 'candidate', 'first_choice_percent' (share of all first
        choices, whole percent), 'rank_1' through 'rank_k' for the highest rank used on
        any ballot, and 'do_not_rank'.

        :rtype: pd.DataFrame
        """
        rank_counts = collections.defaultdict(collections.Counter)
        max_rank = 0
        for ballot in self.get_initial_ballots():
            for ranking in ballot.rankings:
                rank_counts[ranking.candidate][ranking.rank] += 1
                max_rank = max(max_rank, ranking.rank)

        total_firsts = sum(counts[1] for counts in rank_counts.values())

        rows = []
        for name in [c.name for c in self.get_result().candidates]:
            counts = rank_counts[name]
            row = {
                "candidate": name,
                "first_choice_percent": util.percent(counts[1], total_firsts),
            }
            row.update({f"rank_{i}": counts[i] for i in range(1, max_rank + 1)})
            row["do_not_rank"] = counts[DO_NOT_RANK]
            rows.append(row)

        columns = ["candidate", "first_choice_percent"] + [f"rank_{i}" for i in range(1, max_rank + 1)] + ["do_not_rank"]
        return pd.DataFrame(rows, columns=columns)
