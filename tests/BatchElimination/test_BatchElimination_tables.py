import json

import pandas as pd
import pytest

from rcv_tally.rcv.base import RCV
from rcv_tally.rcv.variants import BatchElimination


def _ballot(voter_id, *names, dnr=()):
    rankings = [{"candidate": name, "rank": rank} for rank, name in enumerate(names, start=1)]
    rankings += [{"candidate": name, "rank": 0} for name in dnr]
    return {"voter_id": voter_id, "rankings": rankings}


contest = {
    "candidates": ["A", "B", "C", "D"],
    "ballots": [
        _ballot("1", "A", "B"),
        _ballot("2", "A", "B"),
        _ballot("3", "A", "C"),
        _ballot("4", "A"),
        _ballot("5", "A", "D"),
        _ballot("6", "B", "A"),
        _ballot("7", "B", "C"),
        _ballot("8", "B"),
        _ballot("9", "B", "D", "C"),
        _ballot("10", "C", "B"),
        _ballot("11", "C", "B", "A"),
        _ballot("12", "D", "C"),
    ],
}


def test_round_by_round_table():
    rcv = BatchElimination(**contest)

    expected = pd.DataFrame(
        {
            "candidate": ["B", "A", "C", "D", "exhaust", "colsum"],
            "r1_count": [4, 5, 2, 1, 0, 12],
            "r1_percent": [33, 42, 17, 8, "NA", "NA"],
            "r1_transfer": [0, 0, 1, -1, 0, 0],
            "r2_count": [4, 5, 3, 0, 0, 12],
            "r2_percent": [33, 42, 25, 0, "NA", "NA"],
            "r2_transfer": [2, 0, -3, 0, 1, 0],
            "r3_count": [6, 5, 0, 0, 1, 12],
            "r3_percent": [50, 42, 0, 0, "NA", "NA"],
            "r3_transfer": ["NA", "NA", "NA", "NA", "NA", "NA"],
        }
    )

    df = rcv.get_round_by_round_table()

    assert df.columns.tolist() == expected.columns.tolist()
    assert df.fillna("NA").to_dict("records") == expected.to_dict("records")


def test_round_by_round_table_colsum_counts_every_ballot():
    rcv = BatchElimination(**contest)
    df = rcv.get_round_by_round_table().set_index("candidate")

    for rnd in range(1, rcv.n_rounds() + 1):
        assert df.loc["colsum", f"r{rnd}_count"] == len(contest["ballots"])


def test_round_by_round_dict():
    rcv = BatchElimination(**contest)

    expected = {
        "config": {"contest": "testville mayor", "rcv_type": "BatchElimination", "threshold": "50%"},
        "results": [
            {
                "round": 1,
                "tally": {"A": "5", "B": "4", "C": "2", "D": "1"},
                "tallyResults": [{"eliminated": "D", "transfers": {"C": "1"}}],
            },
            {
                "round": 2,
                "tally": {"A": "5", "B": "4", "C": "3"},
                "tallyResults": [{"eliminated": "C", "transfers": {"B": "2", "exhausted": "1"}}],
            },
            {
                "round": 3,
                "tally": {"A": "5", "B": "6"},
                "tallyResults": [{"elected": "B", "transfers": {}}],
            },
        ],
    }

    assert rcv.get_round_by_round_dict(contest="testville mayor") == expected


def test_candidate_outcomes_table():
    rcv = BatchElimination(**contest)

    expected = [
        {"candidate": "B", "round_elected": 3, "round_eliminated": "NA", "first_round_votes": 4, "final_votes": 6},
        {"candidate": "A", "round_elected": "NA", "round_eliminated": "NA", "first_round_votes": 5, "final_votes": 5},
        {"candidate": "C", "round_elected": "NA", "round_eliminated": 2, "first_round_votes": 2, "final_votes": 3},
        {"candidate": "D", "round_elected": "NA", "round_eliminated": 1, "first_round_votes": 1, "final_votes": 1},
    ]

    assert rcv.get_candidate_outcomes_table().fillna("NA").to_dict("records") == expected


def test_rank_usage_table():
    rcv = BatchElimination(**contest)

    expected = [
        {"candidate": "A", "first_choice_percent": 42, "rank_1": 5, "rank_2": 1, "rank_3": 1, "do_not_rank": 0},
        {"candidate": "B", "first_choice_percent": 33, "rank_1": 4, "rank_2": 4, "rank_3": 0, "do_not_rank": 0},
        {"candidate": "C", "first_choice_percent": 17, "rank_1": 2, "rank_2": 3, "rank_3": 1, "do_not_rank": 0},
        {"candidate": "D", "first_choice_percent": 8, "rank_1": 1, "rank_2": 2, "rank_3": 0, "do_not_rank": 0},
    ]

    assert rcv.get_rank_usage_table().to_dict("records") == expected


def test_rank_usage_table_do_not_rank():
    rcv = BatchElimination(["A", "B"], [_ballot("1", "A", dnr=["B"]), _ballot("2", "B", "A")])

    expected = [
        {"candidate": "A", "first_choice_percent": 50, "rank_1": 1, "rank_2": 1, "do_not_rank": 0},
        {"candidate": "B", "first_choice_percent": 50, "rank_1": 1, "rank_2": 0, "do_not_rank": 1},
    ]

    assert rcv.get_rank_usage_table().to_dict("records") == expected


params = [
    ("winner", "B"),
    ("number_of_winners", 1),
    ("number_of_rounds", 3),
    ("number_of_candidates", 4),
    ("number_of_ballots", 12),
    ("first_round_active_votes", 12),
    ("final_round_active_votes", 12),
    ("total_exhausted", 1),
    ("first_round_winner_vote", 4),
    ("first_round_winner_percent", 33),
    ("first_round_winner_place", 2),
    ("final_round_winner_vote", 6),
    ("final_round_winner_percent", 50),
    ("come_from_behind", True),
]


@pytest.mark.parametrize("stat, expected", params)
def test_stats(stat, expected):
    rcv = BatchElimination(**contest)
    assert rcv.get_stats()[stat].item() == expected


def test_stats_no_winner():
    rcv = BatchElimination(["A", "B", "C"], [_ballot("1", "A"), _ballot("2", "B"), _ballot("3", "C")])
    stats = rcv.get_stats()

    assert stats["winner"].item() == ""
    assert stats["number_of_winners"].item() == 0
    assert stats["first_round_winner_vote"].isna().all()
    assert stats["come_from_behind"].isna().all()


def test_write_tables(tmp_path):
    rcv = BatchElimination(**contest)

    RCV.write_round_by_round_table(rcv, tmp_path, "mayor")
    RCV.write_round_by_round_json(rcv, tmp_path, "mayor")
    RCV.write_candidate_outcomes(rcv, tmp_path, "mayor")
    RCV.write_rank_usage_table(rcv, tmp_path, "mayor")

    df = pd.read_csv(tmp_path / "round_by_round_table" / "mayor.csv")
    assert df["candidate"].tolist() == ["B", "A", "C", "D", "exhaust", "colsum"]

    with open(tmp_path / "round_by_round_json" / "mayor.json") as json_file:
        rbr = json.load(json_file)
    assert rbr["config"]["contest"] == "mayor"
    assert len(rbr["results"]) == 3

    assert (tmp_path / "candidate_outcomes" / "mayor.csv").exists()
    assert pd.read_csv(tmp_path / "rank_usage" / "mayor.csv")["candidate"].tolist() == ["A", "B", "C", "D"]
