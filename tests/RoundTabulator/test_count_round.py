import pytest

from rcv_tally.ballots import Ballot, prepare
from rcv_tally.candidates import register
from rcv_tally.rcv.rounds import allocate, count_round


def _ballot(voter_id, *names, dnr=()):
    rankings = [{"candidate": name, "rank": rank} for rank, name in enumerate(names, start=1)]
    rankings += [{"candidate": name, "rank": 0} for name in dnr]
    return {"voter_id": voter_id, "rankings": rankings}


params = [
    (
        {
            "input": {
                "candidates": ["A", "B", "C"],
                "eliminated": [],
                "ballots": [_ballot("1", "A", "B"), _ballot("2", "B"), _ballot("3", "C", "A")],
            },
            "expected": {
                "total_active_ballots": 3,
                "counts": {"A": 1, "B": 1, "C": 1},
                "percentages": {"A": 33, "B": 33, "C": 33},
                "exhausted": [],
            },
        }
    ),
    (
        {
            "input": {
                "candidates": ["A", "B", "C"],
                "eliminated": ["C"],
                "ballots": [_ballot("1", "A", "B"), _ballot("2", "B"), _ballot("3", "C", "A")],
            },
            "expected": {
                "total_active_ballots": 3,
                "counts": {"A": 2, "B": 1, "C": 0},
                "percentages": {"A": 67, "B": 33, "C": 0},
                "exhausted": [],
            },
        }
    ),
    (
        {
            "input": {
                "candidates": ["A", "B", "C"],
                "eliminated": ["B"],
                "ballots": [_ballot("1", "A", "B"), _ballot("2", "B"), _ballot("3", "C", dnr=["A"])],
            },
            "expected": {
                "total_active_ballots": 3,
                "counts": {"A": 1, "B": 0, "C": 1},
                "percentages": {"A": 33, "B": 0, "C": 33},
                "exhausted": ["2"],
            },
        }
    ),
    (
        {
            "input": {
                "candidates": ["A", "B", "C"],
                "eliminated": ["C"],
                "ballots": [_ballot("1", "A"), _ballot("2", "C", dnr=["A", "B"])],
            },
            "expected": {
                "total_active_ballots": 2,
                "counts": {"A": 1, "B": 0, "C": 0},
                "percentages": {"A": 50, "B": 0, "C": 0},
                "exhausted": ["2"],
            },
        }
    ),
    (
        {
            "input": {
                "candidates": ["A", "B"],
                "eliminated": [],
                "ballots": [],
            },
            "expected": {
                "total_active_ballots": 0,
                "counts": {"A": 0, "B": 0},
                "percentages": {"A": 0, "B": 0},
                "exhausted": [],
            },
        }
    ),
    (
        {
            "input": {
                "candidates": ["A", "B"],
                "eliminated": [],
                "ballots": [_ballot(str(i), "A") for i in range(7)] + [_ballot("8", "B")],
            },
            "expected": {
                "total_active_ballots": 8,
                "counts": {"A": 7, "B": 1},
                "percentages": {"A": 88, "B": 13},
                "exhausted": [],
            },
        }
    ),
]


@pytest.mark.parametrize("param", params)
def test_count_round(param):
    candidates = register(param["input"]["candidates"])
    for c in candidates:
        if c.name in param["input"]["eliminated"]:
            c.eliminate()
    ballots = prepare(param["input"]["ballots"])

    rnd = count_round(candidates, ballots, 1)

    assert rnd.round_number == 1
    assert rnd.total_active_ballots == param["expected"]["total_active_ballots"]
    assert rnd.counts() == param["expected"]["counts"]
    assert rnd.percentages() == param["expected"]["percentages"]
    assert [b.voter_id for b in ballots if b.status == Ballot.EXHAUSTED] == param["expected"]["exhausted"]

    # candidate records carry the round values
    assert {c.name: c.current_round_votes for c in candidates} == param["expected"]["counts"]
    assert rnd.allocated() + rnd.exhausted() == rnd.total_active_ballots


def test_exhausted_ballots_are_not_counted():
    candidates = register(["A", "B"])
    ballots = prepare([_ballot("1", "A"), _ballot("2", "B")])
    ballots[1].exhaust()

    rnd = count_round(candidates, ballots, 2)

    assert rnd.total_active_ballots == 1
    assert rnd.counts() == {"A": 1, "B": 0}
    assert rnd.percentages() == {"A": 100, "B": 0}


def test_allocate_resumes_from_last_position():
    candidates = register(["A", "B", "C"])
    by_name = {c.name: c for c in candidates}
    ballot = prepare([_ballot("1", "A", "B", "C")])[0]

    assert allocate(ballot, by_name) == "A"
    assert ballot.current_rank_index == 0

    by_name["A"].eliminate()
    assert allocate(ballot, by_name) == "B"
    assert ballot.current_rank_index == 1

    by_name["B"].eliminate()
    by_name["C"].eliminate()
    assert allocate(ballot, by_name) is None
    assert not ballot.is_active


def test_allocate_stops_at_do_not_rank():
    candidates = register(["A", "B"])
    by_name = {c.name: c for c in candidates}
    ballot = prepare([_ballot("1", "A", dnr=["B"])])[0]

    by_name["A"].eliminate()

    # B is active but was not ranked
    assert allocate(ballot, by_name) is None
    assert ballot.status == Ballot.EXHAUSTED


def test_unregistered_candidate():
    candidates = register(["A"])
    ballots = prepare([_ballot("1", "Z", "A")])

    with pytest.raises(KeyError):
        count_round(candidates, ballots, 1)
