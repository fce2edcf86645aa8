import pytest

from rcv_tally.validate import (
    are_sequential,
    dedupe_voters,
    has_duplicates,
    validate_ballot,
    validate_candidates,
    validate_election,
)

candidates = ["A", "B", "C"]


def _ballot(voter_id, **ranks):
    return {"voter_id": voter_id, "rankings": [{"candidate": c, "rank": r} for c, r in ranks.items()]}


params = [
    ([1, 2, 3], True),
    ([3, 1, 2], True),
    ([1, 2, 0, 0], True),
    ([], True),
    ([0], True),
    ([2, 3], False),
    ([1, 3], False),
]


@pytest.mark.parametrize("ranks, expected", params)
def test_are_sequential(ranks, expected):
    assert are_sequential(ranks) == expected


def test_has_duplicates():
    assert has_duplicates(["A", "B", "A"])
    assert not has_duplicates(["A", "B"])


params = [
    _ballot("1", A=1, B=2, C=3),
    _ballot("2", B=1),
    _ballot("3", A=0, B=1, C=0),
    _ballot("4", A=0),
    _ballot("5", C=2, A=1),
    _ballot("6"),
]


@pytest.mark.parametrize("ballot", params)
def test_valid_ballots(ballot):
    validate_ballot(ballot, candidates)


params = [
    (ValueError, {"voter_id": "2", "rankings": [{"candidate": "A", "rank": 1}, {"candidate": "A", "rank": 2}]}),
    (ValueError, _ballot("3", A=1, Z=2)),
    (ValueError, _ballot("4", A=1, B=1)),
    (ValueError, _ballot("5", A=1, B=3)),
    (ValueError, _ballot("6", A=2)),
    (ValueError, _ballot("7", A=-1)),
    (ValueError, _ballot("8", A=1.5)),
    (ValueError, _ballot("9", A="1")),
    (ValueError, _ballot("10", A=True)),
]


@pytest.mark.parametrize("error_type, ballot", params)
def test_invalid_ballots(error_type, ballot):
    with pytest.raises(error_type):
        validate_ballot(ballot, candidates)


params = [
    (TypeError, ["A", 1]),
    (ValueError, ["A", ""]),
    (ValueError, ["A", "  "]),
    (ValueError, ["A", "B", "A"]),
]


@pytest.mark.parametrize("error_type, names", params)
def test_invalid_candidates(error_type, names):
    with pytest.raises(error_type):
        validate_candidates(names)


def test_dedupe_voters_keeps_latest():
    first = _ballot("Sally Ride", A=1)
    other = _ballot("Mae Jemison", B=1)
    latest = _ballot("Sally Ride", C=1)

    assert dedupe_voters([first, other, latest]) == [latest, other]


def test_validate_election():
    ballots = [_ballot("1", A=1), _ballot("2", B=1), _ballot("1", C=1, A=2)]
    assert validate_election(candidates, ballots) == [ballots[2], ballots[1]]

    with pytest.raises(ValueError):
        validate_election(candidates, [_ballot("1", A=2)])
