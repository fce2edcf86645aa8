"""
Single call entry point for tabulating one contest.
"""
from typing import Iterable, Type, Union

from rcv_tally.ballots import Ballot
from rcv_tally.package_types import RawBallot
from rcv_tally.rcv import RCV, get_rcv_dict
from rcv_tally.results import TallyResult


def get_rcv_class(rcv_type: Union[str, Type[RCV]]) -> Type[RCV]:
    """Resolve a variant name from :func:`rcv_tally.rcv.get_rcv_dict` to its class.

    :raises RuntimeError: if the name is not a known variant
    """
    if isinstance(rcv_type, type) and issubclass(rcv_type, RCV):
        return rcv_type

    rcv_dict = get_rcv_dict()
    if rcv_type not in rcv_dict:
        raise RuntimeError(f"unknown rcv_type {rcv_type!r}, must be one of {sorted(rcv_dict)}")
    return rcv_dict[rcv_type]


def tally(
    candidates: Iterable[str],
    ballots: Iterable[Union[RawBallot, Ballot]],
    rcv_type: Union[str, Type[RCV]] = "BatchElimination",
) -> TallyResult:
    """Tabulate one instant runoff contest.

    Each call works on its own copies of the candidate and ballot records, so the
    inputs can be reused and separate calls never share state.

    :param candidates: Unique candidate names
    :param ballots: Raw ballots, e.x. ``{'voter_id': 'Sally Ride', 'rankings': [{'candidate': 'Tabasco', 'rank': 1}]}``
    :param rcv_type: Variant name or RCV subclass, defaults to 'BatchElimination'
    :rtype: TallyResult
    """
    return get_rcv_class(rcv_type)(candidates, ballots).get_result()
