from rcv_tally.rcv.base import RCV
from rcv_tally.rcv.variants import BatchElimination, SingleElimination, get_rcv_dict

__all__ = [
    "RCV",
    "BatchElimination",
    "SingleElimination",
    "get_rcv_dict",
]
