import pathlib

from typing import (Any, List, Union, Callable, Dict, Mapping)

# used in parser function
Path = Union[str, pathlib.Path]

# one (candidate, rank) entry of a raw ballot, e.x. {'candidate': 'Tabasco', 'rank': 2}
RawRanking = Mapping[str, Any]

# raw ballot as produced by the ballot collection side, e.x. {'voter_id': 'Sally Ride', 'rankings': [...]}
RawBallot = Mapping[str, Any]

# returned from parser functions, {'candidates': [...], 'ballots': [...]}
ElectionDict = Dict[str, List]

# returned from parser module, get_parser_dict
ParserDict = Dict[str, Callable[..., ElectionDict]]
