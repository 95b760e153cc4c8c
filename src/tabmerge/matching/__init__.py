"""Key value matching.

This package provides the pure comparison functions the merge engine uses
to decide whether two key values identify the same entity.
"""

from tabmerge.matching.matcher import (
    SHORT_CODE_LENGTH,
    coerce_key,
    is_match,
    parse_number,
)
from tabmerge.matching.similarity import levenshtein_distance, similarity

__all__ = [
    "SHORT_CODE_LENGTH",
    "coerce_key",
    "is_match",
    "levenshtein_distance",
    "parse_number",
    "similarity",
]
