"""Key value matching rules.

Decides whether two raw cell values should be treated as the same entity
key. Rules are applied in a fixed order and the first one that applies
decides the outcome:

1. Both values empty → no match (keyless rows never collapse).
2. Exact string equality → match.
3. Both numeric → match iff numerically equal.
4. Either a short code (< 5 chars) → match iff equal ignoring case.
5. Otherwise → match iff similarity >= threshold.
"""

import math
import re
from typing import Any

from tabmerge.matching.similarity import similarity

__all__ = ["SHORT_CODE_LENGTH", "coerce_key", "parse_number", "is_match"]

# Strings shorter than this are compared exactly (case-insensitive)
SHORT_CODE_LENGTH = 5

_DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_RADIX_PATTERN = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY_FORMS = frozenset({"Infinity", "+Infinity", "-Infinity"})


def coerce_key(value: Any) -> str:
    """Coerce a raw cell value into a comparable key string.

    Parameters
    ----------
    value : Any
        Raw cell value (string, number, bool or None).

    Returns
    -------
    str
        Stripped string form, or empty string for None.
    """
    if value is None:
        return ""
    return str(value).strip()


def parse_number(text: str) -> float | None:
    """Parse a string as a number, rejecting partial parses.

    Parameters
    ----------
    text : str
        Stripped key string.

    Returns
    -------
    float | None
        Parsed value, or None if the whole string is not a number.

    Notes
    -----
    Accepted forms are ASCII decimal or scientific notation (``7``,
    ``-1.5``, ``.5``, ``1e3``), unsigned ``0x``/``0o``/``0b`` integer
    literals and ``Infinity`` with an optional sign. Everything else,
    including ``nan``, ``inf``, digit-group underscores and non-ASCII
    digits, is not numeric.
    """
    if _DECIMAL_PATTERN.fullmatch(text):
        return float(text)
    if _RADIX_PATTERN.fullmatch(text):
        try:
            return float(int(text, 0))
        except OverflowError:
            return math.inf
    if text in _INFINITY_FORMS:
        return float(text)
    return None


def is_match(value_a: Any, value_b: Any, threshold: float) -> bool:
    """Decide whether two key values refer to the same entity.

    Parameters
    ----------
    value_a : Any
        First raw key value.
    value_b : Any
        Second raw key value.
    threshold : float
        Minimum similarity for fuzzy matching of long strings.

    Returns
    -------
    bool
        True if the values match.

    Examples
    --------
        >>> is_match("7", "007", 0.9)
        True
        >>> is_match("AB", "ab", 0.9)
        True
        >>> is_match("", "", 0.5)
        False
    """
    s1 = coerce_key(value_a)
    s2 = coerce_key(value_b)

    if not s1 and not s2:
        return False

    if s1 == s2:
        return True

    n1 = parse_number(s1)
    n2 = parse_number(s2)
    if n1 is not None and n2 is not None:
        return n1 == n2

    if len(s1) < SHORT_CODE_LENGTH or len(s2) < SHORT_CODE_LENGTH:
        return s1.lower() == s2.lower()

    return similarity(s1, s2) >= threshold
