"""Edit-distance string similarity.

Distances come from rapidfuzz's Levenshtein implementation. All functions
are pure, deterministic and symmetric in their arguments.
"""

from rapidfuzz.distance import Levenshtein

__all__ = ["levenshtein_distance", "similarity"]


def levenshtein_distance(a: str, b: str) -> int:
    """Compute the Levenshtein edit distance between two strings.

    Parameters
    ----------
    a : str
        First string.
    b : str
        Second string.

    Returns
    -------
    int
        Minimum number of single-character insertions, deletions and
        substitutions turning ``a`` into ``b``. Comparison is case-sensitive.
    """
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Calculate normalized similarity between two strings.

    Parameters
    ----------
    a : str
        First string.
    b : str
        Second string.

    Returns
    -------
    float
        Similarity in [0.0, 1.0], where 1.0 means identical after
        lowercasing and stripping surrounding whitespace.

    Notes
    -----
    similarity = 1 - distance / max(len(a), len(b))

    Identical normalized strings return exactly 1.0 without computing the
    distance.
    """
    s1 = a.lower().strip()
    s2 = b.lower().strip()

    if s1 == s2:
        return 1.0

    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0

    return 1.0 - levenshtein_distance(s1, s2) / max_len
