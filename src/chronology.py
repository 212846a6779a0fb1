"""
Chronological ordering of semester groups.

Sessions ("2023/2024", "2024/2025", ...) are compared with a natural,
numeric-aware comparison: the text is split into alternating non-digit and
digit runs, digit runs compare by value and text runs compare without regard
to case. The semester label breaks ties inside a session using a fixed rank
table; labels outside the table rank last.
"""

import re
from functools import cmp_to_key
from typing import Iterable, List, Tuple

SEMESTER_ORDER = {
    "FIRST SEMESTER": 1,
    "SECOND SEMESTER": 2,
}

# Rank for any label not in SEMESTER_ORDER
UNRANKED_SEMESTER = 99

_DIGIT_RUNS = re.compile(r"(\d+)")


def natural_key(text: str) -> Tuple:
    """
    Split text into a comparable tuple of text and numeric runs

    re.split with a capturing group always yields text at even positions and
    digits at odd positions, so two keys never compare an int with a str.
    """
    parts = _DIGIT_RUNS.split(str(text))
    return tuple(
        int(part) if index % 2 else part.casefold()
        for index, part in enumerate(parts)
    )


def compare_natural(left: str, right: str) -> int:
    """Three-way natural comparison with an exact-string tiebreak"""
    left_key, right_key = natural_key(left), natural_key(right)
    if left_key != right_key:
        return -1 if left_key < right_key else 1
    if left != right:
        return -1 if left < right else 1
    return 0


def semester_rank(semester: str) -> int:
    """Position of a semester label within its session"""
    return SEMESTER_ORDER.get(str(semester).strip().upper(), UNRANKED_SEMESTER)


def chronological_key(key) -> Tuple:
    """Sort key for anything exposing .semester and .session"""
    return (
        natural_key(key.session),
        key.session,
        semester_rank(key.semester),
        key.semester,
    )


def compare_semester_keys(left, right) -> int:
    """Three-way chronological comparison of two semester keys"""
    left_key, right_key = chronological_key(left), chronological_key(right)
    if left_key == right_key:
        return 0
    return -1 if left_key < right_key else 1


def sort_semester_keys(keys: Iterable) -> List:
    """Order semester keys from earliest to latest"""
    return sorted(keys, key=cmp_to_key(compare_semester_keys))
