#!/usr/bin/env python3
"""
GRADING - Score to letter grade to quality points
Five-point grading scale used for every course attempt

GRADE MAPPING:
70-100 = A (5.0)
60-69  = B (4.0)
50-59  = C (3.0)
45-49  = D (2.0)
40-44  = E (1.0)
0-39   = F (0.0)

ROUNDING:
- Quality points are rounded to 2 decimal places, half away from zero
- Rounded quality points are treated as exact in every downstream sum

Priority: CRITICAL - Every GPA figure starts here
"""

from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Tuple


class Grade(str, Enum):
    """Letter grades on the five-point scale"""
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"


# (minimum score, grade), evaluated highest-first
GRADE_THRESHOLDS: List[Tuple[int, Grade]] = [
    (70, Grade.A),
    (60, Grade.B),
    (50, Grade.C),
    (45, Grade.D),
    (40, Grade.E),
    (0, Grade.F),
]

GRADE_POINTS = {
    Grade.A: 5.0,
    Grade.B: 4.0,
    Grade.C: 3.0,
    Grade.D: 2.0,
    Grade.E: 1.0,
    Grade.F: 0.0,
}


def round_half_up(value: float, places: int = 2) -> float:
    """Round to a fixed number of decimal places, halves away from zero"""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_significant(value: float, figures: int = 3) -> float:
    """Round to a number of significant figures, halves away from zero"""
    if value == 0:
        return 0.0
    number = Decimal(str(value))
    places = figures - 1 - number.adjusted()
    quantum = Decimal(1).scaleb(-places)
    return float(number.quantize(quantum, rounding=ROUND_HALF_UP))


def grade_for_score(score: int) -> Grade:
    """
    Convert a validated score (0-100) to a letter grade

    Args:
        score: Integer score, already range-checked by the caller

    Returns:
        Letter grade from the first threshold the score reaches
    """
    for minimum, grade in GRADE_THRESHOLDS:
        if score >= minimum:
            return grade
    return Grade.F


def grade_points(grade) -> float:
    """Get the point multiplier for a letter grade"""
    return GRADE_POINTS[Grade(grade)]


def quality_points(grade, credit_hours: int) -> float:
    """Quality points for one attempt: points(grade) x credit hours, 2 dp"""
    return round_half_up(grade_points(grade) * credit_hours, 2)


__all__ = [
    "Grade",
    "GRADE_THRESHOLDS",
    "GRADE_POINTS",
    "round_half_up",
    "round_significant",
    "grade_for_score",
    "grade_points",
    "quality_points",
]
