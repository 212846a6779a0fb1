"""
Unit Tests for the Grading Function

Tests for:
- Score to letter grade thresholds
- Grade point multipliers
- Quality point rounding
"""

import pytest

from grading import (
    Grade,
    grade_for_score,
    grade_points,
    quality_points,
    round_half_up,
    round_significant,
)


class TestGradeForScore:
    """Tests for score to letter grade conversion"""

    @pytest.mark.parametrize(
        "score,expected",
        [
            (100, Grade.A),
            (70, Grade.A),
            (69, Grade.B),
            (60, Grade.B),
            (59, Grade.C),
            (50, Grade.C),
            (49, Grade.D),
            (45, Grade.D),
            (44, Grade.E),
            (40, Grade.E),
            (39, Grade.F),
            (0, Grade.F),
        ],
    )
    def test_threshold_boundaries(self, score, expected):
        """Inclusive lower bounds, evaluated highest first"""
        assert grade_for_score(score) == expected

    def test_bands_partition_score_range(self):
        """Every score 0-100 gets exactly one grade; band widths add up"""
        counts = {}
        for score in range(0, 101):
            grade = grade_for_score(score)
            counts[grade] = counts.get(grade, 0) + 1

        assert counts == {
            Grade.A: 31,
            Grade.B: 10,
            Grade.C: 10,
            Grade.D: 5,
            Grade.E: 5,
            Grade.F: 40,
        }
        assert sum(counts.values()) == 101


class TestQualityPoints:
    """Tests for grade points and quality points"""

    def test_grade_points_scale(self):
        """Five-point scale from A down to F"""
        assert [grade_points(g) for g in "ABCDEF"] == [5.0, 4.0, 3.0, 2.0, 1.0, 0.0]

    def test_quality_points_for_a(self):
        """3 credit hours of A is 15.00"""
        assert quality_points(Grade.A, 3) == 15.0

    def test_monotonic_in_credit_hours(self):
        """More credit hours never lowers quality points for a fixed grade"""
        for grade in Grade:
            values = [quality_points(grade, hours) for hours in range(0, 21)]
            assert values == sorted(values)

    def test_zero_only_for_f_or_zero_hours(self):
        """Quality points are zero iff the grade is F or there are no hours"""
        for grade in Grade:
            for hours in range(0, 7):
                is_zero = quality_points(grade, hours) == 0.0
                assert is_zero == (grade == Grade.F or hours == 0)


class TestRounding:
    """Tests for half-up rounding helpers"""

    def test_round_half_up_rounds_away_from_zero(self):
        """2.675 rounds up, unlike binary round()"""
        assert round_half_up(2.675, 2) == 2.68
        assert round_half_up(4.58333, 2) == 4.58

    def test_round_significant(self):
        """Three significant figures"""
        assert round_significant(4.333333, 3) == 4.33
        assert round_significant(1.005, 3) == 1.01
        assert round_significant(2.5, 3) == 2.5
        assert round_significant(0, 3) == 0.0
