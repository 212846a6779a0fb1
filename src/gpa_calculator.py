#!/usr/bin/env python3
"""
GPA CALCULATOR - Semester and cumulative GPA with repeated-course accumulation
Transcript aggregation over a snapshot of one learner's course attempts

CALCULATION TYPES:
✅ Semester GPA: Stored quality points / stored credit hours for one semester
✅ Accumulated Credit Hours: Lifetime credit hours per course code
✅ Latest Attempts: One row per course code, from its most recent semester
✅ Cumulative GPA: Credit-weighted or GPA-of-GPAs (explicit policy)
✅ Carry-Over: Repeated course codes relative to the chronology

CUMULATIVE GPA POLICIES:
- CREDIT_WEIGHTED: sum(accumulated CH x points(latest grade)) / sum(accumulated CH), 2 dp
- GPA_OF_GPAS: unweighted mean of the reported semester GPAs, 3 significant figures

EDGE CASES HANDLED:
- No courses: every GPA is 0.0, never a division error
- Repeated courses: latest semester's grade counts, credit hours accumulate
- Displayed quality points use accumulated credit hours, so earlier rows
  change when a later repeat is recorded
- Unknown semester labels sort after FIRST/SECOND SEMESTER in a session

Priority: CRITICAL - Core academic calculations
Dependencies: data_models.py, grading.py, chronology.py, pandas for reports
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence
import logging

import pandas as pd

import config
from chronology import natural_key
from data_models import (
    CarryOverDirection,
    CourseAttempt,
    GPAPolicy,
    SemesterKey,
    TranscriptSnapshot,
    TranscriptSummary,
)
from grading import grade_points, quality_points, round_half_up, round_significant

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "Semester",
    "Session",
    "Level",
    "Course Code",
    "Course Title",
    "Credit Hours",
    "Accumulated Credit Hours",
    "Score",
    "Grade",
    "Quality Points",
    "Carried Over",
    "Semester GPA",
]


@dataclass
class LatestAttempt:
    """Most recent attempt of a course code with its lifetime credit hours"""
    attempt: CourseAttempt
    accumulated_credit_hours: int

    @property
    def course_code(self) -> str:
        return self.attempt.course_code

    @property
    def grade(self):
        return self.attempt.grade

    @property
    def displayed_quality_points(self) -> float:
        """Quality points shown for the row: accumulated CH x points(grade)"""
        return quality_points(self.attempt.grade, self.accumulated_credit_hours)


class TranscriptCalculator:
    """Calculate semester GPAs, cumulative GPA and carry-over status from a snapshot"""

    def __init__(
        self,
        policy: Optional[GPAPolicy] = None,
        carry_over_direction: Optional[CarryOverDirection] = None,
    ):
        """
        Initialize calculator with explicit aggregation choices

        Args:
            policy: Cumulative GPA policy (defaults to config.GPA_POLICY)
            carry_over_direction: Carry-over side of the chronology
                (defaults to config.CARRY_OVER_DIRECTION)
        """
        self.policy = GPAPolicy(policy or config.GPA_POLICY)
        self.carry_over_direction = CarryOverDirection(
            carry_over_direction or config.CARRY_OVER_DIRECTION
        )
        self.calculation_log: List[str] = []

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def accumulated_credit_hours(self, snapshot: TranscriptSnapshot, course_code: str) -> int:
        """Sum of credit hours over every attempt of a course code, in any semester"""
        return sum(
            attempt.credit_hours
            for group in snapshot.groups.values()
            for attempt in group.attempts
            if attempt.course_code == course_code
        )

    def accumulated_credit_map(self, snapshot: TranscriptSnapshot) -> Dict[str, int]:
        """Accumulated credit hours for every course code in the snapshot"""
        totals: Dict[str, int] = {}
        for group in snapshot.groups.values():
            for attempt in group.attempts:
                totals[attempt.course_code] = totals.get(attempt.course_code, 0) + attempt.credit_hours
        return totals

    def latest_attempts(self, snapshot: TranscriptSnapshot) -> List[LatestAttempt]:
        """
        Deduplicated view: one attempt per course code

        Walks semesters chronologically so the attempt kept for each code is
        the one from the last semester containing it. The grade used is that
        attempt's; the credit hours are the lifetime accumulation.
        """
        latest: Dict[str, CourseAttempt] = {}
        for group in snapshot.ordered_groups():
            for attempt in group.attempts:
                latest[attempt.course_code] = attempt

        totals = self.accumulated_credit_map(snapshot)
        return [
            LatestAttempt(attempt=attempt, accumulated_credit_hours=totals[code])
            for code, attempt in latest.items()
        ]

    def displayed_quality_points(self, snapshot: TranscriptSnapshot, attempt: CourseAttempt) -> float:
        """Row quality points: accumulated CH of the code x points of this row's grade"""
        return quality_points(attempt.grade, self.accumulated_credit_hours(snapshot, attempt.course_code))

    # ------------------------------------------------------------------
    # GPA aggregation
    # ------------------------------------------------------------------

    def semester_gpa(self, attempts: Sequence[CourseAttempt]) -> float:
        """Stored quality points / stored credit hours, 2 dp (not accumulated)"""
        total_credits = sum(attempt.credit_hours for attempt in attempts)
        if total_credits == 0:
            return 0.0
        total_points = sum(attempt.quality_points for attempt in attempts)
        return round_half_up(total_points / total_credits, 2)

    def semester_gpas(self, snapshot: TranscriptSnapshot) -> Dict[str, float]:
        """Semester GPA per group, earliest first"""
        return {
            key.label: self.semester_gpa(snapshot.groups[key].attempts)
            for key in snapshot.semester_keys()
        }

    def cumulative_gpa(self, snapshot: TranscriptSnapshot) -> float:
        """Cumulative GPA under the configured policy"""
        if self.policy == GPAPolicy.CREDIT_WEIGHTED:
            return self._credit_weighted_gpa(snapshot)
        return self._gpa_of_gpas(snapshot)

    def _credit_weighted_gpa(self, snapshot: TranscriptSnapshot) -> float:
        """Latest grade per course, weighted by accumulated credit hours"""
        total_points = 0.0
        total_credits = 0

        for item in self.latest_attempts(snapshot):
            total_points += grade_points(item.grade) * item.accumulated_credit_hours
            total_credits += item.accumulated_credit_hours

        if total_credits == 0:
            return 0.0
        return round_half_up(total_points / total_credits, 2)

    def _gpa_of_gpas(self, snapshot: TranscriptSnapshot) -> float:
        """Unweighted mean of the reported semester GPAs"""
        semester_gpas = list(self.semester_gpas(snapshot).values())
        if not semester_gpas:
            return 0.0
        return round_significant(sum(semester_gpas) / len(semester_gpas), 3)

    # ------------------------------------------------------------------
    # Carry-over
    # ------------------------------------------------------------------

    def is_carried_over(
        self, snapshot: TranscriptSnapshot, course_code: str, semester_key: SemesterKey
    ) -> bool:
        """
        Check whether a course code is repeated on the configured side of a semester

        LATER: the code appears again in a later semester.
        EARLIER: the code already appeared in an earlier semester.
        """
        keys = snapshot.semester_keys()
        semester_key = SemesterKey(*semester_key)
        if semester_key not in keys:
            return False

        position = keys.index(semester_key)
        if self.carry_over_direction == CarryOverDirection.LATER:
            candidates = keys[position + 1:]
        else:
            candidates = keys[:position]

        return any(course_code in snapshot.groups[key].course_codes for key in candidates)

    # ------------------------------------------------------------------
    # Full transcript
    # ------------------------------------------------------------------

    def calculate_transcript(self, snapshot: TranscriptSnapshot) -> TranscriptSummary:
        """
        Calculate every transcript figure for a snapshot

        Args:
            snapshot: Complete record set for one user

        Returns:
            TranscriptSummary with semester GPAs, cumulative GPA and totals
        """
        self.calculation_log = []
        self.calculation_log.append(f"📊 Calculating transcript for user: {snapshot.user_id}")
        self.calculation_log.append(
            f"   Policy: {self.policy.value} | Carry-over: {self.carry_over_direction.value}"
        )

        totals = self.accumulated_credit_map(snapshot)
        semester_gpas = self.semester_gpas(snapshot)
        cumulative_gpa = self.cumulative_gpa(snapshot)

        total_courses = 0
        total_credit_hours = 0
        total_score = 0
        carried_over = set()

        for key in snapshot.semester_keys():
            for attempt in snapshot.groups[key].attempts:
                total_courses += 1
                total_credit_hours += totals[attempt.course_code]
                total_score += attempt.score
                if self.is_carried_over(snapshot, attempt.course_code, key):
                    carried_over.add(attempt.course_code)

        average_score = round_half_up(total_score / total_courses, 2) if total_courses else 0.0

        for label, gpa in semester_gpas.items():
            self.calculation_log.append(f"   {label}: {gpa:.2f}")

        repeated = [code for code in totals if self._attempt_count(snapshot, code) > 1]
        if repeated:
            self.calculation_log.append(f"🔁 Repeated courses: {', '.join(sorted(repeated, key=natural_key))}")

        result = TranscriptSummary(
            user_id=snapshot.user_id,
            policy=self.policy,
            carry_over_direction=self.carry_over_direction,
            semester_gpas=semester_gpas,
            cumulative_gpa=cumulative_gpa,
            total_courses=total_courses,
            total_semesters=snapshot.group_count,
            total_credit_hours=total_credit_hours,
            average_score=average_score,
            carried_over_courses=sorted(carried_over, key=natural_key),
            calculation_date=datetime.now(),
        )

        self.calculation_log.append(f"✅ Calculation complete:")
        self.calculation_log.append(f"   Cumulative GPA: {cumulative_gpa:.2f}")
        self.calculation_log.append(f"   Total Courses: {total_courses}")

        logger.info(
            f"✅ Transcript calculated for user {snapshot.user_id}: "
            f"CGPA {cumulative_gpa:.2f} over {total_courses} courses"
        )
        return result

    def _attempt_count(self, snapshot: TranscriptSnapshot, course_code: str) -> int:
        return sum(group.course_codes.count(course_code) for group in snapshot.groups.values())

    def generate_semester_report(
        self, snapshot: TranscriptSnapshot, output_path: Optional[Path] = None
    ) -> pd.DataFrame:
        """
        Generate a row-per-attempt report in transcript display order

        Args:
            snapshot: Complete record set for one user
            output_path: Optional path to save CSV report

        Returns:
            DataFrame with one row per course attempt
        """
        records = []
        for key in snapshot.semester_keys():
            group = snapshot.groups[key]
            semester_gpa = self.semester_gpa(group.attempts)
            for attempt in group.sorted_attempts():
                records.append({
                    "Semester": group.semester,
                    "Session": group.session,
                    "Level": group.level,
                    "Course Code": attempt.course_code,
                    "Course Title": attempt.course_title,
                    "Credit Hours": attempt.credit_hours,
                    "Accumulated Credit Hours": self.accumulated_credit_hours(snapshot, attempt.course_code),
                    "Score": attempt.score,
                    "Grade": attempt.grade.value,
                    "Quality Points": self.displayed_quality_points(snapshot, attempt),
                    "Carried Over": self.is_carried_over(snapshot, attempt.course_code, key),
                    "Semester GPA": semester_gpa,
                })

        if not records:
            logger.warning("⚠️ No course records to report")

        df = pd.DataFrame(records, columns=REPORT_COLUMNS)

        if output_path:
            df.to_csv(output_path, index=False)
            logger.info(f"Semester report saved to: {output_path}")

        return df

    def get_calculation_log(self) -> List[str]:
        """Get detailed calculation log for debugging"""
        return self.calculation_log
