#!/usr/bin/env python3
"""
DATA MODELS - Pydantic schemas for course records and transcript results
Type-safe data structures for course attempts, semester groups, and GPA summaries

COMPREHENSIVE DATA VALIDATION:
✅ Course Drafts: Learner submissions checked before reaching the record store
✅ Course Attempts: Stored records with an opaque, never-reused identity
✅ Semester Groups: Attempts keyed by (semester, session)
✅ Transcript Summary: Computed GPA figures (never persisted)

VALIDATION RULES:
- Course code, title, semester, session and level must be non-empty
- Course code, semester and level are upper-cased
- Semester and session must not contain "|" (the semester key separator)
- Credit hours must be a positive integer (booleans rejected)
- Scores must be integers from 0 to 100 (booleans rejected)

DERIVED FIELDS:
- grade and quality_points are computed from score and credit_hours on read,
  never stored, so retroactive accumulation rules can't leave them stale

Priority: CRITICAL - Foundation for all aggregation
Dependencies: Pydantic for validation
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from chronology import natural_key, sort_semester_keys
from grading import Grade, grade_for_score, quality_points


class GPAPolicy(str, Enum):
    """How cumulative GPA is derived from the semester figures"""
    CREDIT_WEIGHTED = "credit_weighted"
    GPA_OF_GPAS = "gpa_of_gpas"


class CarryOverDirection(str, Enum):
    """Which side of the chronology marks a repeated course as carried over"""
    LATER = "later"
    EARLIER = "earlier"


# Joins semester and session in SemesterKey.label; rejected inside either field
KEY_SEPARATOR = "|"


class SemesterKey(NamedTuple):
    """Unique (semester, session) combination identifying a semester group"""
    semester: str
    session: str

    @property
    def label(self) -> str:
        return f"{self.semester}{KEY_SEPARATOR}{self.session}"

    @classmethod
    def from_label(cls, label: str) -> "SemesterKey":
        semester, _, session = label.partition(KEY_SEPARATOR)
        return cls(semester, session)


REQUIRED_TEXT_FIELDS = ("course_code", "course_title", "semester", "session", "level")


class CourseAttemptDraft(BaseModel):
    """A course submission before the record store assigns its identity"""

    model_config = ConfigDict(frozen=True)

    course_code: str = Field(..., description="Course code, e.g. MTH101")
    course_title: str = Field(..., description="Full course title")
    semester: str = Field(..., description="FIRST SEMESTER, SECOND SEMESTER, or other label")
    session: str = Field(..., description="Academic session, e.g. 2023/2024")
    level: str = Field(..., description="Cohort level, e.g. 100L")

    credit_hours: int = Field(..., gt=0, description="Credit hours")
    score: int = Field(..., ge=0, le=100, description="Score out of 100")

    @field_validator(*REQUIRED_TEXT_FIELDS, mode="before")
    @classmethod
    def require_text(cls, v):
        """Trim text fields and reject blanks"""
        if v is None:
            raise ValueError("field is required")
        v = str(v).strip()
        if not v:
            raise ValueError("field must not be empty")
        return v

    @field_validator("credit_hours", "score", mode="before")
    @classmethod
    def reject_bool(cls, v):
        # bool is an int subclass; True would otherwise pass as 1
        if isinstance(v, bool):
            raise ValueError("must be an integer, not a boolean")
        return v

    @field_validator("semester", "session")
    @classmethod
    def reject_key_separator(cls, v):
        if KEY_SEPARATOR in v:
            raise ValueError(f"must not contain '{KEY_SEPARATOR}'")
        return v

    @field_validator("course_code", "semester", "level")
    @classmethod
    def normalize_case(cls, v):
        return v.upper()

    @property
    def grade(self) -> Grade:
        """Letter grade derived from score"""
        return grade_for_score(self.score)

    @property
    def quality_points(self) -> float:
        """Quality points for this attempt alone"""
        return quality_points(self.grade, self.credit_hours)

    @property
    def semester_key(self) -> SemesterKey:
        return SemesterKey(self.semester, self.session)


class CourseAttempt(CourseAttemptDraft):
    """One stored submission of a course in one semester"""

    identity: str = Field(..., description="Opaque identity assigned by the record store")
    user_id: Optional[str] = Field(None, description="Owner of the record")

    @field_validator("identity", "user_id", mode="before")
    @classmethod
    def stringify_identity(cls, v):
        # Stores hand back integer keys; identities are opaque strings here
        if v is None:
            return v
        return str(v)


class SemesterGroup(BaseModel):
    """All attempts recorded for one (semester, session) combination"""

    model_config = ConfigDict(frozen=True)

    semester: str
    session: str
    level: str
    attempts: List[CourseAttempt] = Field(default_factory=list)

    @property
    def key(self) -> SemesterKey:
        return SemesterKey(self.semester, self.session)

    @property
    def course_codes(self) -> List[str]:
        return [attempt.course_code for attempt in self.attempts]

    @property
    def total_credit_hours(self) -> int:
        return sum(attempt.credit_hours for attempt in self.attempts)

    @property
    def total_quality_points(self) -> float:
        return sum(attempt.quality_points for attempt in self.attempts)

    def sorted_attempts(self) -> List[CourseAttempt]:
        """Attempts in display order (natural course code order)"""
        return sorted(self.attempts, key=lambda attempt: natural_key(attempt.course_code))


@dataclass(frozen=True)
class TranscriptSnapshot:
    """
    Complete, consistent view of one user's course records

    Built from a full record list and replaced (never mutated) on every load.
    Groups only exist while they hold at least one attempt.
    """

    user_id: Optional[str] = None
    groups: Dict[SemesterKey, SemesterGroup] = field(default_factory=dict)

    @classmethod
    def from_attempts(
        cls, attempts: Iterable[CourseAttempt], user_id: Optional[str] = None
    ) -> "TranscriptSnapshot":
        """Group attempts by semester key, keeping the store's listing order"""
        grouped: Dict[SemesterKey, Dict] = {}
        for attempt in attempts:
            key = attempt.semester_key
            if key not in grouped:
                # Level comes from the first attempt seen for the group
                grouped[key] = {"level": attempt.level, "attempts": []}
            grouped[key]["attempts"].append(attempt)

        groups = {
            key: SemesterGroup(
                semester=key.semester,
                session=key.session,
                level=data["level"],
                attempts=data["attempts"],
            )
            for key, data in grouped.items()
        }
        return cls(user_id=user_id, groups=groups)

    def semester_keys(self) -> List[SemesterKey]:
        """Semester keys from earliest to latest"""
        return sort_semester_keys(self.groups.keys())

    def group(self, key: SemesterKey) -> Optional[SemesterGroup]:
        return self.groups.get(SemesterKey(*key))

    def ordered_groups(self) -> List[SemesterGroup]:
        return [self.groups[key] for key in self.semester_keys()]

    def attempts(self) -> List[CourseAttempt]:
        """Every attempt, walking groups chronologically"""
        return [attempt for group in self.ordered_groups() for attempt in group.attempts]

    def without(self, identity) -> "TranscriptSnapshot":
        """New snapshot with one attempt removed (empty groups disappear)"""
        identity = str(identity)
        remaining = [attempt for attempt in self.attempts() if attempt.identity != identity]
        return TranscriptSnapshot.from_attempts(remaining, user_id=self.user_id)

    @property
    def group_count(self) -> int:
        return len(self.groups)

    @property
    def total_courses(self) -> int:
        return sum(len(group.attempts) for group in self.groups.values())

    @property
    def is_empty(self) -> bool:
        return self.total_courses == 0


class TranscriptSummary(BaseModel):
    """GPA calculation result with semester breakdown"""

    user_id: Optional[str] = Field(None, description="Owner of the records")

    policy: GPAPolicy = Field(..., description="Cumulative GPA policy used")
    carry_over_direction: CarryOverDirection = Field(..., description="Carry-over direction used")

    # Chronologically ordered, keyed by "<semester>|<session>"
    semester_gpas: Dict[str, float] = Field(default_factory=dict, description="Semester GPAs")
    cumulative_gpa: float = Field(..., ge=0.0, le=5.0, description="Cumulative GPA")

    total_courses: int = Field(..., ge=0, description="Total course rows")
    total_semesters: int = Field(..., ge=0, description="Total semester groups")
    total_credit_hours: int = Field(..., ge=0, description="Sum of accumulated credit hours over all rows")
    average_score: float = Field(..., ge=0.0, le=100.0, description="Mean score over all rows")

    carried_over_courses: List[str] = Field(default_factory=list, description="Codes flagged as carried over")

    calculation_date: datetime = Field(default_factory=datetime.now, description="When the figures were computed")


# Export all models
__all__ = [
    "Grade",
    "GPAPolicy",
    "CarryOverDirection",
    "SemesterKey",
    "CourseAttemptDraft",
    "CourseAttempt",
    "SemesterGroup",
    "TranscriptSnapshot",
    "TranscriptSummary",
]
