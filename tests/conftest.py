"""
Pytest Configuration and Fixtures

Provides common fixtures for all tests including:
- Course attempt factory
- Snapshots for the standard transcript scenarios
- Record stores
"""

import itertools

import pytest

# Add src to path
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data_models import CourseAttempt, TranscriptSnapshot, CarryOverDirection, GPAPolicy
from gpa_calculator import TranscriptCalculator
from record_store import InMemoryRecordStore

FIRST = "FIRST SEMESTER"
SECOND = "SECOND SEMESTER"


@pytest.fixture
def make_attempt():
    """Factory for stored course attempts with sequential identities"""
    identities = itertools.count(1)

    def _make(
        course_code,
        score,
        credit_hours=3,
        semester=FIRST,
        session="2023/2024",
        level="100L",
        course_title=None,
    ):
        return CourseAttempt(
            identity=str(next(identities)),
            user_id="learner-1",
            course_code=course_code,
            course_title=course_title or f"{course_code} Title",
            semester=semester,
            session=session,
            level=level,
            credit_hours=credit_hours,
            score=score,
        )

    return _make


@pytest.fixture
def single_course_snapshot(make_attempt):
    """MTH101, 3 CH, score 75"""
    return TranscriptSnapshot.from_attempts([make_attempt("MTH101", 75)], user_id="learner-1")


@pytest.fixture
def retake_snapshot(make_attempt):
    """MTH101 failed (30) in the first semester, retaken for a C (55) in the second"""
    return TranscriptSnapshot.from_attempts(
        [
            make_attempt("MTH101", 30, semester=FIRST),
            make_attempt("MTH101", 55, semester=SECOND),
        ],
        user_id="learner-1",
    )


@pytest.fixture
def unequal_snapshot(make_attempt):
    """Heavy first semester of A grades, one-credit failed second semester"""
    return TranscriptSnapshot.from_attempts(
        [
            make_attempt("CSC101", 75, credit_hours=3),
            make_attempt("MTH101", 80, credit_hours=3),
            make_attempt("PHY101", 71, credit_hours=3),
            make_attempt("GST101", 90, credit_hours=2),
            make_attempt("CHM102", 35, credit_hours=1, semester=SECOND),
        ],
        user_id="learner-1",
    )


@pytest.fixture
def credit_weighted_calculator():
    return TranscriptCalculator(
        policy=GPAPolicy.CREDIT_WEIGHTED,
        carry_over_direction=CarryOverDirection.EARLIER,
    )


@pytest.fixture
def gpa_of_gpas_calculator():
    return TranscriptCalculator(
        policy=GPAPolicy.GPA_OF_GPAS,
        carry_over_direction=CarryOverDirection.EARLIER,
    )


@pytest.fixture
def memory_store():
    return InMemoryRecordStore()


@pytest.fixture
def sample_submission():
    """Course submission as collected from the learner's form"""
    return {
        "course_code": "mth101",
        "course_title": "Elementary Mathematics I",
        "semester": "FIRST SEMESTER",
        "session": "2023/2024",
        "level": "100l",
        "credit_hours": 3,
        "score": 75,
    }
