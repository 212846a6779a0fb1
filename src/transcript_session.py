"""
Session-scoped transcript host.

Owns one user's snapshot and the record store it comes from. Every mutation
is a store round-trip followed by a full reload, so the snapshot is always a
complete, freshly fetched record set and is replaced rather than edited.
A failed store call leaves the previous snapshot in place.
"""

from typing import Any, Dict, List, Optional, Union
import logging

from pydantic import ValidationError

from data_models import CourseAttemptDraft, TranscriptSnapshot, TranscriptSummary
from exceptions import CourseValidationError
from gpa_calculator import TranscriptCalculator
from record_store import RecordStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please fill in all fields correctly"
SCORE_RANGE_MESSAGE = "Score must be between 0 and 100"

_RANGE_ERRORS = {"greater_than_equal", "less_than_equal"}


def _user_message(errors: List[Dict[str, Any]]) -> str:
    """Pick the learner-facing message for a rejected submission"""
    for error in errors:
        if tuple(error.get("loc", ())) == ("score",) and error.get("type") in _RANGE_ERRORS:
            return SCORE_RANGE_MESSAGE
    return MISSING_FIELDS_MESSAGE


def validate_submission(submission: Union[CourseAttemptDraft, Dict[str, Any]]) -> CourseAttemptDraft:
    """
    Validate a learner submission before anything is sent to the store

    Raises:
        CourseValidationError: a required field is missing or blank, credit
            hours are not a positive integer, or the score is outside 0-100
    """
    if isinstance(submission, CourseAttemptDraft):
        return submission

    try:
        return CourseAttemptDraft(**submission)
    except ValidationError as e:
        errors = e.errors()
        raise CourseValidationError(
            _user_message(errors),
            error_code="invalid_course",
            details={"errors": [{"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]} for err in errors]},
        ) from e


class TranscriptSession:
    """One learner's transcript: record store round-trips plus recomputation"""

    def __init__(
        self,
        store: RecordStore,
        user_id: str,
        calculator: Optional[TranscriptCalculator] = None,
    ):
        self.store = store
        self.user_id = str(user_id)
        self.calculator = calculator or TranscriptCalculator()
        self.snapshot = TranscriptSnapshot(user_id=self.user_id)

    def load(self) -> TranscriptSnapshot:
        """Fetch the complete record set and rebuild the snapshot"""
        attempts = self.store.list_courses(self.user_id)
        self.snapshot = TranscriptSnapshot.from_attempts(attempts, user_id=self.user_id)
        logger.info(
            f"📊 Loaded {self.snapshot.total_courses} courses in "
            f"{self.snapshot.group_count} semesters for user {self.user_id}"
        )
        return self.snapshot

    def add_course(self, submission: Union[CourseAttemptDraft, Dict[str, Any]]) -> TranscriptSnapshot:
        """Validate, create, then reload"""
        draft = validate_submission(submission)
        attempt = self.store.create_course(self.user_id, draft)
        logger.info(f"  ✅ Added {attempt.course_code} ({attempt.semester} {attempt.session})")
        return self.load()

    def delete_course(self, identity: str) -> TranscriptSnapshot:
        """Delete, then reload"""
        if not self.store.delete_course(self.user_id, identity):
            logger.warning(f"  ⚠️ Course {identity} not found for user {self.user_id}")
        return self.load()

    def summary(self) -> TranscriptSummary:
        """Recompute every figure from the current snapshot"""
        return self.calculator.calculate_transcript(self.snapshot)
