#!/usr/bin/env python3
"""
RECORD STORE - Create/list/delete persistence for course attempts
Backends the transcript session reloads from after every mutation

BACKENDS:
✅ InMemoryRecordStore - Scratch store for tests and demos
✅ CsvRecordStore - Courses.csv loaded and written with pandas
✅ SqlRecordStore - SQLAlchemy "courses" table (SQLite by default)

STORE CONTRACT:
- list_courses(user_id): every attempt owned by the user (order not guaranteed)
- create_course(user_id, draft): assigns an identity that is never reused
- delete_course(user_id, identity): False when nothing matched
- Any I/O failure surfaces as StoreUnavailable

Grade and quality points are NOT stored; they are derived from score and
credit hours whenever an attempt is read.

Priority: HIGH - Source of every snapshot
Dependencies: pandas, SQLAlchemy, data_models
"""

from abc import ABC, abstractmethod
from itertools import count
from pathlib import Path
from typing import Dict, List, Optional
from uuid import uuid4
import logging

import pandas as pd
import sqlalchemy as sa
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

import config
from data_models import CourseAttempt, CourseAttemptDraft
from exceptions import StoreUnavailable

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Abstract course record store keyed by an opaque user identity"""

    @abstractmethod
    def list_courses(self, user_id: str) -> List[CourseAttempt]:
        """Return every attempt owned by the user."""
        pass

    @abstractmethod
    def create_course(self, user_id: str, draft: CourseAttemptDraft) -> CourseAttempt:
        """Persist a validated draft and return it with its new identity."""
        pass

    @abstractmethod
    def delete_course(self, user_id: str, identity: str) -> bool:
        """Delete one attempt; return False when it did not exist."""
        pass

    @abstractmethod
    def list_user_ids(self) -> List[str]:
        """Return every user that owns at least one attempt."""
        pass


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed store with monotonically increasing identities"""

    def __init__(self):
        self._records: Dict[str, List[CourseAttempt]] = {}
        self._sequence = count(1)

    def list_courses(self, user_id: str) -> List[CourseAttempt]:
        return list(self._records.get(str(user_id), []))

    def create_course(self, user_id: str, draft: CourseAttemptDraft) -> CourseAttempt:
        attempt = CourseAttempt(
            identity=str(next(self._sequence)),
            user_id=str(user_id),
            **draft.model_dump(),
        )
        self._records.setdefault(str(user_id), []).append(attempt)
        return attempt

    def delete_course(self, user_id: str, identity: str) -> bool:
        attempts = self._records.get(str(user_id), [])
        remaining = [attempt for attempt in attempts if attempt.identity != str(identity)]
        if len(remaining) == len(attempts):
            return False
        if remaining:
            self._records[str(user_id)] = remaining
        else:
            del self._records[str(user_id)]
        return True

    def list_user_ids(self) -> List[str]:
        return sorted(self._records)


# Column headers for the CSV backend
COURSE_COLUMNS = [
    "Identity",
    "User ID",
    "Course Code",
    "Course Title",
    "Semester",
    "Session",
    "Level",
    "Credit Hours",
    "Score",
]


class CsvRecordStore(RecordStore):
    """Store course attempts in a single Courses.csv file"""

    def __init__(self, data_dir: Path = None):
        if data_dir is None:
            self.data_dir = config.DATA_DIR
        else:
            self.data_dir = Path(data_dir)

        self.file_path = self.data_dir / config.COURSES_CSV

        # Rows skipped on the last load
        self.validation_warnings: List[str] = []

    def _load_frame(self) -> pd.DataFrame:
        """Load the courses CSV, or an empty frame when the file doesn't exist yet"""
        if not self.file_path.exists():
            return pd.DataFrame(columns=COURSE_COLUMNS)

        try:
            frame = pd.read_csv(
                self.file_path, encoding="utf-8-sig", dtype=str, keep_default_na=False
            )
        except pd.errors.EmptyDataError:
            return pd.DataFrame(columns=COURSE_COLUMNS)
        except (OSError, pd.errors.ParserError) as e:
            logger.error(f"  ❌ Failed to load courses: {e}")
            raise StoreUnavailable(
                f"Failed to load courses: {e}", error_code="store_read_failed"
            ) from e

        missing_columns = [col for col in COURSE_COLUMNS if col not in frame.columns]
        if missing_columns:
            raise StoreUnavailable(
                f"Courses missing columns: {missing_columns}",
                error_code="store_schema_invalid",
                details={"missing_columns": missing_columns},
            )
        return frame

    def _save_frame(self, frame: pd.DataFrame):
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            frame.to_csv(self.file_path, index=False, encoding="utf-8-sig")
        except OSError as e:
            logger.error(f"  ❌ Failed to save courses: {e}")
            raise StoreUnavailable(
                f"Failed to save courses: {e}", error_code="store_write_failed"
            ) from e

    def list_courses(self, user_id: str) -> List[CourseAttempt]:
        frame = self._load_frame()
        user_rows = frame[frame["User ID"] == str(user_id)]

        self.validation_warnings = []
        attempts = []
        for _, row in user_rows.iterrows():
            try:
                attempts.append(
                    CourseAttempt(
                        identity=row["Identity"],
                        user_id=row["User ID"],
                        course_code=row["Course Code"],
                        course_title=row["Course Title"],
                        semester=row["Semester"],
                        session=row["Session"],
                        level=row["Level"],
                        credit_hours=row["Credit Hours"],
                        score=row["Score"],
                    )
                )
            except ValidationError as e:
                warning = f"Skipped invalid course row {row['Identity']}: {e.error_count()} errors"
                self.validation_warnings.append(warning)
                logger.warning(f"  ⚠️ {warning}")

        return attempts

    def create_course(self, user_id: str, draft: CourseAttemptDraft) -> CourseAttempt:
        attempt = CourseAttempt(identity=uuid4().hex, user_id=str(user_id), **draft.model_dump())

        row = {
            "Identity": attempt.identity,
            "User ID": attempt.user_id,
            "Course Code": attempt.course_code,
            "Course Title": attempt.course_title,
            "Semester": attempt.semester,
            "Session": attempt.session,
            "Level": attempt.level,
            "Credit Hours": str(attempt.credit_hours),
            "Score": str(attempt.score),
        }

        frame = self._load_frame()
        if frame.empty:
            frame = pd.DataFrame([row], columns=COURSE_COLUMNS)
        else:
            frame = pd.concat([frame, pd.DataFrame([row], columns=COURSE_COLUMNS)], ignore_index=True)
        self._save_frame(frame)

        logger.info(f"  ✅ Saved {attempt.course_code} ({attempt.semester} {attempt.session})")
        return attempt

    def delete_course(self, user_id: str, identity: str) -> bool:
        frame = self._load_frame()
        mask = (frame["User ID"] == str(user_id)) & (frame["Identity"] == str(identity))
        if not mask.any():
            return False
        self._save_frame(frame[~mask])
        return True

    def list_user_ids(self) -> List[str]:
        frame = self._load_frame()
        return sorted(frame["User ID"].unique().tolist())


metadata = sa.MetaData()

# Grade and quality points are derived on read, so the table has no columns for them
courses_table = sa.Table(
    "courses",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
    sa.Column("user_id", sa.String(255), nullable=False, index=True),
    sa.Column("course_code", sa.String(50), nullable=False),
    sa.Column("course_title", sa.String(255), nullable=False),
    sa.Column("semester", sa.String(100), nullable=False),
    sa.Column("session", sa.String(50), nullable=False),
    sa.Column("level", sa.String(50), nullable=False),
    sa.Column("credit_hours", sa.Integer, nullable=False),
    sa.Column("score", sa.Integer, nullable=False),
    # AUTOINCREMENT keeps SQLite from reusing the ids of deleted rows
    sqlite_autoincrement=True,
)


class SqlRecordStore(RecordStore):
    """Store course attempts in a SQL database through SQLAlchemy Core"""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or config.DATABASE_URL
        self._ensure_sqlite_directory()

        self.engine = sa.create_engine(self.database_url)
        try:
            metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailable(
                f"Failed to initialize course table: {e}", error_code="store_init_failed"
            ) from e

        logger.info(f"Record store ready: {self.engine.url.render_as_string(hide_password=True)}")

    def _ensure_sqlite_directory(self):
        url = sa.engine.make_url(self.database_url)
        if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
            try:
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.error(f"  ❌ Failed to create database directory: {e}")
                raise StoreUnavailable(
                    f"Failed to create database directory: {e}", error_code="store_init_failed"
                ) from e

    def list_courses(self, user_id: str) -> List[CourseAttempt]:
        query = (
            sa.select(courses_table)
            .where(courses_table.c.user_id == str(user_id))
            .order_by(courses_table.c.id)
        )
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(query).mappings().all()
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to list courses: {e}", error_code="store_read_failed") from e

        return [
            CourseAttempt(
                identity=row["id"],
                user_id=row["user_id"],
                course_code=row["course_code"],
                course_title=row["course_title"],
                semester=row["semester"],
                session=row["session"],
                level=row["level"],
                credit_hours=row["credit_hours"],
                score=row["score"],
            )
            for row in rows
        ]

    def create_course(self, user_id: str, draft: CourseAttemptDraft) -> CourseAttempt:
        values = draft.model_dump()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(courses_table.insert().values(user_id=str(user_id), **values))
                identity = result.inserted_primary_key[0]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to add course: {e}", error_code="store_write_failed") from e

        return CourseAttempt(identity=identity, user_id=str(user_id), **values)

    def delete_course(self, user_id: str, identity: str) -> bool:
        try:
            record_id = int(identity)
        except (TypeError, ValueError):
            return False

        statement = courses_table.delete().where(
            courses_table.c.id == record_id,
            courses_table.c.user_id == str(user_id),
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to delete course: {e}", error_code="store_write_failed") from e

        return result.rowcount > 0

    def list_user_ids(self) -> List[str]:
        query = sa.select(courses_table.c.user_id).distinct().order_by(courses_table.c.user_id)
        try:
            with self.engine.connect() as conn:
                return [row[0] for row in conn.execute(query)]
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Failed to list users: {e}", error_code="store_read_failed") from e


def create_record_store(backend: Optional[str] = None) -> RecordStore:
    """Build the record store named by config.STORE_BACKEND (sql, csv or memory)"""
    backend = (backend or config.STORE_BACKEND).lower()
    if backend == "sql":
        return SqlRecordStore()
    if backend == "csv":
        return CsvRecordStore()
    if backend == "memory":
        return InMemoryRecordStore()
    raise ValueError(f"Unknown record store backend: {backend}")
