"""
Configuration constants for the transcript engine.

Every value can be overridden through an environment variable so the same
code runs against a local SQLite file, a CSV export, or a scratch in-memory
store without edits.
"""

import os
from pathlib import Path

# =============================================================================
# FILE PATHS
# =============================================================================

BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("TRANSCRIPT_DATA_DIR", str(BASE_DIR / "data")))
TEMPLATES_DIR = BASE_DIR / "templates"
OUTPUT_DIR = Path(os.getenv("TRANSCRIPT_OUTPUT_DIR", str(BASE_DIR / "output")))

COURSES_CSV = "Courses.csv"
TRANSCRIPT_TEMPLATE = "transcript.html"


# =============================================================================
# RECORD STORE
# =============================================================================

# sql | csv | memory
STORE_BACKEND = os.getenv("TRANSCRIPT_STORE", "sql")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'grading_system.db'}")


# =============================================================================
# AGGREGATION POLICY
# =============================================================================
# Two cumulative GPA policies exist in the system's history:
#   - credit_weighted: latest attempt per course, weighted by accumulated CH
#   - gpa_of_gpas:     unweighted mean of the semester GPAs (current)
GPA_POLICY = os.getenv("TRANSCRIPT_GPA_POLICY", "gpa_of_gpas")

# Which side of the chronology marks a repeated course as carried over:
#   - earlier: the code already appeared in an earlier semester (current)
#   - later:   the code reappears in a later semester
CARRY_OVER_DIRECTION = os.getenv("TRANSCRIPT_CARRY_OVER_DIRECTION", "earlier")
