#!/usr/bin/env python3
"""
TRANSCRIPT GENERATOR - Semester result tables and HTML export
Turn a transcript snapshot into display-ready tables and render them

GENERATION PROCESS:
1. Take a freshly loaded snapshot for one user
2. Walk semesters chronologically, rows sorted by course code
3. Apply the display policy (accumulated CH and quality points per row)
4. Flag carried-over rows in the calculator's configured direction
5. Render the Jinja2 template and save the HTML file

ROW DISPLAY POLICY:
✅ CH column shows "3→6" when a course's accumulated hours exceed the row's own
✅ QP column shows accumulated CH x points(row grade), so earlier rows change
   when a later repeat is recorded
✅ Totals row sums the displayed CH and QP
✅ GPA line shows the semester GPA and the cumulative GPA

Priority: HIGH - Learner-facing output
Dependencies: Jinja2, gpa_calculator, data_models
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import logging

# Template engine
from jinja2 import Environment, FileSystemLoader, select_autoescape

import config
from data_models import TranscriptSnapshot
from gpa_calculator import TranscriptCalculator
from grading import round_half_up

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CARRIED_OVER_LABEL = "(Carried Over)"


@dataclass
class TranscriptRow:
    """One course attempt as shown in a semester table"""
    number: int
    identity: str
    course_code: str
    course_title: str
    credit_hours: int
    accumulated_credit_hours: int
    score: int
    grade: str
    quality_points: float
    carried_over: bool

    @property
    def credit_hours_display(self) -> str:
        """Accumulated hours, with the row's own hours first when they differ"""
        if self.accumulated_credit_hours > self.credit_hours:
            return f"{self.credit_hours}→{self.accumulated_credit_hours}"
        return str(self.accumulated_credit_hours)


@dataclass
class SemesterTable:
    """Results table for one semester group"""
    semester: str
    session: str
    level: str
    rows: List[TranscriptRow] = field(default_factory=list)
    total_credit_hours: int = 0
    total_quality_points: float = 0.0
    gpa: float = 0.0
    cumulative_gpa: float = 0.0

    @property
    def key_label(self) -> str:
        return f"{self.semester}|{self.session}"

    @property
    def header(self) -> str:
        return f"{self.semester.upper()} RESULTS OF {self.session} SESSION - LEVEL: {self.level}"


@dataclass
class TranscriptStats:
    """Summary cards shown under the tables"""
    total_courses: int = 0
    total_credit_hours: int = 0
    average_score: float = 0.0
    cumulative_gpa: float = 0.0


@dataclass
class TranscriptView:
    """Everything the template needs for one user's transcript"""
    user_id: Optional[str]
    semesters: List[SemesterTable]
    stats: TranscriptStats
    policy: str
    carry_over_direction: str

    @property
    def is_empty(self) -> bool:
        return self.stats.total_courses == 0


class TranscriptGenerator:
    """Build transcript views and render them to HTML"""

    def __init__(
        self,
        calculator: Optional[TranscriptCalculator] = None,
        templates_dir: Optional[Path] = None,
        output_dir: Optional[Path] = None,
    ):
        """
        Initialize transcript generator

        Args:
            calculator: Calculator holding the GPA policy and carry-over direction
            templates_dir: Directory containing transcript.html
            output_dir: Where generated transcripts are written
        """
        self.calculator = calculator or TranscriptCalculator()
        self.templates_dir = Path(templates_dir) if templates_dir else config.TEMPLATES_DIR
        self.output_dir = Path(output_dir) if output_dir else config.OUTPUT_DIR

        # Initialize Jinja2 environment
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self.env.filters["two_dp"] = lambda value: f"{value:.2f}"

        logger.info(f"Transcript generator initialized")
        logger.info(f"Templates: {self.templates_dir}")
        logger.info(f"Output: {self.output_dir}")

    def build_view(self, snapshot: TranscriptSnapshot) -> TranscriptView:
        """
        Build display tables for every semester in chronological order

        The carry-over direction comes from the calculator, so every row in
        one view is flagged the same way.
        """
        calculator = self.calculator
        totals = calculator.accumulated_credit_map(snapshot)
        cumulative_gpa = calculator.cumulative_gpa(snapshot)

        stats = TranscriptStats(cumulative_gpa=cumulative_gpa)
        total_score = 0
        semesters = []

        for key in snapshot.semester_keys():
            group = snapshot.groups[key]
            table = SemesterTable(
                semester=group.semester,
                session=group.session,
                level=group.level,
                gpa=calculator.semester_gpa(group.attempts),
                cumulative_gpa=cumulative_gpa,
            )

            for number, attempt in enumerate(group.sorted_attempts(), start=1):
                accumulated = totals[attempt.course_code]
                row = TranscriptRow(
                    number=number,
                    identity=attempt.identity,
                    course_code=attempt.course_code,
                    course_title=attempt.course_title,
                    credit_hours=attempt.credit_hours,
                    accumulated_credit_hours=accumulated,
                    score=attempt.score,
                    grade=attempt.grade.value,
                    quality_points=calculator.displayed_quality_points(snapshot, attempt),
                    carried_over=calculator.is_carried_over(snapshot, attempt.course_code, key),
                )
                table.rows.append(row)
                table.total_credit_hours += accumulated
                table.total_quality_points += row.quality_points

                stats.total_courses += 1
                stats.total_credit_hours += accumulated
                total_score += attempt.score

            table.total_quality_points = round_half_up(table.total_quality_points, 2)
            semesters.append(table)

        if stats.total_courses:
            stats.average_score = round_half_up(total_score / stats.total_courses, 2)

        return TranscriptView(
            user_id=snapshot.user_id,
            semesters=semesters,
            stats=stats,
            policy=calculator.policy.value,
            carry_over_direction=calculator.carry_over_direction.value,
        )

    def render_html(self, view: TranscriptView) -> str:
        """Render HTML from template"""
        template = self.env.get_template(config.TRANSCRIPT_TEMPLATE)
        return template.render(
            view=view,
            carried_over_label=CARRIED_OVER_LABEL,
            issue_date=datetime.now().strftime("%B %d, %Y"),
        )

    def generate_transcript(
        self, snapshot: TranscriptSnapshot, output_filename: Optional[str] = None
    ) -> Path:
        """
        Generate an HTML transcript for one user's snapshot

        Args:
            snapshot: Freshly loaded snapshot
            output_filename: Custom filename (optional)

        Returns:
            Path to the generated HTML file
        """
        logger.info(f"📄 Generating transcript for user {snapshot.user_id}")

        view = self.build_view(snapshot)
        html_content = self.render_html(view)

        if output_filename is None:
            output_filename = f"{snapshot.user_id}_transcript.html"

        output_path = self.output_dir / output_filename
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(html_content)

        logger.info(f"✅ Transcript generated: {output_path}")
        return output_path
