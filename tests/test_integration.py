#!/usr/bin/env python3
"""
Integration tests for the complete transcript pipeline
Record store -> session -> calculator -> HTML transcript and report
"""

import importlib.util
from pathlib import Path

import pytest

import config
from data_models import CarryOverDirection, GPAPolicy
from gpa_calculator import TranscriptCalculator
from record_store import CsvRecordStore, InMemoryRecordStore, SqlRecordStore
from transcript_generator import TranscriptGenerator
from transcript_session import TranscriptSession

PROJECT_ROOT = Path(__file__).parent.parent


def _load_script(path: Path, name: str):
    spec = importlib.util.spec_from_file_location(name, path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _record_history(session, base):
    """Two sessions of courses with one retake"""
    session.add_course({**base, "course_code": "MTH101", "score": 30})
    session.add_course({**base, "course_code": "CSC101", "score": 72, "credit_hours": 2})
    session.add_course({**base, "course_code": "MTH101", "score": 55, "semester": "SECOND SEMESTER"})
    session.add_course({
        **base,
        "course_code": "MTH201",
        "score": 64,
        "session": "2024/2025",
        "level": "200L",
    })


@pytest.mark.parametrize("backend", ["csv", "sql"])
def test_full_pipeline(backend, tmp_path, sample_submission):
    """Persist courses, reload, compute figures and render the transcript"""
    if backend == "csv":
        store = CsvRecordStore(data_dir=tmp_path / "data")
    else:
        store = SqlRecordStore(database_url=f"sqlite:///{tmp_path / 'data' / 'grading.db'}")

    calculator = TranscriptCalculator(
        policy=GPAPolicy.CREDIT_WEIGHTED,
        carry_over_direction=CarryOverDirection.EARLIER,
    )
    session = TranscriptSession(store, "learner-1", calculator=calculator)
    _record_history(session, sample_submission)

    # A fresh session over the same store sees the same records
    snapshot = TranscriptSession(store, "learner-1", calculator=calculator).load()
    summary = calculator.calculate_transcript(snapshot)

    # Latest: MTH101 C over 6 CH, CSC101 A over 2 CH, MTH201 B over 3 CH
    # (18 + 10 + 12) / 11 = 3.64
    assert summary.cumulative_gpa == 3.64
    assert summary.semester_gpas == {
        "FIRST SEMESTER|2023/2024": 2.0,
        "SECOND SEMESTER|2023/2024": 3.0,
        "FIRST SEMESTER|2024/2025": 4.0,
    }
    assert summary.carried_over_courses == ["MTH101"]
    assert summary.total_courses == 4

    generator = TranscriptGenerator(calculator=calculator, output_dir=tmp_path / "out")
    output_path = generator.generate_transcript(snapshot)
    html = output_path.read_text(encoding="utf-8")
    assert "FIRST SEMESTER RESULTS OF 2024/2025 SESSION - LEVEL: 200L" in html
    assert "Cumulative GPA: 3.64" in html

    report = calculator.generate_semester_report(snapshot, output_path=tmp_path / "report.csv")
    assert report["Course Code"].tolist() == ["CSC101", "MTH101", "MTH101", "MTH201"]
    assert (tmp_path / "report.csv").exists()


def test_batch_generate(tmp_path, sample_submission):
    """One transcript per user in the store"""
    batch = _load_script(PROJECT_ROOT / "scripts" / "batch_generate.py", "batch_generate")

    store = InMemoryRecordStore()
    for user_id in ["learner-a", "learner-b"]:
        TranscriptSession(store, user_id).add_course(sample_submission)

    generator = TranscriptGenerator(
        calculator=TranscriptCalculator(policy=GPAPolicy.GPA_OF_GPAS),
        output_dir=tmp_path,
    )
    results = batch.generate_all_transcripts(generator, store, progress=False)

    assert [r.user_id for r in results] == ["learner-a", "learner-b"]
    assert all(r.success for r in results)
    assert all(r.cumulative_gpa == 5.0 for r in results)
    assert (tmp_path / "learner-a_transcript.html").exists()


def test_generate_transcript_cli(tmp_path, monkeypatch, sample_submission, capsys):
    """Command-line wrapper reads the configured store and writes the HTML"""
    monkeypatch.setattr(config, "STORE_BACKEND", "csv")
    monkeypatch.setattr(config, "DATA_DIR", tmp_path / "data")
    TranscriptSession(CsvRecordStore(), "learner-1").add_course(sample_submission)

    cli = _load_script(PROJECT_ROOT / "generate_transcript.py", "generate_transcript")

    assert cli.main(["learner-1", str(tmp_path / "out")]) == 0
    assert (tmp_path / "out" / "learner-1_transcript.html").exists()
    assert "Cumulative GPA: 5.00" in capsys.readouterr().out


def test_generate_transcript_cli_store_unavailable(tmp_path, monkeypatch, capsys):
    """An unopenable database exits with status 1 and a retry message"""
    monkeypatch.setattr(config, "STORE_BACKEND", "sql")
    monkeypatch.setattr(config, "DATABASE_URL", f"sqlite:///{tmp_path}")

    cli = _load_script(PROJECT_ROOT / "generate_transcript.py", "generate_transcript")

    assert cli.main(["learner-1", str(tmp_path / "out")]) == 1
    assert "try again shortly" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()


def test_batch_generate_store_unavailable(tmp_path, monkeypatch, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    monkeypatch.setattr(config, "STORE_BACKEND", "sql")
    monkeypatch.setattr(config, "DATABASE_URL", f"sqlite:///{blocker / 'grading.db'}")

    batch = _load_script(PROJECT_ROOT / "scripts" / "batch_generate.py", "batch_generate")

    assert batch.main([str(tmp_path / "out")]) == 1
    assert "try again shortly" in capsys.readouterr().out


def test_generate_transcript_cli_missing_args(capsys):
    cli = _load_script(PROJECT_ROOT / "generate_transcript.py", "generate_transcript")

    assert cli.main([]) == 1
    assert "Missing arguments" in capsys.readouterr().out
