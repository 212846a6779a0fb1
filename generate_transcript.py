#!/usr/bin/env python3
"""
Simple wrapper to generate a transcript for a given user ID
Usage: python3 generate_transcript.py <user_id> <output_dir>
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv

    print(f"Starting transcript generation...")
    print(f"  User ID: {argv[0] if len(argv) > 0 else 'MISSING'}")
    print(f"  Output Dir: {argv[1] if len(argv) > 1 else 'MISSING'}")

    if len(argv) < 2:
        print("ERROR: Missing arguments")
        print("Usage: python3 generate_transcript.py <user_id> <output_dir>")
        return 1

    user_id = argv[0]
    output_dir = Path(argv[1]).expanduser()

    print(f"\nInitializing...")

    # Import after adding to path
    import config
    from data_models import SemesterKey
    from exceptions import StoreUnavailable
    from gpa_calculator import TranscriptCalculator
    from record_store import create_record_store
    from transcript_generator import TranscriptGenerator
    from transcript_session import TranscriptSession

    calculator = TranscriptCalculator()

    print(f"Opening {config.STORE_BACKEND} record store...")
    try:
        store = create_record_store()
        session = TranscriptSession(store, user_id, calculator=calculator)

        print("Loading courses...")
        snapshot = session.load()
    except StoreUnavailable as e:
        print(f"ERROR: {e.message} - try again shortly")
        return 1

    summary = session.summary()

    print(f"Generating HTML for user {user_id}...")
    generator = TranscriptGenerator(calculator=calculator, output_dir=output_dir)
    output_path = generator.generate_transcript(snapshot)

    print(f"\n📋 SUMMARY ({summary.policy.value}):")
    for label, gpa in summary.semester_gpas.items():
        key = SemesterKey.from_label(label)
        print(f"  {key.semester} {key.session}: {gpa:.2f}")
    print(f"  Cumulative GPA: {summary.cumulative_gpa:.2f}")
    print(f"  Total Courses:  {summary.total_courses}")

    print(f"\n✅ SUCCESS!")
    print(f"Transcript saved to: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
