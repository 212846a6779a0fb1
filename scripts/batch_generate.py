#!/usr/bin/env python3
"""
BATCH TRANSCRIPT GENERATOR
Generates one HTML transcript per user in the record store.

Output structure:
<output_dir>/
├── <user_id>_transcript.html
└── ...

Usage: python3 scripts/batch_generate.py [output_dir]
"""

import sys
from pathlib import Path
from tqdm import tqdm
from dataclasses import dataclass
from typing import List, Optional

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import config
from exceptions import StoreUnavailable
from gpa_calculator import TranscriptCalculator
from record_store import RecordStore, create_record_store
from transcript_generator import TranscriptGenerator
from transcript_session import TranscriptSession


@dataclass
class GenerationResult:
    user_id: str
    success: bool
    output_path: Optional[str]
    cumulative_gpa: Optional[float]
    total_courses: int
    error: Optional[str]


def generate_all_transcripts(
    generator: TranscriptGenerator,
    store: RecordStore,
    progress: bool = True,
) -> List[GenerationResult]:
    """Generate transcripts for every user in the store."""
    import logging

    # Reduce logging verbosity during batch
    logging.getLogger("transcript_generator").setLevel(logging.WARNING)
    logging.getLogger("transcript_session").setLevel(logging.WARNING)
    logging.getLogger("gpa_calculator").setLevel(logging.WARNING)

    results = []
    user_ids = store.list_user_ids()

    print(f"\n📊 Processing {len(user_ids)} users")

    iterator = tqdm(user_ids, total=len(user_ids), desc="Generating", unit="transcript") if progress else user_ids

    for user_id in iterator:
        session = TranscriptSession(store, user_id, calculator=generator.calculator)
        try:
            snapshot = session.load()
            output_path = generator.generate_transcript(snapshot)
            summary = session.summary()

            results.append(GenerationResult(
                user_id=user_id,
                success=True,
                output_path=str(output_path),
                cumulative_gpa=summary.cumulative_gpa,
                total_courses=summary.total_courses,
                error=None,
            ))

        except Exception as e:
            results.append(GenerationResult(
                user_id=user_id,
                success=False,
                output_path=None,
                cumulative_gpa=None,
                total_courses=0,
                error=str(e),
            ))
            if progress:
                tqdm.write(f"  ❌ Failed {user_id}: {str(e)[:50]}")

    return results


def print_summary(results: List[GenerationResult], output_base: Path):
    """Print generation summary."""
    success = [r for r in results if r.success]
    failed = [r for r in results if not r.success]

    print("\n" + "="*70)
    print("BATCH GENERATION SUMMARY")
    print("="*70)

    print(f"\n✅ Successful: {len(success)}")
    print(f"❌ Failed: {len(failed)}")

    if success:
        print("\nCumulative GPA by user:")
        for r in success:
            print(f"  [{r.user_id}] {r.cumulative_gpa:.2f} ({r.total_courses} courses)")

    if failed:
        print("\n❌ FAILED TRANSCRIPTS:")
        print("-"*50)
        for r in failed:
            print(f"  [{r.user_id}]")
            print(f"      Error: {r.error[:80]}..." if len(r.error) > 80 else f"      Error: {r.error}")

    print(f"\n📁 Output: {output_base}")
    print("="*70)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    output_base = Path(argv[0]).expanduser() if argv else config.OUTPUT_DIR

    print("="*70)
    print("BATCH TRANSCRIPT GENERATOR")
    print("="*70)

    calculator = TranscriptCalculator()
    print(f"   GPA policy: {calculator.policy.value}")
    print(f"   Carry-over direction: {calculator.carry_over_direction.value}")

    generator = TranscriptGenerator(calculator=calculator, output_dir=output_base)

    print(f"\n📂 Opening {config.STORE_BACKEND} record store...")
    try:
        store = create_record_store()

        print("\n🚀 Starting batch generation...")
        results = generate_all_transcripts(generator, store, progress=True)
    except StoreUnavailable as e:
        print(f"\n❌ ERROR: {e.message} - try again shortly")
        return 1

    print_summary(results, output_base)

    failed_count = len([r for r in results if not r.success])
    if failed_count > 0:
        print(f"\n⚠️  {failed_count} transcripts failed - review errors above")
        return 1
    else:
        print("\n✅ All transcripts generated successfully!")
        return 0


if __name__ == "__main__":
    sys.exit(main())
