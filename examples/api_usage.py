"""
Split Planner - Library API Usage Examples

This script demonstrates how to use the Split Planner library programmatically.
Run it with the path of a PDF file:

    python examples/api_usage.py document.pdf
"""

import asyncio
import sys
from pathlib import Path

from split_planner import (
    SplitMode,
    SplitSession,
    SplitPlannerException,
    format_file_size,
    __version__
)


def example_1_ranges(session):
    """Example 1: Labeled ranges with undo/redo"""
    print("\n=== Example 1: Labeled Ranges ===")

    full_document = session.plan[0]
    session.remove_range(full_document.id)
    half = max(1, session.page_count // 2)
    session.add_range(1, half, "First Half")
    session.append_remaining_range("Second Half")

    session.undo()
    print(f"After undo: {[str(item) for item in session.plan]}")
    session.redo()
    print(f"After redo: {[str(item) for item in session.plan]}")

    for spec in session.build_plan():
        print(f"  {spec.name}: {spec.page_count} pages")


def example_2_chunks(session):
    """Example 2: Fixed-size chunks"""
    print("\n=== Example 2: Fixed-Size Chunks ===")

    session.set_mode(SplitMode.FIXED)
    session.set_fixed_chunk_size(2)
    for spec in session.build_plan():
        print(f"  {spec.name}: pages {[index + 1 for index in spec.page_indices]}")


def example_3_extract(session):
    """Example 3: Extract a page list"""
    print("\n=== Example 3: Page List Extraction ===")

    session.set_mode(SplitMode.EXTRACT)
    session.set_extract_expression("1, 3, 5-8")
    plan = session.build_plan()
    if not plan:
        print("  Nothing to extract")
        return
    print(f"  {plan[0].name}: pages {[index + 1 for index in plan[0].page_indices]}")


def example_4_split_and_pack(session, output_dir):
    """Example 4: Rotate, split and write a ZIP archive"""
    print("\n=== Example 4: Split and Pack ===")

    session.set_mode(SplitMode.FIXED)
    session.rotate_page(0, 90)
    state = asyncio.run(session.start_split())
    print(f"  Finished with state: {state.value}")

    output_dir.mkdir(parents=True, exist_ok=True)
    archive = output_dir / "parts.zip"
    archive.write_bytes(session.pack_results())
    print(f"  Wrote {archive} ({format_file_size(archive.stat().st_size)})")


def main():
    """Run all examples."""
    print("=" * 60)
    print(f"Split Planner Library - API Examples (v{__version__})")
    print("=" * 60)

    if len(sys.argv) < 2:
        print("Usage: python examples/api_usage.py document.pdf")
        sys.exit(1)

    pdf_path = Path(sys.argv[1])
    session = SplitSession()
    try:
        session.load_document(pdf_path.read_bytes(), name=pdf_path.name)
        print(f"Loaded {pdf_path.name}: {session.page_count} pages")

        example_1_ranges(session)
        example_2_chunks(session)
        example_3_extract(session)
        example_4_split_and_pack(session, Path("output"))
    except SplitPlannerException as exc:
        print(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
