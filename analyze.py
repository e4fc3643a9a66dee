import argparse
import json
from pathlib import Path

from pydantic import ValidationError

from nodes.combine import build_alignment_matrix
from src.models import ScoringResponse
from src.render import render_matrix, render_top_cells
from src.taxonomy import ROW_TAXONOMY, COLUMN_TAXONOMY
from settings import DEFAULT_RESULT_FILE


def summarize_scores(scores: dict, taxonomy) -> list[tuple[str, float, int]]:
    """Average and peak score per group, in taxonomy order."""
    summary = []
    for label, members in taxonomy.groups():
        values = [int(scores.get(o.id, 0)) for o in members]
        summary.append((label, sum(values) / len(values), max(values)))
    return summary


def analyze_result(json_file=DEFAULT_RESULT_FILE, show_numbers=False):
    result_file = Path(json_file)

    # Check if file exists
    if not result_file.exists():
        print(f"Error: {json_file} not found. Check the spelling.")
        print("\nRun an analysis first and save it:")
        print("  python main.py document.txt --output alignment_result.json")
        return

    # Check if file is empty
    if result_file.stat().st_size == 0:
        print(f"Error: {json_file} is empty.")
        return

    try:
        with open(result_file, encoding="utf-8") as f:
            result = json.load(f)
    except json.JSONDecodeError as e:
        print(f"Error: Malformed JSON file: {e}")
        return
    except (IOError, OSError) as e:
        print(f"Error reading {json_file}: {e}")
        return

    if not isinstance(result, dict):
        print(f"Error: {json_file} must contain a JSON object")
        return

    # Validate required fields exist
    required_fields = ["row_scores", "col_scores"]
    missing = [f for f in required_fields if f not in result]
    if missing:
        print(f"Error: Result file is missing required fields: {', '.join(missing)}")
        print("\nThe file may be corrupted or was not written by main.py.")
        return

    try:
        saved = ScoringResponse.model_validate(
            {k: v for k, v in result.items() if k in ScoringResponse.model_fields and v is not None}
        )
    except ValidationError as e:
        print(f"Error: {json_file} has invalid scores or highlighted cells:")
        print(f"  {e}")
        return

    row_scores = saved.row_scores
    col_scores = saved.col_scores

    # The saved matrix is derived data; always rebuild it from the score maps
    alignment = build_alignment_matrix(
        ROW_TAXONOMY.ids(), COLUMN_TAXONOMY.ids(), row_scores, col_scores
    )

    print(f"\n{'═' * 60}")
    print(f"ALIGNMENT RESULT - {json_file}")
    print(f"{'═' * 60}")

    nonzero = sum(1 for v in alignment.values() if v > 0)
    print(f"Aligned cells: {nonzero}/{len(alignment)}")

    for title, scores, taxonomy in (
        ("EDS GROUPS (rows)", row_scores, ROW_TAXONOMY),
        ("STRATEGIC PLAN PRIORITIES (columns)", col_scores, COLUMN_TAXONOMY),
    ):
        print(f"\n{'─' * 60}")
        print(title)
        print(f"{'─' * 60}")
        for label, average, peak in summarize_scores(scores, taxonomy):
            print(f"  {label}: avg {average:.1f}, max {peak}")

    print(f"\n{'─' * 60}")
    print("MATRIX")
    print(f"{'─' * 60}")
    print(render_matrix(alignment, show_numbers=show_numbers))

    print(f"\n{'─' * 60}")
    print("STRONGEST CELLS")
    print(f"{'─' * 60}")
    print(render_top_cells(saved.top_cells, alignment))

    if saved.analysis:
        print(f"\n{'─' * 60}")
        print("ANALYSIS")
        print(f"{'─' * 60}")
        print(f"  {saved.analysis}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Display a saved alignment result as a grouped matrix.",
        epilog="""
Examples:
  python analyze.py                      # Shows alignment_result.json (default)
  python analyze.py result_2.json        # Shows result_2.json
  python analyze.py result.json --numbers
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        'json_file',
        nargs='?',
        default=DEFAULT_RESULT_FILE,
        help='Result JSON written by main.py --output (default: alignment_result.json)'
    )
    parser.add_argument('--numbers', action='store_true',
                        help='Show numeric scores instead of bands')

    args = parser.parse_args()
    analyze_result(args.json_file, args.numbers)
