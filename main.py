import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

from src.graph import analyze_document
from nodes.validate import validate
from src.errors import InputError, OracleTransportError, OracleOutputError
from src.render import render_matrix, render_top_cells
from src.logger import log, log_session_start, log_session_end
from settings import SCORING_MODEL, MAX_DOCUMENT_CHARS


def read_document(input_file=None, text=None) -> str:
    """
    Resolve the document text from --text, a file path, or stdin.

    Raises:
        InputError: the file does not exist, cannot be decoded, or nothing was provided
    """
    if text is not None:
        return text

    if input_file is None or input_file == "-":
        if input_file is None and sys.stdin.isatty():
            raise InputError("Provide a document file, --text, or pipe text on stdin")
        return sys.stdin.read()

    path = Path(input_file)
    if not path.exists():
        raise InputError(f"Input file not found: {input_file}")

    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InputError(
            f"{input_file} is not UTF-8 text ({e.reason}). Extract the text first, then retry."
        ) from e
    except (IOError, OSError) as e:
        raise InputError(f"Cannot read {input_file}: {e}") from e


def save_result(result: dict, output_path: str) -> None:
    """Write the result JSON, via a temporary file so a failed write never leaves half a file."""
    import tempfile
    import shutil

    output_dir = Path(output_path).resolve().parent
    with tempfile.NamedTemporaryFile(mode="w", delete=False, suffix=".tmp",
                                     dir=output_dir, encoding="utf-8") as tmp:
        json.dump(result, tmp, indent=2)
        tmp_path = tmp.name

    shutil.move(tmp_path, output_path)


def report(result: dict, show_numbers: bool = False) -> None:
    """Log the analysis summary, grouped matrix and highlighted cells."""
    log(f"\n{'─' * 60}")
    log("Analysis:")
    log(f"  {result['analysis'] or '(no summary returned)'}")

    log(f"\n{'─' * 60}")
    log("Alignment matrix (EDS rows × Strategic Plan columns):\n")
    log(render_matrix(result["alignment"], show_numbers=show_numbers))

    log(f"\n{'─' * 60}")
    log("Strongest cells:")
    log(render_top_cells(result["top_cells"], result["alignment"]))


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Score a document against the EDS and Strategic Plan objectives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze a text file
  python main.py council_minutes.txt

  # Analyze pasted text and save the result
  python main.py --text "Proposal to expand the cycling network..." --output result.json

  # Read from stdin, show numeric scores instead of bands
  cat summary.txt | python main.py - --numbers
        """
    )
    parser.add_argument("input_file", nargs="?",
                        help="Plain-text document to analyze ('-' for stdin)")
    parser.add_argument("--text", help="Document text given directly on the command line")
    parser.add_argument("--output", help="Write the full result JSON to this file")
    parser.add_argument("--numbers", action="store_true",
                        help="Show numeric scores in the matrix instead of bands")

    args = parser.parse_args()

    log_session_start()

    # Bad input is reported before any configuration problem
    try:
        text = validate({"text": read_document(args.input_file, args.text)})["text"]
    except InputError as e:
        log(f"Error: {e}")
        sys.exit(2)

    # Validate API key is set
    if not os.environ.get("ANTHROPIC_API_KEY"):
        log("Error: ANTHROPIC_API_KEY environment variable not set")
        log("\nPlease set your API key:")
        log("  export ANTHROPIC_API_KEY=your_key_here")
        log("\nOr add to .env file:")
        log("  ANTHROPIC_API_KEY=your_key_here")
        sys.exit(1)

    try:
        log(f"\nScoring document with {SCORING_MODEL}...")
        log(f"  Document length: {len(text)} characters (limit {MAX_DOCUMENT_CHARS})")
        result = analyze_document(text)
    except InputError as e:
        log(f"Error: {e}")
        sys.exit(2)
    except OracleTransportError as e:
        log(f"Error: Scoring service unavailable: {e}")
        log("No result was produced. Try again later.")
        sys.exit(1)
    except OracleOutputError as e:
        log(f"Error: Invalid output from scoring model: {e}")
        log("No result was produced.")
        sys.exit(1)

    report(result, show_numbers=args.numbers)

    if args.output:
        try:
            save_result(result, args.output)
            log(f"\n✓ Saved result to: {args.output}")
            log(f"  Re-display it with: python analyze.py {args.output}")
        except (IOError, OSError) as e:
            log(f"\n Warning: Could not save result to {args.output}: {e}")

    log_session_end()


if __name__ == "__main__":
    main()
