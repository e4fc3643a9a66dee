from typing import Iterable, Mapping, Optional

from src.models import AnalysisState, TopCell
from src.taxonomy import ROW_TAXONOMY, COLUMN_TAXONOMY


def combine(row_score: int, col_score: int) -> int:
    """
    Conservative combination: a cell is only as strong as its weaker side.

    Strong row relevance cannot make up for a near-zero column score, and
    vice versa.
    """
    return min(row_score, col_score)


def cell_key(row_id: str, col_id: str) -> str:
    """Composite matrix key. Always row first: 'EDS-5|SP5-1'."""
    return f"{row_id}|{col_id}"


def build_alignment_matrix(
    row_ids: Iterable[str],
    col_ids: Iterable[str],
    row_scores: Mapping[str, int],
    col_scores: Mapping[str, int],
) -> dict[str, int]:
    """
    Compute the dense row x column alignment matrix.

    Every (row, col) pair gets an entry; ids missing from a score map count
    as 0. Pure function: same inputs, same matrix.
    """
    col_ids = list(col_ids)
    alignment = {}

    for row_id in row_ids:
        row_score = int(row_scores.get(row_id, 0))
        for col_id in col_ids:
            col_score = int(col_scores.get(col_id, 0))
            alignment[cell_key(row_id, col_id)] = combine(row_score, col_score)

    return alignment


def rationale_lookup(top_cells: Iterable[TopCell]) -> dict[str, dict[str, Optional[float]]]:
    """Index highlighted cells by composite key. First entry wins on duplicates."""
    lookup = {}
    for cell in top_cells:
        key = cell_key(cell.row, cell.col)
        if key not in lookup:
            lookup[key] = {"why": cell.why, "confidence": cell.confidence}
    return lookup


def combine_scores(state: AnalysisState) -> dict:
    """
    Build the full alignment matrix over both taxonomies.

    Returns:
        Dict with alignment, status
    """
    response = state["response"]

    alignment = build_alignment_matrix(
        ROW_TAXONOMY.ids(),
        COLUMN_TAXONOMY.ids(),
        response.row_scores,
        response.col_scores,
    )

    return {"alignment": alignment, "status": "combined"}
