"""
Plain-text rendering of an alignment result for the terminal.

Columns are grouped under their Strategic Plan priority, rows are listed in
Economic Development Strategy order, and each cell shows a score band.
"""

from nodes.combine import cell_key, rationale_lookup
from src.models import TopCell
from src.taxonomy import ROW_TAXONOMY, COLUMN_TAXONOMY, Taxonomy

# Score → cell glyph (darker = stronger, like the heatmap colour bands)
SCORE_BANDS = {0: ".", 1: "+", 2: "++", 3: "+++"}

CELL_WIDTH = 6
ROW_LABEL_WIDTH = 8


def score_band(score: int) -> str:
    return SCORE_BANDS.get(score, "?")


def render_matrix(alignment: dict, rows: Taxonomy = ROW_TAXONOMY,
                  cols: Taxonomy = COLUMN_TAXONOMY, show_numbers: bool = False) -> str:
    """Render the matrix as a grouped text grid."""
    lines = []

    # Group header: one bracketed label spanning each group's columns
    header = " " * ROW_LABEL_WIDTH
    for label, members in cols.groups():
        width = CELL_WIDTH * len(members)
        header += f"[{label[:width - 2]}]".ljust(width)
    lines.append(header.rstrip())

    lines.append((" " * ROW_LABEL_WIDTH + "".join(c.id.ljust(CELL_WIDTH) for c in cols)).rstrip())

    for label, members in rows.groups():
        lines.append(f"{label}")
        for r in members:
            cells = []
            for c in cols:
                score = alignment.get(cell_key(r.id, c.id), 0)
                cells.append((str(score) if show_numbers else score_band(score)).ljust(CELL_WIDTH))
            lines.append((r.id.ljust(ROW_LABEL_WIDTH) + "".join(cells)).rstrip())

    lines.append("")
    lines.append("Legend: " + "  ".join(f"{band} = {score}" for score, band in SCORE_BANDS.items()))
    return "\n".join(lines)


def render_top_cells(top_cells: list, alignment: dict, rows: Taxonomy = ROW_TAXONOMY,
                     cols: Taxonomy = COLUMN_TAXONOMY) -> str:
    """List the highlighted cells with titles, score and rationale."""
    cells = [c if isinstance(c, TopCell) else TopCell.model_validate(c) for c in top_cells]
    if not cells:
        return "  (no highlighted cells)"

    lines = []
    for key, detail in rationale_lookup(cells).items():
        row_id, col_id = key.split("|", 1)
        row_title = rows.get(row_id).title if row_id in rows else "(unknown objective)"
        col_title = cols.get(col_id).title if col_id in cols else "(unknown objective)"

        confidence = detail["confidence"]
        suffix = f" (confidence {confidence:.2f})" if confidence is not None else ""

        lines.append(f"  {row_id} × {col_id} → {alignment.get(key, 0)}{suffix}")
        lines.append(f"    {row_title}")
        lines.append(f"    {col_title}")
        lines.append(f"    {detail['why']}")
    return "\n".join(lines)
