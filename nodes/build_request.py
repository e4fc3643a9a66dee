from prompts import SCORING_SYSTEM_PROMPT, SCORING_USER_TEMPLATE
from settings import MAX_DOCUMENT_CHARS, MAX_TOP_CELLS
from src.models import AnalysisState, ScoringRequest
from src.taxonomy import ROW_TAXONOMY, COLUMN_TAXONOMY, Taxonomy
from src.logger import log


def truncate_document(text: str, limit: int = MAX_DOCUMENT_CHARS) -> tuple[str, bool]:
    """Return the first `limit` characters of text and whether anything was cut."""
    if len(text) <= limit:
        return text, False
    return text[:limit], True


def format_objectives(taxonomy: Taxonomy) -> str:
    """One '- [id] title: compact' line per objective, in taxonomy order."""
    return "\n".join(f"- [{o.id}] {o.title}: {o.compact}" for o in taxonomy)


def build_scoring_request(
    text: str,
    rows: Taxonomy = ROW_TAXONOMY,
    cols: Taxonomy = COLUMN_TAXONOMY,
    limit: int = MAX_DOCUMENT_CHARS,
) -> ScoringRequest:
    """
    Compose the single scoring request for a document.

    The document is cut to a bounded prefix; both taxonomies are listed by id
    so the model can reference objectives, and the expected JSON shape is
    spelled out in the user message.
    """
    document, truncated = truncate_document(text, limit)

    user = SCORING_USER_TEMPLATE.format(
        document=document,
        row_objectives=format_objectives(rows),
        col_objectives=format_objectives(cols),
        first_row=rows.ids()[0],
        first_col=cols.ids()[0],
        max_top_cells=MAX_TOP_CELLS,
    )

    return ScoringRequest(system=SCORING_SYSTEM_PROMPT, user=user, truncated=truncated)


def build_request(state: AnalysisState) -> dict:
    """
    Build the scoring request for the validated document.

    Returns:
        Dict with request, truncated, status
    """
    request = build_scoring_request(state["text"])

    if request.truncated:
        log(f"  Note: document is {len(state['text'])} characters, "
            f"only the first {MAX_DOCUMENT_CHARS} are scored")

    return {
        "request": request,
        "truncated": request.truncated,
        "status": "requested",
    }
