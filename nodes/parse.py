import json
import re

from pydantic import ValidationError

from settings import MIN_SCORE, MAX_SCORE
from src.models import AnalysisState, ScoringResponse
from src.errors import OracleOutputError
from src.taxonomy import ROW_TAXONOMY, COLUMN_TAXONOMY
from src.logger import log

# A reply wrapped in one markdown fence, e.g. ```json ... ```
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n(.*?)\n?```$", re.DOTALL)


def strip_code_fence(raw: str) -> str:
    """Remove a single surrounding markdown code fence, if present."""
    text = raw.strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def parse_scoring_response(raw: str) -> ScoringResponse:
    """
    Parse the model's reply into a ScoringResponse.

    Anything that is not a JSON object matching the expected shape is a
    terminal OracleOutputError. There is no partial recovery.
    """
    text = strip_code_fence(raw or "")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise OracleOutputError(f"Invalid JSON from model: {e}", raw=raw) from e

    if not isinstance(data, dict):
        raise OracleOutputError(
            f"Expected a JSON object from model, got {type(data).__name__}", raw=raw
        )

    # null is treated the same as a missing key
    for key in ("row_scores", "col_scores", "top_cells", "analysis"):
        if data.get(key) is None:
            data.pop(key, None)

    try:
        return ScoringResponse.model_validate(data)
    except ValidationError as e:
        raise OracleOutputError(
            f"Model output does not match the scoring schema: {e.error_count()} error(s)\n{e}",
            raw=raw
        ) from e


def clamp_scores(scores: dict[str, int]) -> tuple[dict[str, int], list[str]]:
    """
    Clamp every score into [MIN_SCORE, MAX_SCORE].

    Returns:
        (clamped scores, ids whose value was out of range)
    """
    clamped = {}
    out_of_range = []
    for objective_id, score in scores.items():
        bounded = max(MIN_SCORE, min(MAX_SCORE, score))
        if bounded != score:
            out_of_range.append(objective_id)
        clamped[objective_id] = bounded
    return clamped, out_of_range


def parse(state: AnalysisState) -> dict:
    """
    Validate the raw oracle reply and normalise its scores.

    Out-of-range scores are clamped and logged. Objectives the model left out
    are logged too; they count as 0 when the matrix is built.

    Returns:
        Dict with response, status
    """
    response = parse_scoring_response(state["raw_response"])

    row_scores, bad_rows = clamp_scores(response.row_scores)
    col_scores, bad_cols = clamp_scores(response.col_scores)
    if bad_rows or bad_cols:
        log(f"  Warning: clamped out-of-range scores for {', '.join(bad_rows + bad_cols)}")

    missing = [i for i in ROW_TAXONOMY.ids() if i not in row_scores]
    missing += [i for i in COLUMN_TAXONOMY.ids() if i not in col_scores]
    if missing:
        log(f"  Note: model omitted {len(missing)} objective(s), scored as 0: {', '.join(missing)}")

    unknown = [i for i in row_scores if i not in ROW_TAXONOMY]
    unknown += [i for i in col_scores if i not in COLUMN_TAXONOMY]
    if unknown:
        log(f"  Note: ignoring unknown objective id(s) in matrix: {', '.join(unknown)}")

    response = response.model_copy(update={"row_scores": row_scores, "col_scores": col_scores})
    return {"response": response, "status": "parsed"}
