from src.models import AnalysisState
from src.errors import InputError


def validate(state: AnalysisState) -> dict:
    """
    Reject documents with no usable text before anything is sent to the model.

    Raises:
        InputError: text is missing, not a string, or whitespace-only
    """
    text = state.get("text")

    if not isinstance(text, str) or not text.strip():
        raise InputError("Provide document text to analyze (received empty input)")

    return {"text": text.strip(), "status": "validated"}
