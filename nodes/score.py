from abc import ABC, abstractmethod

from langchain_anthropic import ChatAnthropic
from anthropic import APIError, APIConnectionError, RateLimitError, APITimeoutError

from src.models import AnalysisState, ScoringRequest
from src.errors import OracleTransportError
from settings import SCORING_MODEL, SCORING_TEMPERATURE, SCORING_MAX_TOKENS
from src.logger import log


class ScoringOracle(ABC):
    """
    Anything that turns a scoring request into the model's raw text reply.

    Implementations raise OracleTransportError when the service cannot be
    reached. They never parse the reply; that is the parse node's job.
    """

    name = "base"

    @abstractmethod
    def score(self, request: ScoringRequest) -> str:
        """Return the raw text reply for one request."""


class AnthropicOracle(ScoringOracle):
    """Scores documents with a Claude model through langchain-anthropic."""

    name = "anthropic"

    def __init__(self, model: str = SCORING_MODEL, temperature: float = SCORING_TEMPERATURE,
                 max_tokens: int = SCORING_MAX_TOKENS):
        self.model = model
        self._llm = ChatAnthropic(model=model, temperature=temperature, max_tokens=max_tokens)

    def score(self, request: ScoringRequest) -> str:
        try:
            result = self._llm.invoke([
                {"role": "system", "content": request.system},
                {"role": "user", "content": request.user}
            ])
        except (APIError, APIConnectionError, RateLimitError, APITimeoutError) as e:
            raise OracleTransportError(f"{type(e).__name__}: {str(e)[:200]}") from e

        return message_text(result.content)


class StaticOracle(ScoringOracle):
    """Returns a fixed payload. Used for tests and offline runs."""

    name = "static"

    def __init__(self, payload: str):
        self.payload = payload
        self.requests: list[ScoringRequest] = []

    def score(self, request: ScoringRequest) -> str:
        self.requests.append(request)
        return self.payload


def message_text(content) -> str:
    """Flatten a chat message's content (plain string or content blocks) to text."""
    if isinstance(content, str):
        return content

    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def make_score_node(oracle: ScoringOracle):
    """Bind an oracle into a graph node that sends the built request."""

    def score(state: AnalysisState) -> dict:
        """
        Send the scoring request to the oracle. One outbound call, no caching.

        Returns:
            Dict with raw_response, status
        """
        try:
            raw = oracle.score(state["request"])
        except OracleTransportError as e:
            log(f"\n Scoring request failed ({oracle.name}): {e}")
            raise

        log(f"  Received {len(raw)} characters from {oracle.name} oracle")
        return {"raw_response": raw, "status": "scored"}

    return score
