from typing import Optional

from langgraph.graph import StateGraph, START, END
from langgraph.types import RetryPolicy

from src.models import AnalysisState
from src.errors import OracleTransportError
from nodes.validate import validate
from nodes.build_request import build_request
from nodes.score import ScoringOracle, AnthropicOracle, make_score_node
from nodes.parse import parse
from nodes.combine import combine_scores
from settings import ORACLE_MAX_ATTEMPTS, ORACLE_RETRY_INITIAL_INTERVAL


def create_graph(oracle: Optional[ScoringOracle] = None, max_attempts: int = ORACLE_MAX_ATTEMPTS):
    """
    Create the document analysis workflow graph.

    validate → build_request → score → parse → combine

    Args:
        oracle: Scoring backend. Defaults to AnthropicOracle.
        max_attempts: Attempts for the score node. 1 disables retry; above 1,
                      only transport errors are retried, with jittered backoff.
    """
    if oracle is None:
        oracle = AnthropicOracle()

    workflow = StateGraph(AnalysisState)

    workflow.add_node("validate", validate)
    workflow.add_node("build_request", build_request)

    if max_attempts > 1:
        retry = RetryPolicy(
            max_attempts=max_attempts,
            initial_interval=ORACLE_RETRY_INITIAL_INTERVAL,
            backoff_factor=2.0,
            jitter=True,
            retry_on=OracleTransportError,
        )
        workflow.add_node("score", make_score_node(oracle), retry_policy=retry)
    else:
        workflow.add_node("score", make_score_node(oracle))

    workflow.add_node("parse", parse)
    workflow.add_node("combine", combine_scores)

    workflow.add_edge(START, "validate")
    workflow.add_edge("validate", "build_request")
    workflow.add_edge("build_request", "score")
    workflow.add_edge("score", "parse")
    workflow.add_edge("parse", "combine")
    workflow.add_edge("combine", END)

    # No checkpointer: nothing is kept between analyses
    return workflow.compile()


def analyze_document(text: str, oracle: Optional[ScoringOracle] = None, graph=None) -> dict:
    """
    Score a document against both taxonomies.

    Returns:
        Dict with row_scores, col_scores, top_cells, analysis, alignment

    Raises:
        InputError: the document is empty (the oracle is never contacted)
        OracleTransportError: the scoring model could not be reached
        OracleOutputError: the scoring model returned unusable output
    """
    if graph is None:
        graph = create_graph(oracle)

    final_state = graph.invoke({"text": text, "status": "pending"})

    response = final_state["response"]
    return {
        **response.model_dump(),
        "alignment": final_state["alignment"],
    }
