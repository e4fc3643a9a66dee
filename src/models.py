from typing import TypedDict, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt


# --- Objective taxonomies ---

class RowObjective(BaseModel):
    """One Economic Development Strategy objective (a matrix row)."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=r"^EDS-\d+$", description="Stable id like 'EDS-5'")
    group: str = Field(description="Strategy pillar, e.g. 'Start+Attract'")
    title: str
    compact: str = Field(description="One-sentence description used in prompts")
    tags: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.group


class ColumnObjective(BaseModel):
    """One Strategic Plan objective (a matrix column)."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=r"^SP\d+-\d+$", description="Stable id like 'SP5-1'")
    priority: str = Field(description="Strategic Plan priority this objective belongs to")
    number: int = Field(ge=1, description="Objective number within the priority")
    title: str
    compact: str = Field(description="One-sentence description used in prompts")
    tags: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.priority


# --- Oracle request / response ---

class ScoringRequest(BaseModel):
    """Everything sent to the scoring model for one document."""
    system: str
    user: str
    truncated: bool = Field(
        default=False,
        description="True when the document was cut to fit the input limit"
    )


class TopCell(BaseModel):
    """A highlighted matrix cell with the model's explanation."""
    row: str = Field(description="Row objective id, e.g. 'EDS-5'")
    col: str = Field(description="Column objective id, e.g. 'SP5-1'")
    why: str = Field(description="Short rationale (40 words or fewer)")
    confidence: Optional[StrictFloat] = Field(default=None, ge=0.0, le=1.0)


class ScoringResponse(BaseModel):
    """
    Structured output expected back from the scoring model.

    Scores are strict integers: true, "2" and 2.0 are schema violations, not 1 and 2.
    """
    row_scores: dict[str, StrictInt] = Field(default_factory=dict)
    col_scores: dict[str, StrictInt] = Field(default_factory=dict)
    top_cells: list[TopCell] = Field(default_factory=list)
    analysis: str = ""


# --- Pipeline state ---

class AnalysisState(TypedDict, total=False):
    # Input
    text: str

    # Request (from build_request node)
    request: Optional[ScoringRequest]
    truncated: bool

    # Raw oracle output (from score node)
    raw_response: Optional[str]

    # Parsed output (from parse node)
    response: Optional[ScoringResponse]

    # Final matrix (from combine node)
    alignment: Optional[dict[str, int]]

    # Workflow status
    status: str  # "pending" | "validated" | "requested" | "scored" | "parsed" | "combined"
