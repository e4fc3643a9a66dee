"""
Objective taxonomies for the City of Waterloo Strategic Plan (2023-2026) and
the City of Waterloo Economic Development Strategy (2019-2024).

EDS objectives are the matrix rows, Strategic Plan objectives are the columns.
Both lists are loaded once at import and never mutated.
"""

from typing import Generic, Iterator, TypeVar, Union

from src.models import RowObjective, ColumnObjective

ObjectiveT = TypeVar("ObjectiveT", bound=Union[RowObjective, ColumnObjective])


class Taxonomy(Generic[ObjectiveT]):
    """Immutable ordered list of objectives with O(1) lookup by id."""

    def __init__(self, name: str, objectives):
        self.name = name
        self._objectives: tuple[ObjectiveT, ...] = tuple(objectives)
        self._by_id: dict[str, ObjectiveT] = {}

        for objective in self._objectives:
            if objective.id in self._by_id:
                raise ValueError(f"Duplicate objective id in {name}: {objective.id}")
            self._by_id[objective.id] = objective

        # Groups must be contiguous so headers can span adjacent objectives
        seen_labels = []
        for objective in self._objectives:
            if not seen_labels or seen_labels[-1] != objective.label:
                if objective.label in seen_labels:
                    raise ValueError(
                        f"Group '{objective.label}' is not contiguous in {name} (at {objective.id})"
                    )
                seen_labels.append(objective.label)

    def __iter__(self) -> Iterator[ObjectiveT]:
        return iter(self._objectives)

    def __len__(self) -> int:
        return len(self._objectives)

    def __contains__(self, objective_id: object) -> bool:
        return objective_id in self._by_id

    @property
    def objectives(self) -> tuple[ObjectiveT, ...]:
        return self._objectives

    @property
    def by_id(self) -> dict[str, ObjectiveT]:
        # Copy so callers cannot mutate the index
        return dict(self._by_id)

    def get(self, objective_id: str) -> ObjectiveT:
        """Return the objective with this id; KeyError if unknown."""
        return self._by_id[objective_id]

    def ids(self) -> list[str]:
        return [o.id for o in self._objectives]

    def groups(self) -> list[tuple[str, list[ObjectiveT]]]:
        """Objectives grouped by label, in declared order."""
        grouped: list[tuple[str, list[ObjectiveT]]] = []
        for objective in self._objectives:
            if not grouped or grouped[-1][0] != objective.label:
                grouped.append((objective.label, []))
            grouped[-1][1].append(objective)
        return grouped


EDS_OBJECTIVES = (
    RowObjective(id="EDS-1", group="Start+Attract", title="Enhance start-up and emerging arts and cultural industry support", compact="Support start-ups and emerging arts/culture ventures with programming and services.", tags=("startups", "arts & culture", "entrepreneurship", "support")),
    RowObjective(id="EDS-2", group="Start+Attract", title="Enhance investment attraction through targeted outreach", compact="Use proactive outreach and promotion to attract new firms and investment.", tags=("investment attraction", "outreach", "prospecting")),
    RowObjective(id="EDS-3", group="Start+Attract", title="Improve investment readiness", compact="Strengthen sites, permitting and data to be investor-ready.", tags=("readiness", "sites", "permits", "data")),
    RowObjective(id="EDS-4", group="Start+Attract", title="Support strategic talent attraction", compact="Help employers attract and retain talent; market Waterloo to workers.", tags=("talent", "workforce", "attraction", "retention")),
    RowObjective(id="EDS-5", group="Preserve+Grow", title="Bolster business retention and expansion programming", compact="Expand BR&E to safeguard and grow existing firms.", tags=("BR&E", "retention", "expansion", "existing firms")),
    RowObjective(id="EDS-6", group="Preserve+Grow", title="Enhance development of creative spaces", compact="Enable workspace and creative spaces to support growth.", tags=("creative spaces", "workspace", "placemaking")),
    RowObjective(id="EDS-7", group="Organize+Empower", title="Encourage increased diversity in local industries", compact="Broaden the industrial mix and support inclusive participation.", tags=("industry mix", "diversity", "inclusive growth")),
    RowObjective(id="EDS-8", group="Organize+Empower", title="Showcase that Waterloo is a complete community", compact="Promote amenities, livability and place-brand to investors and talent.", tags=("complete community", "marketing", "livability", "brand")),
    RowObjective(id="EDS-9", group="Organize+Empower", title="Enhance quality of life and quality of place", compact="Invest in placemaking and quality-of-life assets that underpin growth.", tags=("quality of life", "quality of place", "placemaking")),
)

_READI = "READI"
_CLIMATE = "Environmental Sustainability & Climate Action"
_COMMUNITY = "Complete Community"
_INFRA = "Infrastructure & Transportation Systems"
_INNOVATION = "Innovation & Future-Ready"

STRATEGIC_PLAN_OBJECTIVES = (
    # Priority 1 - READI
    ColumnObjective(id="SP1-1", priority=_READI, number=1, title="Invest in accessibility and inclusion to enhance belonging", compact="Invest in accessibility and inclusion across city facilities, operations and services to strengthen belonging.", tags=("accessibility", "inclusion", "belonging")),
    ColumnObjective(id="SP1-2", priority=_READI, number=2, title="Embed Reconciliation, equity, accessibility, diversity and inclusion across the organization", compact="Embed READI principles into policies, practices and decision-making; strengthen alliances with community partners.", tags=("Reconciliation", "equity", "policy", "governance")),
    ColumnObjective(id="SP1-3", priority=_READI, number=3, title="Advance Reconciliation", compact="Act on TRC Calls to Action and related frameworks; build trust with Indigenous partners.", tags=("Reconciliation", "Indigenous partnerships", "TRC")),
    ColumnObjective(id="SP1-4", priority=_READI, number=4, title="Action anti-racism", compact="Proactively respond to identity-based hate and dismantle systemic racism.", tags=("anti-racism", "human rights", "inclusion")),

    # Priority 2 - Environmental Sustainability & Climate Action
    ColumnObjective(id="SP2-1", priority=_CLIMATE, number=1, title="Climate leadership", compact="Align organizational and community action to meet mitigation/adaptation goals; electrify fleet and retrofit facilities.", tags=("climate action", "mitigation", "adaptation", "GHG")),
    ColumnObjective(id="SP2-2", priority=_CLIMATE, number=2, title="Environmentally sustainable economy", compact="Encourage environmentally sustainable development practices (e.g., Generation Park standards).", tags=("sustainable development", "economy", "standards")),
    ColumnObjective(id="SP2-3", priority=_CLIMATE, number=3, title="Environmental sustainability mindset", compact="Embed environmental sustainability into internal decisions and community education.", tags=("mindset", "operations", "education")),

    # Priority 3 - Complete Community
    ColumnObjective(id="SP3-1", priority=_COMMUNITY, number=1, title="Invest in arts experiences", compact="Invest in arts events and museum strategy to create safe, vibrant public spaces.", tags=("arts", "culture", "museum", "public spaces")),
    ColumnObjective(id="SP3-2", priority=_COMMUNITY, number=2, title="Vibrant public spaces", compact="Plan for context-sensitive intensification and welcoming, accessible spaces that reduce car dependence.", tags=("public realm", "intensification", "accessibility", "mobility")),
    ColumnObjective(id="SP3-3", priority=_COMMUNITY, number=3, title="Complete neighbourhoods", compact="Coordinate on housing initiatives and implement the Affordable Housing Strategy and Housing Pledge.", tags=("housing", "affordability", "neighbourhoods")),
    ColumnObjective(id="SP3-4", priority=_COMMUNITY, number=4, title="Actions to meet community needs", compact="Optimize City-owned lands, renew grants, and expand inclusive programs and amenities.", tags=("community needs", "land use", "grants", "programs")),

    # Priority 4 - Infrastructure & Transportation Systems
    ColumnObjective(id="SP4-1", priority=_INFRA, number=1, title="Sustainable infrastructure planning", compact="Prioritize sustainable, resilient infrastructure; assess and address gaps and life-cycle costs.", tags=("infrastructure", "resilience", "planning")),
    ColumnObjective(id="SP4-2", priority=_INFRA, number=2, title="Mobility and a connected community", compact="Advance Vision Zero and expand year-round transportation options and regional connections.", tags=("mobility", "Vision Zero", "connectivity", "transportation")),
    ColumnObjective(id="SP4-3", priority=_INFRA, number=3, title="Investment in active transportation", compact="Expand active transportation networks and improve cycling/pedestrian safety.", tags=("active transportation", "cycling", "walking", "safety")),

    # Priority 5 - Innovation & Future-Ready
    ColumnObjective(id="SP5-1", priority=_INNOVATION, number=1, title="Support a diversified economy and innovation ecosystem", compact="Support a healthy, diverse economy by partnering with post-secondary, not-for-profit and business sectors.", tags=("innovation ecosystem", "diversification", "partnerships")),
    ColumnObjective(id="SP5-2", priority=_INNOVATION, number=2, title="Partner for social innovation", compact="Collaborate on social innovation, including healthcare advocacy and Community Safety & Wellbeing actions.", tags=("social innovation", "healthcare", "CSWB")),
    ColumnObjective(id="SP5-3", priority=_INNOVATION, number=3, title="Digital opportunities for the future", compact="Identify and align digital opportunities that improve customer service and accessibility.", tags=("digital", "customer service", "accessibility")),
)

ROW_TAXONOMY: Taxonomy[RowObjective] = Taxonomy("Economic Development Strategy", EDS_OBJECTIVES)
COLUMN_TAXONOMY: Taxonomy[ColumnObjective] = Taxonomy("Strategic Plan", STRATEGIC_PLAN_OBJECTIVES)
