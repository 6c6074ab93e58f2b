import datetime as dt
from enum import StrEnum
from typing import Annotated, Dict, List, Optional
from pydantic import BaseModel, Field
from src.models.base import CamelModel

Score = Annotated[float, Field(ge=0, le=1.0)]


class PainPointType(StrEnum):
    EXECUTION_BLIND_SPOT = "execution_blind_spot"
    MARKET_SHARE_EROSION = "market_share_erosion"
    SALES_EFFECTIVENESS = "sales_effectiveness"
    OPERATIONAL_INEFFICIENCY = "operational_inefficiency"
    COMPLIANCE_RISK = "compliance_risk"
    DATA_FRAGMENTATION = "data_fragmentation"
    ROI_JUSTIFICATION = "roi_justification"


class VectorAxis(StrEnum):
    FUNCTIONAL_ROLE = "functional_role"
    ORG_TYPE = "org_type"
    ORG_SIZE = "org_size"
    PRODUCT_FOCUS = "product_focus"


class DetectionEntry(BaseModel):
    """One piece of classification evidence on a single axis."""
    value: str
    confidence: Score
    timestamp: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))


class DetectionVectors(BaseModel):
    """
    Four independent classification histories.
    Entries are only ever appended; the classification is read from the history.
    """
    functional_role_history: List[DetectionEntry] = Field(default_factory=list)
    org_type_history: List[DetectionEntry] = Field(default_factory=list)
    org_size_history: List[DetectionEntry] = Field(default_factory=list)
    product_focus_history: List[DetectionEntry] = Field(default_factory=list)

    def history(self, axis: VectorAxis) -> List[DetectionEntry]:
        return getattr(self, f"{axis.value}_history")


class PersonaScores(BaseModel):
    """
    The durable, session-scoped visitor profile.

    Every score lives in [0, 1]. Updates are additive-with-clamp and happen
    through the pure functions in src.agents.persona_detection, which always
    return a new instance.
    """
    # Organization type
    supplier_score: Score = 0.0
    distributor_score: Score = 0.0

    # Organization size
    craft_score: Score = 0.0
    mid_sized_score: Score = 0.0
    large_score: Score = 0.0

    # Functional focus
    sales_focus_score: Score = 0.0
    marketing_focus_score: Score = 0.0
    operations_focus_score: Score = 0.0
    compliance_focus_score: Score = 0.0

    # Insertion order is detection order
    pain_points_detected: List[PainPointType] = Field(default_factory=list)
    pain_points_confidence: Dict[str, Score] = Field(default_factory=dict)

    overall_confidence: Score = 0.0
    total_interactions: int = Field(default=0, ge=0)

    # Running totals that drive overall_confidence
    signal_count: int = Field(default=0, ge=0)
    signal_strength_total: float = Field(default=0.0, ge=0)

    detection_vectors: DetectionVectors = Field(default_factory=DetectionVectors)
    product_focus_detected: Optional[str] = None


class VectorClassification(CamelModel):
    """Current reading of the four detection axes, as sent in the persona_vectors event."""
    functional_role: Optional[str] = None
    org_type: Optional[str] = None
    org_size: Optional[str] = None
    product_focus: Optional[str] = None
    all_identified: bool = False
