import datetime as dt
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from src.models.base import MongoBaseModel
from src.models.persona import PersonaScores, PainPointType


class UserQuery(BaseModel):
    """One tracked visitor question, fed to the presentation deck."""
    query: str
    timestamp: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))
    context: str = "chat"
    problem_type: str = "General Inquiry"
    solution_provided: str = "Solution being generated..."
    feature_used: str = "BevGenie AI"


class Session(MongoBaseModel):
    """
    The Central Session Record.
    Keyed by session_id and written only by the owning request's persist step.
    """
    session_id: str = Field(..., description="Opaque id carried in the session cookie")
    persona: PersonaScores = Field(default_factory=PersonaScores)
    message_count: int = 0
    tracked_queries: List[UserQuery] = Field(default_factory=list)
    session_start: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))
    last_interaction_at: dt.datetime = Field(default_factory=lambda: dt.datetime.now(dt.UTC))


class PersonaSignalRecord(MongoBaseModel):
    """Audit trail entry for one detected signal."""
    session_id: str
    signal_type: str
    evidence: str
    strength: float = Field(gt=0, le=1.0)
    pain_points: Optional[List[PainPointType]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
