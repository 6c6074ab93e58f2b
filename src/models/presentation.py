from typing import Any, Dict, List, Literal, Optional
from pydantic import Field

from src.models.base import CamelModel
from src.models.persona import PersonaScores


class ProblemSolution(CamelModel):
    """One tracked question, framed as a before/after story."""
    problem_statement: str
    user_question: str
    bevgenie_solution: str = Field(..., alias="bevGenieSolution")
    feature_used: str
    before_state: str
    after_state: str
    time_saved: int


class SessionSummary(CamelModel):
    duration: str
    queries_asked: int
    problems_solved: int


class ROISummary(CamelModel):
    total_minutes_saved: int
    hours_saved: float
    cost_saved: int
    efficiency_gain: int


class PresentationData(CamelModel):
    persona: PersonaScores
    session: SessionSummary
    actual_questions: List[str]
    problem_solutions: List[ProblemSolution]
    category_breakdown: Dict[str, int]
    roi: ROISummary


class SlideContent(CamelModel):
    type: Literal["bullets", "comparison", "quote", "stats", "timeline", "grid"] = "bullets"
    data: Any = None


class Slide(CamelModel):
    slide_number: int
    title: str
    subtitle: Optional[str] = None
    content: SlideContent
    visual_description: str = ""
    speaker_notes: str = ""


class PresentationMetadata(CamelModel):
    queries_count: int
    duration: str
    roi_savings: int


class PresentationResponse(CamelModel):
    success: bool = True
    slides: List[Slide]
    metadata: PresentationMetadata
