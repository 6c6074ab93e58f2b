from enum import StrEnum
from typing import Optional
from pydantic import BaseModel, Field
from src.models.page import PageType


class Intent(StrEnum):
    PROBLEM = "problem_inquiry"
    SALES = "sales_inquiry"
    FEATURE = "feature_inquiry"
    PROOF = "proof_inquiry"
    COMPARISON = "comparison_inquiry"
    ROI = "roi_inquiry"
    ONBOARDING = "onboarding_inquiry"
    GENERAL = "general_inquiry"


class IntentAnalysis(BaseModel):
    """Output contract of the intent classifier."""
    intent: Intent
    confidence: float = Field(ge=0, le=1.0)
    suggested_page_type: Optional[PageType] = None
    matched_keywords: list[str] = Field(default_factory=list)
