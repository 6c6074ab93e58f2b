"""
BevGenie Page Specification
The JSON artifact that crosses from the pipeline to the renderer.

Sections form a closed tagged union keyed on `type`; validation and parsing
both dispatch on that tag. Field names are camelCase on the wire.
"""
from enum import StrEnum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import ConfigDict, Field
from src.models.base import CamelModel
from src.models.knowledge import KnowledgeDocument
from src.models.message import ChatTurn
from src.models.persona import PersonaScores


class PageType(StrEnum):
    SOLUTION_BRIEF = "solution_brief"
    FEATURE_SHOWCASE = "feature_showcase"
    CASE_STUDY = "case_study"
    COMPARISON = "comparison"
    IMPLEMENTATION_ROADMAP = "implementation_roadmap"
    ROI_CALCULATOR = "roi_calculator"


class SectionModel(CamelModel):
    # Renderer hints (layout, colors) ride along untouched
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class ActionButton(SectionModel):
    text: str
    action: str = "learn_more"


class HeroSection(SectionModel):
    type: Literal["hero"] = "hero"
    headline: str
    subheadline: Optional[str] = None
    background_image: Optional[str] = None
    cta_button: Optional[ActionButton] = None


class Feature(SectionModel):
    icon: Optional[str] = None
    title: str
    description: str


class FeatureGridSection(SectionModel):
    type: Literal["feature_grid"] = "feature_grid"
    title: Optional[str] = None
    subtitle: Optional[str] = None
    columns: int = 3
    features: List[Feature]


class TestimonialSection(SectionModel):
    type: Literal["testimonial"] = "testimonial"
    quote: str
    author: str
    company: Optional[str] = None
    role: Optional[str] = None
    metric: Optional[str] = None
    image: Optional[str] = None


class ComparisonRow(SectionModel):
    feature: str
    values: List[Union[bool, str]]


class ComparisonTableSection(SectionModel):
    type: Literal["comparison_table"] = "comparison_table"
    title: Optional[str] = None
    headers: List[str]
    rows: List[ComparisonRow]


class CtaButton(ActionButton):
    primary: bool = False


class CtaSection(SectionModel):
    type: Literal["cta"] = "cta"
    title: str
    description: Optional[str] = None
    buttons: List[CtaButton]
    background_color: Optional[str] = None


class FaqItem(SectionModel):
    question: str
    answer: str


class FaqSection(SectionModel):
    type: Literal["faq"] = "faq"
    title: Optional[str] = None
    items: List[FaqItem]


class Metric(SectionModel):
    value: str
    label: str
    description: Optional[str] = None


class MetricsSection(SectionModel):
    type: Literal["metrics"] = "metrics"
    title: Optional[str] = None
    metrics: List[Metric]


class Step(SectionModel):
    number: int
    title: str
    description: str


class StepsSection(SectionModel):
    type: Literal["steps"] = "steps"
    title: Optional[str] = None
    steps: List[Step]
    timeline: Optional[str] = None


class Insight(SectionModel):
    text: str


class VisualContent(SectionModel):
    type: Literal["highlight_box", "case_study", "example"] = "highlight_box"
    title: str
    content: str
    highlight: Optional[str] = None


class SingleScreenCta(SectionModel):
    text: str
    type: Literal["primary", "secondary", "tertiary"] = "primary"
    action: Literal["form", "new_section", "chat", "explore"] = "explore"
    submission_type: Optional[str] = None
    context: Optional[Any] = None


class SingleScreenSection(SectionModel):
    type: Literal["single_screen"] = "single_screen"
    headline: str
    subtitle: Optional[str] = None
    insights: List[Insight] = Field(default_factory=list)
    stats: List[Metric] = Field(default_factory=list)
    visual_content: Optional[VisualContent] = None
    how_it_works: List[str] = Field(default_factory=list)
    ctas: List[SingleScreenCta]


PageSection = Annotated[
    Union[
        HeroSection,
        FeatureGridSection,
        TestimonialSection,
        ComparisonTableSection,
        CtaSection,
        FaqSection,
        MetricsSection,
        StepsSection,
        SingleScreenSection,
    ],
    Field(discriminator="type"),
]


class BevGeniePage(CamelModel):
    """A complete, validated page specification."""
    model_config = ConfigDict(extra="allow")

    type: PageType
    title: str
    description: str
    sections: List[PageSection]
    persona: Optional[str] = Field(None, description="Primary persona label, e.g. 'distributor_sales_focus'")


class PageGenerationRequest(CamelModel):
    """Everything the page generator needs for one page."""
    user_message: str = Field(..., min_length=1)
    page_type: PageType = PageType.SOLUTION_BRIEF
    persona: Optional[PersonaScores] = None
    knowledge_context: List[str] = Field(default_factory=list)
    knowledge_documents: List[KnowledgeDocument] = Field(default_factory=list)
    conversation_history: List[ChatTurn] = Field(default_factory=list)
    persona_description: Optional[str] = None
    page_context: Optional[Dict[str, Any]] = None
    interaction_source: Optional[str] = None


class PageGenerationResult(CamelModel):
    success: bool
    page: Optional[BevGeniePage] = None
    error: Optional[str] = None
    retry_count: int = 0
    generation_time: int = Field(0, description="Milliseconds from first attempt to outcome")
