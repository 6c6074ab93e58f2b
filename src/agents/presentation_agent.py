"""
Presentation Agent
Builds a four-slide management deck from what the visitor actually asked.
"""
import json
import re
from typing import Any, List
from loguru import logger
from pydantic import ValidationError

from src.agents.persona_detection import classify_vectors
from src.config import get_settings
from src.models.persona import PersonaScores
from src.models.presentation import PresentationData, Slide
from src.utils.llm_client import LanguageModel

ROLE_LABELS = {
    "sales": "Sales Director",
    "marketing": "Marketing Leader",
    "executive": "Executive",
    "operations": "Operations Manager",
    "finance": "Finance Director",
}
ORG_TYPE_LABELS = {
    "supplier": "Supplier",
    "distributor": "Distributor",
    "retailer": "Retailer",
    "manufacturer": "Manufacturer",
}
ORG_SIZE_LABELS = {
    "craft": "Craft/Small",
    "mid_sized": "Mid-sized",
    "large": "Large Enterprise",
}

PRESENTATION_SYSTEM_PROMPT = (
    "You create concise, personal management presentations for BevGenie, an AI business "
    "intelligence platform for the beverage industry. You only ever answer with a JSON array."
)


class PresentationError(Exception):
    """The model's deck could not be parsed into slides."""
    pass


def describe_audience(persona: PersonaScores) -> tuple[str, str, str]:
    """(role, org type, org size) labels, read from the persona's detection vectors."""
    vectors = classify_vectors(persona, policy="latest")
    return (
        ROLE_LABELS.get(vectors.functional_role or "", "Business Leader"),
        ORG_TYPE_LABELS.get(vectors.org_type or "", "Organization"),
        ORG_SIZE_LABELS.get(vectors.org_size or "", "Mid-sized"),
    )


def top_category(data: PresentationData) -> str:
    if not data.category_breakdown:
        return "Business Intelligence"
    return max(data.category_breakdown, key=data.category_breakdown.get)


def build_presentation_prompt(data: PresentationData) -> str:
    role, org_type, org_size = describe_audience(data.persona)
    product_focus = data.persona.product_focus_detected or "Beverage Industry"
    first_question = data.actual_questions[0] if data.actual_questions else ""
    first_saving = data.problem_solutions[0].time_saved if data.problem_solutions else 15

    questions = "\n".join(f'{i}. "{q}"' for i, q in enumerate(data.actual_questions, start=1))
    problems = "\n".join(
        f"Problem {i}: {ps.problem_statement}\n"
        f'User Asked: "{ps.user_question}"\n'
        f"Solution: {ps.bevgenie_solution}\n"
        f"Feature: {ps.feature_used}\n"
        f"Before: {ps.before_state}\n"
        f"After: {ps.after_state}\n"
        f"Time Saved: {ps.time_saved} minutes\n"
        for i, ps in enumerate(data.problem_solutions, start=1)
    )
    breakdown = "\n".join(f"- {category}: {count} queries" for category, count in data.category_breakdown.items())
    features = ", ".join(dict.fromkeys(ps.feature_used for ps in data.problem_solutions))

    return f"""Generate a concise 4-slide presentation based on this user's actual session with BevGenie AI.

PERSONA:
- Role: {role}
- Organization: {org_type} ({org_size})
- Product Focus: {product_focus}

SESSION SUMMARY:
- Duration: {data.session.duration}
- Questions Asked: {data.session.queries_asked}
- Problems Solved: {data.session.problems_solved}

ACTUAL QUESTIONS ASKED (use these verbatim):
{questions}

PROBLEMS & SOLUTIONS (map to their questions):
{problems}
CATEGORY BREAKDOWN:
{breakdown}

ROI CALCULATION:
- Total Time Saved: {data.roi.total_minutes_saved} minutes ({data.roi.hours_saved} hours)
- Cost Savings: ${data.roi.cost_saved}
- Efficiency Gain: {data.roi.efficiency_gain}%

CREATE EXACTLY 4 SLIDES:

SLIDE 1: "About You" (bullets) - 4-6 bullets: {role} at {org_type} ({org_size}), product focus,
primary interest {top_category(data)}, session duration, the 2-3 main topics of their questions.

SLIDE 2: "What is BevGenie?" (bullets) - 5-7 bullets explaining the platform, with the 3-4 features
most relevant to a {role}.

SLIDE 3: "How BevGenie Solves Your Challenges" (bullets) - 5-7 bullets starting with a checkmark,
each quoting one of their actual questions with its before/after and the time it saved.
For example: When you asked "{first_question}" ... Saved {first_saving} minutes on this task alone.

SLIDE 4: "Your Results & ROI" (stats) - questions answered, {data.roi.hours_saved} hours saved,
${data.roi.cost_saved} saved, {data.roi.efficiency_gain}% efficiency gain, features used ({features}),
projected monthly savings, and 1-2 suggested next steps for a {role}.

RULES:
1. Concise bullet points only, no paragraphs, at most 7 bullets per slide.
2. Quote their actual questions word for word.
3. Every benefit references their session data; address them as "you".

Return a JSON array of slides:
[{{"slideNumber": 1, "title": "...", "subtitle": "...", "content": {{"type": "bullets|comparison|quote|stats|timeline|grid", "data": [...]}}, "visualDescription": "...", "speakerNotes": "..."}}]

Return ONLY the JSON array, no markdown formatting, no code blocks."""


def parse_slides(text: str) -> List[Slide]:
    """Parse the outermost JSON array in the model output into slides."""
    match = re.search(r"\[.*\]", text or "", re.DOTALL)
    if not match:
        raise PresentationError("No JSON found in response")

    try:
        raw: Any = json.loads(match.group(0))
        return [Slide.model_validate(item) for item in raw]
    except (json.JSONDecodeError, TypeError, ValidationError) as e:
        raise PresentationError(f"Invalid slide JSON: {e}") from e


class PresentationAgent:
    def __init__(self, language_model: LanguageModel, max_tokens: int | None = None):
        settings = get_settings()
        self.language_model = language_model
        self.model = settings.presentation_model
        self.max_tokens = max_tokens or settings.presentation_max_tokens

    async def generate(self, data: PresentationData) -> List[Slide]:
        """
        Ask the model for the deck.

        Raises:
            PresentationError: If the output holds no valid slide array
            LLMError / LLMCriticalError: On model failure
        """
        text = await self.language_model.complete_text(
            system_prompt=PRESENTATION_SYSTEM_PROMPT,
            user_prompt=build_presentation_prompt(data),
            max_tokens=self.max_tokens,
            temperature=0.7,
            purpose="presentation",
            model=self.model,
        )
        slides = parse_slides(text)
        logger.info(f"Presentation generated with {len(slides)} slides for {data.session.queries_asked} queries")
        return slides
