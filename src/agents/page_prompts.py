"""
Prompt construction for the page specification model.

The system prompt carries the schema, the page-type template and the content
rules; the user prompt carries everything specific to this visitor.
"""
from typing import List

from src.config import get_settings
from src.core.page_validation import PAGE_TYPE_MIN_SECTIONS
from src.models.message import MessageRole
from src.models.page import PageGenerationRequest, PageType

PAGE_TYPE_TEMPLATES = {
    PageType.SOLUTION_BRIEF: """
    Solution Brief
    Purpose: Address the specific pain point the visitor described.
    Structure: hero (problem-focused) -> feature_grid (3-4 capabilities that solve it)
      -> metrics (proof) -> testimonial (similar company) -> cta (demo, case study)
    Tone: Professional, solution-focused, empathetic.
    """,
    PageType.FEATURE_SHOWCASE: """
    Feature Showcase
    Purpose: Explain the capabilities the visitor asked about.
    Structure: hero (feature benefit) -> feature_grid (4-6 feature details)
      -> metrics (results) -> faq (objections) -> cta (learn more, request demo)
    Tone: Technical but accessible, benefits-focused.
    """,
    PageType.CASE_STUDY: """
    Case Study
    Purpose: Prove the concept with concrete results.
    Structure: hero (customer result) -> metrics (key outcomes) -> steps (how it was done)
      -> testimonial (customer quote) -> cta (replicate the result)
    Tone: Results-focused, data-driven.
    """,
    PageType.COMPARISON: """
    Comparison
    Purpose: Show why BevGenie stands apart from alternatives.
    Structure: hero (positioning) -> comparison_table (feature by feature)
      -> feature_grid (unique advantages) -> faq (questions) -> cta (talk to an expert)
    Tone: Confident and factual, never attacking competitors.
    """,
    PageType.IMPLEMENTATION_ROADMAP: """
    Implementation Roadmap
    Purpose: Show a clear, realistic path to launch.
    Structure: hero (the journey) -> steps (phases with timeline) -> feature_grid (what is enabled)
      -> faq (common concerns) -> cta (schedule kickoff)
    Tone: Reassuring, clear, actionable.
    """,
    PageType.ROI_CALCULATOR: """
    ROI Calculator
    Purpose: Help the visitor understand the financial impact.
    Structure: hero (value proposition) -> metrics (starting assumptions) -> steps (calculation method)
      -> feature_grid (ROI drivers) -> cta (detailed report)
    Tone: Professional, data-driven, empowering.
    """,
}

SCHEMA_REFERENCE = """
Schema Reference (field names are camelCase):
- type: string (must be "{page_type}")
- title: string (5-150 chars)
- description: string (executive summary, 10-500 chars)
- sections: array of at least {min_sections} section objects, each with a "type" tag:
  - "hero": headline (10-100 chars), subheadline (20-150 chars), ctaButton {{text, action}}
  - "feature_grid": title, subtitle, columns (2-4), features (2-6) [{{icon, title (5-50), description (10-150)}}]
  - "testimonial": quote (20-300 chars), author (2-50 chars), company, role, metric (optional)
  - "comparison_table": title, headers [string], rows (3-12) [{{feature (5-50), values [string|boolean]}}]
  - "cta": title (10-100 chars), description (optional), buttons (1-3) [{{text, action, primary}}]
  - "faq": title (optional), items (2-8) [{{question (10-100), answer (20-500)}}]
  - "metrics": title (optional), metrics (1-5) [{{value (1-20 chars), label, description}}]
  - "steps": title (optional), steps (2-10) [{{number, title (5-50), description (10-200)}}], timeline (optional)
  - "single_screen": headline (10-100 chars), subtitle, insights (max 5) [{{text}}],
    stats (max 4) [{{value, label, description}}], visualContent {{type, title, content, highlight}},
    howItWorks [string], ctas (1-4) [{{text, type: primary|secondary|tertiary, action: form|new_section|chat|explore}}]
"""


def build_page_system_prompt(page_type: PageType, attempt: int = 0) -> str:
    retry_note = ""
    if attempt > 0:
        retry_note = (
            f"\n\nNote: This is retry attempt {attempt}. Pay careful attention to the schema "
            "requirements and ensure all fields are present and valid."
        )

    schema = SCHEMA_REFERENCE.format(
        page_type=page_type.value,
        min_sections=PAGE_TYPE_MIN_SECTIONS[page_type],
    )

    return f"""You are an expert B2B marketing page generator for BevGenie, a beverage industry intelligence platform.
Generate a {page_type.value} page specification that will be rendered as a full page.

Page Type: {page_type.value}
{PAGE_TYPE_TEMPLATES[page_type]}

CRITICAL REQUIREMENTS:
1. Output ONLY valid JSON matching the schema below. No markdown, code fences or explanations.
2. Every required field must be present and within its length and count limits.
3. Content must be specific to the beverage industry (spirits, beer, wine, non-alcoholic; suppliers and distributors).
4. Use concrete metrics and insights from the internal knowledge provided; never mention the documents themselves.
5. Headlines are compelling, subheadlines support them without repeating them.
6. CTAs are action-oriented with clear business value.
7. Content flows from problem to insight to solution to action.
{schema}
Respond with ONLY the JSON page specification, nothing else.{retry_note}"""


def build_page_user_prompt(request: PageGenerationRequest, prior_errors: List[str] | None = None) -> str:
    settings = get_settings()
    parts: List[str] = ["CONTEXT:", f'User\'s Question/Topic: "{request.user_message}"']

    if prior_errors:
        parts.append(
            f"\n[Previous attempt had validation issues: {', '.join(prior_errors)}. "
            "Please regenerate with these corrections.]"
        )

    if request.page_context:
        parts.append("\nUser Interaction Context:")
        parts.append(f"- Interaction Type: {request.interaction_source or 'direct_question'}")
        if request.page_context.get("originalQuery"):
            parts.append(f'- Original Query: "{request.page_context["originalQuery"]}"')
        if request.page_context.get("context"):
            parts.append(f'- User Clicked On: "{request.page_context["context"]}"')
        parts.append("The user is refining their query by clicking on a page element. "
                     "Generate deeper, more specific content about what they clicked on.")

    if request.persona_description:
        parts.append(f"\nUser Profile/Persona: {request.persona_description}")

    limit = settings.page_knowledge_limit
    if request.knowledge_documents:
        parts.append("\n====== INTERNAL KNOWLEDGE BASE CONTEXT ======")
        parts.append("Use these documents to personalize the page. The end user never sees them.")
        for index, doc in enumerate(request.knowledge_documents[:limit], start=1):
            parts.append(f"[DOCUMENT {index}] Relevance: {round(doc.similarity_score * 100)}%")
            if doc.source_type:
                parts.append(f"Source Type: {doc.source_type}")
            parts.append(f"\n{doc.content}\n")
        parts.append("====== END KB CONTEXT ======")

    if request.knowledge_context:
        parts.append("\nRELEVANT INDUSTRY KNOWLEDGE (use these insights in your content):")
        for index, insight in enumerate(request.knowledge_context[:limit], start=1):
            parts.append(f"[Industry Insight {index}]: {insight}")

    context_turns = settings.page_context_turns
    turns = request.conversation_history[-context_turns:] if context_turns else []
    if turns:
        parts.append("\nCONVERSATION CONTEXT:")
        parts.append("\n\n".join(
            f"{'User' if turn.role == MessageRole.USER else 'Assistant'}: {turn.content}" for turn in turns
        ))

    parts.append("\nTASK:")
    parts.append(f"Generate a professional and detailed {request.page_type.value} page specification.")
    parts.append(f"- Create at least {PAGE_TYPE_MIN_SECTIONS[request.page_type]} sections that flow logically")
    parts.append("- Make content specific to their role and pain points")
    parts.append("- Output ONLY valid JSON, no explanations or markdown")

    return "\n".join(parts)
