"""
Fallback Responses for LLM Degradation

Predefined safe responses when the language model is unavailable.
These keep the conversation alive without making promises.
"""
from src.models.page import PageType

FALLBACK_CHAT_REPLY = "I apologize, but I'm having trouble processing your message. Could you try again?"

FALLBACK_PAGE_CONTENT = {
    PageType.SOLUTION_BRIEF: (
        "I understand your challenge. Our solution is designed to address these specific pain points "
        "in the beverage industry. Let me know if you would like more details about how we can help."
    ),
    PageType.FEATURE_SHOWCASE: (
        "Great question! These features are core to our platform and help teams work more efficiently. "
        "Would you like me to walk through any specific capability in more detail?"
    ),
    PageType.CASE_STUDY: (
        "We have helped many beverage companies achieve significant results. Each implementation is "
        "tailored to their unique needs. Would you like to discuss a similar scenario?"
    ),
    PageType.COMPARISON: (
        "We stand out by focusing specifically on the beverage industry with purpose-built features. "
        "Let me know which aspects matter most to you, and I can provide a detailed comparison."
    ),
    PageType.IMPLEMENTATION_ROADMAP: (
        "Most implementations follow a structured process that we can customize to your timeline. "
        "We ensure a smooth launch with proper planning and support every step of the way."
    ),
    PageType.ROI_CALCULATOR: (
        "The financial impact depends on your specific situation. Factors like team size, current "
        "processes, and your goals all play a role. Let us discuss your scenario to build a more "
        "accurate projection."
    ),
}


def get_fallback_reply() -> str:
    """Reply used when response synthesis fails."""
    return FALLBACK_CHAT_REPLY


def get_fallback_page_content(page_type: PageType | str) -> str:
    """
    Text-only stand-in for a page that could not be generated.

    Args:
        page_type: The page archetype that was requested

    Returns:
        A short, non-committal paragraph for that archetype
    """
    try:
        return FALLBACK_PAGE_CONTENT[PageType(page_type)]
    except ValueError:
        return FALLBACK_PAGE_CONTENT[PageType.SOLUTION_BRIEF]
