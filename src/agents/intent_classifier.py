"""
Intent Classifier
Deterministic keyword classification of a visitor message. No model call.
"""
import re
from typing import Dict, List, Optional, Pattern
from loguru import logger

from src.config import get_settings
from src.models.intent import Intent, IntentAnalysis
from src.models.page import PageType
from src.models.persona import PersonaScores

# Listed in tie-break priority order
INTENT_KEYWORDS: Dict[Intent, List[str]] = {
    Intent.COMPARISON: [
        r"compare", r"comparison", r"versus", r"vs\.?", r"alternatives?", r"competitors?",
        r"better than", r"difference between", r"differ from",
    ],
    Intent.ROI: [
        r"roi", r"return on investment", r"cost", r"costs", r"price", r"pricing", r"savings?",
        r"payback", r"worth it", r"budget",
    ],
    Intent.PROOF: [
        r"case stud(?:y|ies)", r"proof", r"examples?", r"customers?", r"success stor(?:y|ies)",
        r"results", r"testimonials?", r"who else", r"references?",
    ],
    Intent.ONBOARDING: [
        r"implement(?:ation)?", r"onboard(?:ing)?", r"get started", r"set ?up", r"integrat(?:e|ion)",
        r"timeline", r"roll ?out", r"how long",
    ],
    Intent.FEATURE: [
        r"features?", r"capabilit(?:y|ies)", r"dashboards?", r"how does (?:it|bevgenie|this) work",
        r"functionality", r"analytics", r"reports?", r"what can (?:it|bevgenie|you) do",
    ],
    Intent.SALES: [
        r"sales (?:team|teams|reps?|people|force|org|organization)", r"salespeople", r"sell more",
        r"sales", r"reps", r"territor(?:y|ies)", r"accounts",
    ],
    Intent.PROBLEM: [
        r"struggl(?:e|es|ing)", r"problems?", r"challenges?", r"issues?", r"pain", r"difficult",
        r"can'?t", r"losing", r"frustrat(?:ed|ing)", r"help",
    ],
}

INTENT_PAGE_TYPES: Dict[Intent, PageType] = {
    Intent.PROBLEM: PageType.SOLUTION_BRIEF,
    Intent.SALES: PageType.SOLUTION_BRIEF,
    Intent.FEATURE: PageType.FEATURE_SHOWCASE,
    Intent.PROOF: PageType.CASE_STUDY,
    Intent.COMPARISON: PageType.COMPARISON,
    Intent.ROI: PageType.ROI_CALCULATOR,
    Intent.ONBOARDING: PageType.IMPLEMENTATION_ROADMAP,
}

GENERAL_CONFIDENCE = 0.3
BASE_CONFIDENCE = 0.55
CONFIDENCE_PER_EXTRA_HIT = 0.15
MAX_CONFIDENCE = 0.95
# Later-stage intents are likelier deeper into a conversation
LATE_STAGE_INTENTS = (Intent.ROI, Intent.PROOF, Intent.ONBOARDING)
LATE_STAGE_MIN_MESSAGES = 4
STAGE_BONUS = 0.05

_INTENT_PATTERNS: Dict[Intent, List[Pattern]] = {
    intent: [re.compile(rf"\b{pattern}\b", re.IGNORECASE) for pattern in patterns]
    for intent, patterns in INTENT_KEYWORDS.items()
}


def _general() -> IntentAnalysis:
    return IntentAnalysis(intent=Intent.GENERAL, confidence=GENERAL_CONFIDENCE)


def _classify(message: str, conversation_length: int, persona: Optional[PersonaScores]) -> IntentAnalysis:
    if not isinstance(message, str) or not message.strip():
        return _general()

    best_intent: Optional[Intent] = None
    best_matches: List[str] = []
    for intent, patterns in _INTENT_PATTERNS.items():
        matches = []
        for pattern in patterns:
            found = pattern.search(message)
            if found:
                matches.append(found.group(0).lower())
        # Strictly greater keeps the earlier (higher-priority) intent on ties
        if len(matches) > len(best_matches):
            best_intent, best_matches = intent, matches

    if best_intent is None:
        return _general()

    confidence = BASE_CONFIDENCE + CONFIDENCE_PER_EXTRA_HIT * (len(best_matches) - 1)
    if best_intent in LATE_STAGE_INTENTS and conversation_length >= LATE_STAGE_MIN_MESSAGES:
        confidence += STAGE_BONUS
    if best_intent == Intent.PROBLEM and persona is not None and persona.pain_points_detected:
        confidence += STAGE_BONUS
    confidence = min(confidence, MAX_CONFIDENCE)

    threshold = get_settings().intent_page_confidence_threshold
    return IntentAnalysis(
        intent=best_intent,
        confidence=confidence,
        suggested_page_type=INTENT_PAGE_TYPES.get(best_intent) if confidence >= threshold else None,
        matched_keywords=best_matches,
    )


def classify_message_intent(
    message: str,
    conversation_length: int = 0,
    persona: Optional[PersonaScores] = None
) -> IntentAnalysis:
    """
    Classify a message into one intent with a confidence score.

    Never raises: anything unexpected degrades to the generic intent.

    Example:
        >>> classify_message_intent("How can you help our sales team?").intent
        <Intent.SALES: 'sales_inquiry'>
    """
    try:
        return _classify(message, conversation_length, persona)
    except Exception as e:
        logger.warning(f"Intent classification failed, using general intent: {e}")
        return _general()
