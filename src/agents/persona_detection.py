"""
Persona Detection
Lexical signal extraction and the pure persona accumulator.

Nothing in this module performs I/O. Every update function returns a new
PersonaScores; the orchestrator owns persistence and signal auditing.
"""
import math
import re
from typing import Dict, List, Optional, Pattern, Tuple

from src.config import get_settings
from src.models.persona import (
    DetectionEntry,
    PainPointType,
    PersonaScores,
    VectorAxis,
    VectorClassification,
)
from src.models.signal import Signal, SignalType


# =========================================================================
# SIGNAL RULES
# =========================================================================

TRAIT_STRENGTH = 0.3
PAIN_POINT_STRENGTH = 0.4

# (signal type, category, strength, patterns). Category is the persona axis
# without its "_score" suffix, or a PainPointType value.
SIGNAL_RULES: List[Tuple[SignalType, str, float, List[str]]] = [
    # Organization type
    (SignalType.PERSONA_TRAIT, "supplier", TRAIT_STRENGTH, [
        r"suppliers?", r"brewer(?:y|ies)", r"winer(?:y|ies)", r"distiller(?:y|ies)",
        r"producers?", r"brand owners?", r"we (?:brew|make|produce|distill)",
    ]),
    (SignalType.PERSONA_TRAIT, "distributor", TRAIT_STRENGTH, [
        r"distributors?", r"distribution", r"wholesal(?:e|er|ers)",
    ]),
    # Organization size
    (SignalType.PERSONA_TRAIT, "craft", TRAIT_STRENGTH, [
        r"craft", r"small[- ]batch", r"micro[- ]?brewer(?:y|ies)", r"independent (?:brand|brewery|winery)",
    ]),
    (SignalType.PERSONA_TRAIT, "mid_sized", TRAIT_STRENGTH, [
        r"mid[- ]?si[sz]ed?", r"regional", r"growing (?:brand|company|team)",
    ]),
    (SignalType.PERSONA_TRAIT, "large", TRAIT_STRENGTH, [
        r"enterprise", r"national(?:ly)?", r"global", r"multinational", r"fortune 500",
        r"large (?:company|organization|team|brand)",
    ]),
    # Functional focus
    (SignalType.PERSONA_TRAIT, "sales_focus", TRAIT_STRENGTH, [
        r"sales", r"sell(?:ing)?", r"reps?", r"account managers?", r"quotas?", r"territor(?:y|ies)",
    ]),
    (SignalType.PERSONA_TRAIT, "marketing_focus", TRAIT_STRENGTH, [
        r"marketing", r"campaigns?", r"brand awareness", r"promotions?", r"social media",
    ]),
    (SignalType.PERSONA_TRAIT, "operations_focus", TRAIT_STRENGTH, [
        r"operations", r"logistics", r"supply chain", r"inventory", r"warehous(?:e|es|ing)", r"fulfil?lment",
    ]),
    (SignalType.PERSONA_TRAIT, "compliance_focus", TRAIT_STRENGTH, [
        r"compliance", r"regulat(?:ion|ions|ory)", r"ttb", r"licens(?:e|es|ing)", r"three[- ]tier",
    ]),
    # Pain points
    (SignalType.PAIN_POINT, PainPointType.EXECUTION_BLIND_SPOT.value, PAIN_POINT_STRENGTH, [
        r"blind spots?", r"no visibility", r"lack of visibility", r"visibility into",
        r"(?:don'?t|do not) know what(?:'s| is) happening", r"in[- ]store execution",
    ]),
    (SignalType.PAIN_POINT, PainPointType.MARKET_SHARE_EROSION.value, PAIN_POINT_STRENGTH, [
        r"market share", r"losing (?:share|ground|shelf space|accounts)", r"shelf space",
        r"competitors? (?:are|is) (?:winning|taking|beating)",
    ]),
    (SignalType.PAIN_POINT, PainPointType.SALES_EFFECTIVENESS.value, PAIN_POINT_STRENGTH, [
        r"sales effectiveness", r"(?:rep|sales) productivity", r"close more", r"win rates?",
        r"underperform(?:ing|s)?", r"miss(?:ed|ing)? (?:quota|targets?)",
    ]),
    (SignalType.PAIN_POINT, PainPointType.OPERATIONAL_INEFFICIENCY.value, PAIN_POINT_STRENGTH, [
        r"inefficien(?:t|cy|cies)", r"manual (?:process|processes|work|reporting|data entry)",
        r"spreadsheets?", r"wast(?:e|es|ing) (?:time|hours)", r"time[- ]consuming",
    ]),
    (SignalType.PAIN_POINT, PainPointType.COMPLIANCE_RISK.value, PAIN_POINT_STRENGTH, [
        r"compliance (?:risk|risks|issues?|problems?)", r"fines", r"fined", r"violations?", r"penalt(?:y|ies)",
        r"audits?",
    ]),
    (SignalType.PAIN_POINT, PainPointType.DATA_FRAGMENTATION.value, PAIN_POINT_STRENGTH, [
        r"data silos?", r"siloed", r"fragmented", r"disconnected (?:systems|data|tools)",
        r"multiple (?:systems|sources|tools|platforms)", r"data (?:is|are) (?:scattered|everywhere)",
    ]),
    (SignalType.PAIN_POINT, PainPointType.ROI_JUSTIFICATION.value, PAIN_POINT_STRENGTH, [
        r"roi", r"return on investment", r"justify (?:the )?(?:cost|spend|investment|budget|price)",
        r"payback", r"worth the (?:cost|investment|price|money)", r"prove (?:the )?value",
    ]),
]


def _compile(patterns: List[str]) -> Pattern:
    return re.compile(r"\b(?:" + "|".join(patterns) + r")\b", re.IGNORECASE)


_COMPILED_RULES: List[Tuple[SignalType, str, float, Pattern]] = [
    (signal_type, category, strength, _compile(patterns))
    for signal_type, category, strength, patterns in SIGNAL_RULES
]


def detect_signals(message: str, current_persona: Optional[PersonaScores] = None) -> List[Signal]:
    """
    Extract persona and pain-point signals from one message.

    At most one signal is produced per category; its evidence is the first
    matching substring of the message. Unmatched or malformed input yields
    an empty list.

    Example:
        >>> detect_signals("How can you help our sales team?")
        [Signal(type='persona_trait', category='sales_focus', strength=0.3, evidence='sales')]
    """
    if not isinstance(message, str) or not message.strip():
        return []

    signals: List[Signal] = []
    for signal_type, category, strength, pattern in _COMPILED_RULES:
        match = pattern.search(message)
        if match:
            signals.append(Signal(
                type=signal_type,
                category=category,
                strength=strength,
                evidence=match.group(0),
            ))
    return signals


# =========================================================================
# PERSONA ACCUMULATOR
# =========================================================================

def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def update_persona_with_signals(
    persona: PersonaScores,
    signals: List[Signal],
    growth_rate: float | None = None
) -> PersonaScores:
    """
    Fold one message's signals into the persona.

    Scores grow additively and are clamped to [0, 1]. Pain points are only
    ever added. overall_confidence follows 1 - exp(-rate * total_strength)
    over the whole session and never decreases.

    Args:
        persona: The current persona (left untouched)
        signals: Signals detected in the message
        growth_rate: Override for settings.confidence_growth_rate

    Returns:
        A new PersonaScores instance
    """
    rate = growth_rate if growth_rate is not None else get_settings().confidence_growth_rate
    updated = persona.model_copy(deep=True)

    for signal in signals:
        if signal.type == SignalType.PERSONA_TRAIT:
            field = f"{signal.category}_score"
            if field not in PersonaScores.model_fields:
                continue
            setattr(updated, field, _clamp(getattr(updated, field) + signal.strength))

        elif signal.type == SignalType.PAIN_POINT:
            try:
                pain_point = PainPointType(signal.category)
            except ValueError:
                continue
            if pain_point not in updated.pain_points_detected:
                updated.pain_points_detected.append(pain_point)
            previous = updated.pain_points_confidence.get(pain_point.value, 0.0)
            updated.pain_points_confidence[pain_point.value] = _clamp(previous + signal.strength)

    updated.signal_count += len(signals)
    updated.signal_strength_total += sum(signal.strength for signal in signals)
    updated.overall_confidence = max(
        persona.overall_confidence,
        _clamp(1.0 - math.exp(-rate * updated.signal_strength_total)),
    )
    updated.total_interactions += 1

    return updated


def top_pain_point(persona: PersonaScores) -> Optional[PainPointType]:
    """Highest-confidence pain point; detection order breaks ties."""
    best: Optional[PainPointType] = None
    best_confidence = -1.0
    for pain_point in persona.pain_points_detected:
        confidence = persona.pain_points_confidence.get(pain_point.value, 0.0)
        if confidence > best_confidence:
            best, best_confidence = pain_point, confidence
    return best


# =========================================================================
# DETECTION VECTORS
# =========================================================================

AXIS_KEYWORDS: Dict[VectorAxis, Dict[str, List[str]]] = {
    VectorAxis.FUNCTIONAL_ROLE: {
        "sales": ["sales", "selling", "sales rep", "sales reps", "account manager", "quota", "revenue"],
        "marketing": ["marketing", "campaign", "campaigns", "brand manager", "promotion", "promotions"],
        "executive": ["ceo", "cfo", "coo", "founder", "owner", "president", "vp", "executive", "leadership"],
        "operations": ["operations", "logistics", "supply chain", "inventory", "warehouse"],
        "finance": ["finance", "budget", "margin", "margins", "pricing", "cost"],
    },
    VectorAxis.ORG_TYPE: {
        "supplier": ["supplier", "brewery", "winery", "distillery", "producer", "brand owner", "we produce"],
        "distributor": ["distributor", "distribution", "wholesaler", "wholesale"],
        "retailer": ["retailer", "retail", "liquor store", "bar", "restaurant", "on-premise", "off-premise"],
        "manufacturer": ["manufacturer", "manufacturing", "bottling", "co-packer"],
    },
    VectorAxis.ORG_SIZE: {
        "craft": ["craft", "small batch", "small-batch", "microbrewery", "boutique", "independent"],
        "mid_sized": ["mid-sized", "mid sized", "midsize", "regional", "growing"],
        "large": ["enterprise", "national", "global", "multinational", "fortune 500", "large"],
    },
    VectorAxis.PRODUCT_FOCUS: {
        "beer": ["beer", "beers", "ipa", "lager", "ale", "ales", "hops"],
        "wine": ["wine", "wines", "vineyard", "vintage", "winery"],
        "spirits": ["spirits", "whiskey", "whisky", "bourbon", "vodka", "tequila", "gin", "rum", "distillery"],
        "non_alcoholic": ["non-alcoholic", "non alcoholic", "na beer", "mocktail", "zero-proof", "kombucha"],
        "rtd": ["rtd", "ready-to-drink", "ready to drink", "seltzer", "hard seltzer", "canned cocktail"],
    },
}

# Interaction context (the element the visitor clicked) counts half
CONTEXT_WEIGHT = 0.5
BASE_VECTOR_CONFIDENCE = 0.35
VECTOR_CONFIDENCE_PER_HIT = 0.3

_AXIS_PATTERNS: Dict[VectorAxis, Dict[str, Pattern]] = {
    axis: {
        value: re.compile(r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b", re.IGNORECASE)
        for value, keywords in values.items()
    }
    for axis, values in AXIS_KEYWORDS.items()
}


def _score_axis(axis: VectorAxis, message: str, context: str) -> Tuple[Optional[str], float]:
    best_value, best_weight = None, 0.0
    for value, pattern in _AXIS_PATTERNS[axis].items():
        weight = len(pattern.findall(message)) + CONTEXT_WEIGHT * len(pattern.findall(context))
        if weight > best_weight:
            best_value, best_weight = value, weight
    if best_value is None:
        return None, 0.0
    return best_value, _clamp(BASE_VECTOR_CONFIDENCE + VECTOR_CONFIDENCE_PER_HIT * best_weight)


def detect_and_update_vectors(
    persona: PersonaScores,
    message: str,
    interaction_context: Optional[str] = None,
    threshold: float | None = None
) -> PersonaScores:
    """
    Evaluate the message (and optional click context) against the four axes.

    A new history entry is appended for an axis only when the best candidate
    value reaches the confidence threshold. Returns a new PersonaScores.
    """
    threshold = threshold if threshold is not None else get_settings().vector_confidence_threshold
    updated = persona.model_copy(deep=True)
    text = message if isinstance(message, str) else ""
    context = interaction_context or ""

    for axis in VectorAxis:
        value, confidence = _score_axis(axis, text, context)
        if value is None or confidence < threshold:
            continue
        updated.detection_vectors.history(axis).append(
            DetectionEntry(value=value, confidence=confidence)
        )
        if axis == VectorAxis.PRODUCT_FOCUS:
            updated.product_focus_detected = value

    return updated


def classify_axis(persona: PersonaScores, axis: VectorAxis, policy: str | None = None) -> Optional[str]:
    history = persona.detection_vectors.history(axis)
    if not history:
        return None
    policy = policy or get_settings().vector_classification_policy
    if policy == "highest_confidence":
        # max() keeps the earliest entry among equals
        return max(history, key=lambda entry: entry.confidence).value
    return history[-1].value


def classify_vectors(persona: PersonaScores, policy: str | None = None) -> VectorClassification:
    """Read the current classification of every axis."""
    values = {axis: classify_axis(persona, axis, policy) for axis in VectorAxis}
    return VectorClassification(
        functional_role=values[VectorAxis.FUNCTIONAL_ROLE],
        org_type=values[VectorAxis.ORG_TYPE],
        org_size=values[VectorAxis.ORG_SIZE],
        product_focus=values[VectorAxis.PRODUCT_FOCUS],
        all_identified=all(value is not None for value in values.values()),
    )


# =========================================================================
# DESCRIPTIONS
# =========================================================================

DESCRIPTION_THRESHOLD = 0.6
PRIMARY_LABEL_THRESHOLD = 0.7

PERSONA_PHRASES: List[Tuple[str, str]] = [
    ("supplier_score", "as a beverage producer/supplier"),
    ("distributor_score", "as a distributor"),
    ("craft_score", "in the craft beverage segment"),
    ("mid_sized_score", "as a mid-sized company"),
    ("large_score", "as an enterprise"),
    ("sales_focus_score", "with a focus on sales effectiveness"),
    ("marketing_focus_score", "prioritizing marketing and brand positioning"),
    ("operations_focus_score", "focused on operational efficiency"),
    ("compliance_focus_score", "concerned with compliance and regulations"),
]


def describe_persona(persona: PersonaScores) -> str:
    """One or two sentences describing the visitor, for model prompts."""
    phrases = [
        phrase for field, phrase in PERSONA_PHRASES
        if getattr(persona, field) > DESCRIPTION_THRESHOLD
    ]
    if phrases:
        text = f"The user is {', '.join(phrases)}."
    else:
        text = "The user is a beverage industry professional."

    if persona.pain_points_detected:
        challenges = " and ".join(p.value for p in persona.pain_points_detected[:2])
        text += f" Their key challenges include {challenges}."
    return text


def primary_persona_label(persona: PersonaScores) -> str:
    """Axes above 0.7 joined by underscores, e.g. 'distributor_sales_focus'."""
    return "_".join(
        field.removesuffix("_score") for field, _ in PERSONA_PHRASES
        if getattr(persona, field) > PRIMARY_LABEL_THRESHOLD
    )
