"""
Page Specification Validation
Quality gate between the page model's raw JSON and the renderer.

`validate_page_spec` is a pure function over the parsed object: it never
mutates its input and returns the same error list for the same page.
Sections are validated by dispatching on their `type` tag.
"""
from typing import Any, Callable, Dict, List
from pydantic import ValidationError

from src.models.page import BevGeniePage, PageType

Bounds = Dict[str, int]

VALIDATION_RULES: Dict[str, Dict[str, Any]] = {
    "page": {
        "title": {"min": 5, "max": 150},
        "description": {"min": 10, "max": 500},
    },
    "hero": {
        "headline": {"min": 10, "max": 100},
        "subheadline": {"min": 20, "max": 150},
    },
    "feature_grid": {
        "features": {"min": 2, "max": 6},
        "feature_title": {"min": 5, "max": 50},
        "feature_description": {"min": 10, "max": 150},
    },
    "testimonial": {
        "quote": {"min": 20, "max": 300},
        "author": {"min": 2, "max": 50},
    },
    "comparison_table": {
        "rows": {"min": 3, "max": 12},
        "feature": {"min": 5, "max": 50},
    },
    "cta": {
        "title": {"min": 10, "max": 100},
        "buttons": {"min": 1, "max": 3},
    },
    "faq": {
        "items": {"min": 2, "max": 8},
        "question": {"min": 10, "max": 100},
        "answer": {"min": 20, "max": 500},
    },
    "metrics": {
        "metrics": {"min": 1, "max": 5},
        "value": {"min": 1, "max": 20},
    },
    "steps": {
        "steps": {"min": 2, "max": 10},
        "title": {"min": 5, "max": 50},
        "description": {"min": 10, "max": 200},
    },
    "single_screen": {
        "headline": {"min": 10, "max": 100},
        "ctas": {"min": 1, "max": 4},
        "insights": {"min": 0, "max": 5},
        "stats": {"min": 0, "max": 4},
    },
}

# Minimum number of sections per page archetype
PAGE_TYPE_MIN_SECTIONS: Dict[PageType, int] = {
    PageType.SOLUTION_BRIEF: 4,
    PageType.FEATURE_SHOWCASE: 4,
    PageType.CASE_STUDY: 4,
    PageType.COMPARISON: 4,
    PageType.IMPLEMENTATION_ROADMAP: 4,
    PageType.ROI_CALCULATOR: 4,
}


def _check_text(value: Any, label: str, bounds: Bounds, required: bool = True) -> List[str]:
    if value is None or value == "":
        return [f"Missing {label}"] if required else []
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return [f"{label} must be a string"]
    if len(value) < bounds["min"]:
        return [f"{label} too short (min {bounds['min']} chars)"]
    if len(value) > bounds["max"]:
        return [f"{label} too long (max {bounds['max']} chars)"]
    return []


def _check_items(value: Any, label: str, bounds: Bounds) -> List[str]:
    if value is None:
        value = []
    if not isinstance(value, list):
        return [f"{label} must be a list"]
    if len(value) < bounds["min"]:
        return [f"Too few {label} (min {bounds['min']})"]
    if len(value) > bounds["max"]:
        return [f"Too many {label} (max {bounds['max']})"]
    return []


def _each(items: Any) -> List[Dict[str, Any]]:
    if not isinstance(items, list):
        return []
    return [item if isinstance(item, dict) else {} for item in items]


def _validate_hero(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["hero"]
    errors = _check_text(section.get("headline"), "headline", rules["headline"])
    errors += _check_text(section.get("subheadline"), "subheadline", rules["subheadline"], required=False)
    return errors


def _validate_feature_grid(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["feature_grid"]
    errors = _check_items(section.get("features"), "features", rules["features"])
    for i, feature in enumerate(_each(section.get("features"))):
        if not feature.get("title") or not feature.get("description"):
            errors.append(f"Feature {i}: Missing title or description")
            continue
        errors += [f"Feature {i}: {e}" for e in _check_text(feature["title"], "title", rules["feature_title"])]
        errors += [
            f"Feature {i}: {e}"
            for e in _check_text(feature["description"], "description", rules["feature_description"])
        ]
    return errors


def _validate_testimonial(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["testimonial"]
    errors = _check_text(section.get("quote"), "quote", rules["quote"])
    errors += _check_text(section.get("author"), "author", rules["author"])
    return errors


def _validate_comparison_table(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["comparison_table"]
    errors = []
    if not section.get("headers"):
        errors.append("Missing headers")
    errors += _check_items(section.get("rows"), "rows", rules["rows"])
    for i, row in enumerate(_each(section.get("rows"))):
        errors += [f"Row {i}: {e}" for e in _check_text(row.get("feature"), "feature", rules["feature"])]
    return errors


def _validate_cta(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["cta"]
    errors = _check_text(section.get("title"), "title", rules["title"])
    errors += _check_items(section.get("buttons"), "buttons", rules["buttons"])
    for i, button in enumerate(_each(section.get("buttons"))):
        if not button.get("text"):
            errors.append(f"Button {i}: Missing text")
    return errors


def _validate_faq(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["faq"]
    errors = _check_items(section.get("items"), "FAQ items", rules["items"])
    for i, item in enumerate(_each(section.get("items"))):
        errors += [f"Item {i}: {e}" for e in _check_text(item.get("question"), "question", rules["question"])]
        errors += [f"Item {i}: {e}" for e in _check_text(item.get("answer"), "answer", rules["answer"])]
    return errors


def _validate_metrics(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["metrics"]
    errors = _check_items(section.get("metrics"), "metrics", rules["metrics"])
    for i, metric in enumerate(_each(section.get("metrics"))):
        errors += [f"Metric {i}: {e}" for e in _check_text(metric.get("value"), "value", rules["value"])]
        if not metric.get("label"):
            errors.append(f"Metric {i}: Missing label")
    return errors


def _validate_steps(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["steps"]
    errors = _check_items(section.get("steps"), "steps", rules["steps"])
    for i, step in enumerate(_each(section.get("steps"))):
        errors += [f"Step {i}: {e}" for e in _check_text(step.get("title"), "title", rules["title"])]
        errors += [
            f"Step {i}: {e}" for e in _check_text(step.get("description"), "description", rules["description"])
        ]
    return errors


def _validate_single_screen(section: Dict[str, Any]) -> List[str]:
    rules = VALIDATION_RULES["single_screen"]
    errors = _check_text(section.get("headline"), "headline", rules["headline"])
    errors += _check_items(section.get("ctas"), "CTAs", rules["ctas"])
    errors += _check_items(section.get("insights"), "insights", rules["insights"])
    errors += _check_items(section.get("stats"), "stats", rules["stats"])
    return errors


SECTION_VALIDATORS: Dict[str, Callable[[Dict[str, Any]], List[str]]] = {
    "hero": _validate_hero,
    "feature_grid": _validate_feature_grid,
    "testimonial": _validate_testimonial,
    "comparison_table": _validate_comparison_table,
    "cta": _validate_cta,
    "faq": _validate_faq,
    "metrics": _validate_metrics,
    "steps": _validate_steps,
    "single_screen": _validate_single_screen,
}


def validate_section(section: Any) -> List[str]:
    """Validate one section against the rule for its tag."""
    if not isinstance(section, dict):
        return ["Section must be an object"]
    tag = section.get("type")
    validator = SECTION_VALIDATORS.get(tag) if isinstance(tag, str) else None
    if validator is None:
        return [f"Unknown section type: {tag}"]
    return validator(section)


def _schema_errors(exc: ValidationError) -> List[str]:
    errors = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err["loc"])
        errors.append(f"Schema: {location}: {err['msg']}")
    return errors


def validate_page_spec(page: Any) -> List[str]:
    """
    Validate a parsed page specification.

    Args:
        page: The object parsed from the page model's output

    Returns:
        Human-readable error strings; an empty list means the page is valid.
    """
    if not isinstance(page, dict):
        return ["Page specification must be a JSON object"]

    if not page.get("type") or not page.get("title") or not page.get("description"):
        return ["Missing required fields: type, title, or description"]

    try:
        page_type = PageType(page["type"])
    except (TypeError, ValueError):
        return [f"Unknown page type: {page['type']}"]

    errors: List[str] = []
    errors += _check_text(page["title"], "title", VALIDATION_RULES["page"]["title"])
    errors += _check_text(page["description"], "description", VALIDATION_RULES["page"]["description"])

    sections = page.get("sections")
    if not isinstance(sections, list) or len(sections) == 0:
        errors.append("Page must contain at least one section (missing or empty sections)")
        return errors

    minimum = PAGE_TYPE_MIN_SECTIONS[page_type]
    if len(sections) < minimum:
        errors.append(f"Too few sections for {page_type.value} (min {minimum}, got {len(sections)})")

    for index, section in enumerate(sections):
        tag = section.get("type") if isinstance(section, dict) else None
        errors += [f"Section {index} ({tag}): {e}" for e in validate_section(section)]

    if errors:
        return errors

    # Rules passed; the typed model catches remaining shape problems
    try:
        BevGeniePage.model_validate(page)
    except ValidationError as exc:
        return _schema_errors(exc)

    return []
