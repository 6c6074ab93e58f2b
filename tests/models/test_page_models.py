"""
Tests for the page specification models.
"""
import pytest
from pydantic import ValidationError

from src.models.page import (
    BevGeniePage,
    FeatureGridSection,
    HeroSection,
    MetricsSection,
    PageGenerationRequest,
    PageGenerationResult,
    PageType,
)


class TestBevGeniePage:

    def test_sections_dispatch_on_type(self, valid_page):
        page = BevGeniePage.model_validate(valid_page)

        assert page.type == PageType.SOLUTION_BRIEF
        assert isinstance(page.sections[0], HeroSection)
        assert isinstance(page.sections[1], FeatureGridSection)
        assert isinstance(page.sections[2], MetricsSection)

    def test_camel_case_fields_parse(self, valid_page):
        page = BevGeniePage.model_validate(valid_page)

        assert page.sections[0].cta_button.text == "Book a demo"

    def test_numeric_metric_value_coerced(self, valid_page):
        page = BevGeniePage.model_validate(valid_page)

        assert page.sections[2].metrics[1].value == "4"

    def test_payload_round_trips_camel_case(self, valid_page):
        payload = BevGeniePage.model_validate(valid_page).to_payload()

        assert payload["sections"][0]["ctaButton"]["text"] == "Book a demo"
        assert BevGeniePage.model_validate(payload).to_payload() == payload

    def test_renderer_hints_are_kept(self, valid_page):
        valid_page["sections"][0]["layout"] = "centered"

        payload = BevGeniePage.model_validate(valid_page).to_payload()

        assert payload["sections"][0]["layout"] == "centered"

    def test_unknown_section_type_rejected(self, valid_page):
        valid_page["sections"].append({"type": "carousel"})

        with pytest.raises(ValidationError):
            BevGeniePage.model_validate(valid_page)


class TestPageGenerationModels:

    def test_request_requires_message(self):
        with pytest.raises(ValidationError):
            PageGenerationRequest(user_message="")

    def test_request_accepts_camel_case(self):
        request = PageGenerationRequest.model_validate({
            "userMessage": "Show me ROI",
            "pageType": "roi_calculator",
            "knowledgeContext": ["Depletion data cuts reporting time in half."],
        })

        assert request.page_type == PageType.ROI_CALCULATOR
        assert request.knowledge_context == ["Depletion data cuts reporting time in half."]

    def test_result_payload_shape(self):
        payload = PageGenerationResult(success=False, error="boom", retry_count=2, generation_time=15).to_payload()

        assert payload == {"success": False, "error": "boom", "retryCount": 2, "generationTime": 15}
