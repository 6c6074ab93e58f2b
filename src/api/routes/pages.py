"""
Standalone Page Generation Endpoint
"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.agents.page_generator import PageGenerator
from src.api.dependencies import get_page_generator
from src.models.page import PageGenerationRequest
from src.utils.fallback_responses import get_fallback_page_content

router = APIRouter(prefix="/api/pages", tags=["Pages"])


@router.post("/generate")
async def generate_page(
    body: PageGenerationRequest,
    page_generator: PageGenerator = Depends(get_page_generator)
):
    """
    Generate one page specification without streaming.

    Returns:
        {success, page?, error?, retryCount, generationTime}; a failed
        generation also carries `fallbackContent` text for the page type.
    """
    result = await page_generator.generate(body)
    payload = result.to_payload()
    if not result.success:
        payload["fallbackContent"] = get_fallback_page_content(body.page_type)
    return JSONResponse(content=payload)
