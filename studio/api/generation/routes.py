from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from functools import lru_cache
from typing import Optional
import logging

from api.generation.schemas import ErrorResponse, GenerateTryOnRequest, GenerateTryOnResponse
from api.security import get_optional_user_id
from tryon.outcome import TEXT_ONLY_PLACEHOLDER_URL, FailureOutcome, GenerationOutcome, ImageOutcome, TextOnlyOutcome
from tryon.providers.registry import build_provider
from tryon.relay import RelayService

router = APIRouter()
logger = logging.getLogger(__name__)


_ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (400, 402, 429, 500)
}


@lru_cache(maxsize=1)
def get_relay_service() -> RelayService:
    """Process-wide relay; the configured provider is built on the first valid request."""
    return RelayService(provider_factory=build_provider)


def outcome_to_response(outcome: GenerationOutcome) -> JSONResponse:
    if isinstance(outcome, ImageOutcome):
        body = GenerateTryOnResponse(generatedImageUrl=outcome.image_url)
        return JSONResponse(status_code=200, content=body.model_dump(exclude_none=True))
    if isinstance(outcome, TextOnlyOutcome):
        body = GenerateTryOnResponse(generatedImageUrl=TEXT_ONLY_PLACEHOLDER_URL, message=outcome.message)
        return JSONResponse(status_code=200, content=body.model_dump())
    if isinstance(outcome, FailureOutcome):
        return JSONResponse(status_code=outcome.status_code, content={"error": outcome.message})
    logger.error(f"Unknown generation outcome: {outcome!r}")
    return JSONResponse(status_code=500, content={"error": "Failed to generate image"})


@router.post("/api/generate-tryon", response_model=GenerateTryOnResponse, responses=_ERROR_RESPONSES, tags=["Generation"])
@router.post("/generate", response_model=GenerateTryOnResponse, responses=_ERROR_RESPONSES, tags=["Generation"])
async def generate_tryon(
    payload: GenerateTryOnRequest,
    user_id: Optional[str] = Depends(get_optional_user_id),
    relay: RelayService = Depends(get_relay_service),
):
    """
    Forwards the user's photo and prompt to the configured image model and relays the result.
    A text-only answer from the model is returned with a placeholder image and the model's message.
    """
    logger.info(f"Received generate-tryon request category={payload.category} user_id={user_id}")
    outcome = await relay.generate(
        image=payload.imageBase64,
        prompt=payload.prompt,
        category=payload.category,
        credential=user_id,
    )
    return outcome_to_response(outcome)
