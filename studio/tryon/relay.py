"""
Try-on relay: validates a photo + prompt, forwards it to the configured generation provider
and folds the provider's answer into exactly one GenerationOutcome.
"""

import logging
from typing import Callable, Optional

from tryon.composer import compose_request
from tryon.exceptions import ProviderConfigurationError, ProviderNetworkError, RequestValidationError
from tryon.outcome import (
    FailureKind,
    FailureOutcome,
    GenerationOutcome,
    ImageOutcome,
    TextOnlyOutcome,
)
from tryon.providers.base import GenerationProvider, ProviderResponse

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
QUOTA_MESSAGE = "Usage limit reached. Please add credits to continue."
NO_CONTENT_MESSAGE = "No content generated"


class RelayService:
    """
    Either a ready ``provider`` or a ``provider_factory`` is required. A factory is only called
    once a request has passed validation, so a bad request is rejected even when the provider
    credentials are missing.
    """

    def __init__(
        self,
        provider: Optional[GenerationProvider] = None,
        provider_factory: Optional[Callable[[], GenerationProvider]] = None,
    ):
        if provider is None and provider_factory is None:
            raise ValueError("RelayService needs a provider or a provider_factory")
        self._provider = provider
        self._provider_factory = provider_factory

    @property
    def provider(self) -> GenerationProvider:
        if self._provider is None:
            self._provider = self._provider_factory()
        return self._provider

    async def generate(
        self,
        image: Optional[str],
        prompt: Optional[str],
        category: Optional[str],
        credential: Optional[str] = None,
    ) -> GenerationOutcome:
        """
        Runs one generation round trip. Never raises: every failure becomes a FailureOutcome.

        Args:
            image: data URL or bare base64 photo.
            prompt: the user's free-text request.
            category: makeup / clothes / style-advice; anything else is a generic edit.
            credential: caller identity from the bearer token, used for log context only.
        """
        try:
            request = compose_request(image, prompt, category)
        except RequestValidationError as e:
            logger.info(f"Rejected generation request: {e}", extra={"caller": credential})
            return FailureOutcome(kind=FailureKind.VALIDATION, message=str(e))

        try:
            provider = self.provider
        except ProviderConfigurationError as e:
            logger.error(f"Generation provider unavailable: {e}")
            return FailureOutcome(kind=FailureKind.PROVIDER_ERROR, message=str(e))

        logger.info({
            "event": "generate:start",
            "provider": provider.name,
            "category": request.category.value,
            "prompt": request.prompt[:100],
            "caller": credential,
        })

        try:
            response = await provider.submit_generation(request)
        except ProviderNetworkError as e:
            logger.error(f"Generation provider unreachable: {e}")
            return FailureOutcome(kind=FailureKind.NETWORK_FAILURE, message="Could not reach the AI provider. Please try again.")
        except Exception as e:
            logger.exception(f"Unexpected error from generation provider {provider.name}: {e}")
            return FailureOutcome(kind=FailureKind.PROVIDER_ERROR, message="Failed to process the image with the AI provider")

        outcome = interpret_response(response)
        logger.info({
            "event": "generate:done",
            "provider": provider.name,
            "category": request.category.value,
            "outcome": type(outcome).__name__,
            "upstream_status": response.status_code,
        })
        return outcome


def interpret_response(response: ProviderResponse) -> GenerationOutcome:
    if response.status_code == 429:
        return FailureOutcome(kind=FailureKind.RATE_LIMITED, message=RATE_LIMIT_MESSAGE, upstream_status=429)
    if response.status_code == 402:
        return FailureOutcome(kind=FailureKind.QUOTA_EXCEEDED, message=QUOTA_MESSAGE, upstream_status=402)
    if not response.ok:
        logger.error(f"AI provider error: {response.status_code} {response.raw_body}")
        return FailureOutcome(
            kind=FailureKind.PROVIDER_ERROR,
            message=f"AI provider error: {response.status_code}",
            upstream_status=response.status_code,
            detail=response.raw_body,
        )

    image_part = next((p for p in response.parts if p.is_image), None)
    if image_part is not None:
        return ImageOutcome(image_url=image_part.as_image_url(), mime_type=image_part.mime_type)

    text_part = next((p for p in response.parts if p.is_text), None)
    if text_part is not None:
        logger.warning(f"Model returned text instead of image: {text_part.text}")
        return TextOnlyOutcome(message=text_part.text)

    message = NO_CONTENT_MESSAGE
    if response.block_reason:
        message = f"{NO_CONTENT_MESSAGE} (reason: {response.block_reason})"
    logger.error(f"No image in provider response: {response.raw_body}")
    return FailureOutcome(
        kind=FailureKind.NO_CONTENT,
        message=message,
        upstream_status=response.status_code,
        detail=response.raw_body,
    )
