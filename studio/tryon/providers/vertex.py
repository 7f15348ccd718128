"""
Gemini image model adapter built on the google-genai SDK.

Upstream contract: the photo is sent as raw bytes (data URL prefix stripped) with its mime
type in an inline part; generated images come back as inline bytes on the first candidate.
"""

import base64
import logging
from typing import Optional

from google import genai
from google.genai import errors, types

from tryon.composer import GenerationRequest
from tryon.data_urls import decode_data_url
from tryon.exceptions import ProviderConfigurationError, ProviderNetworkError
from tryon.providers.base import ContentPart, ProviderResponse

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash-image"


class VertexProvider:
    name = "vertex"

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        project: Optional[str] = None,
        location: str = "us-central1",
        api_key: Optional[str] = None,
        client: Optional[genai.Client] = None,
    ):
        self.model = model
        self._client = client or self._build_client(project, location, api_key)

    @staticmethod
    def _build_client(project: Optional[str], location: str, api_key: Optional[str]) -> genai.Client:
        if project:
            logger.info(f"Using Vertex AI project={project} location={location}")
            return genai.Client(vertexai=True, project=project, location=location)
        if api_key:
            logger.info("Using Gemini Developer API (API key mode)")
            return genai.Client(api_key=api_key)
        raise ProviderConfigurationError(
            "Vertex provider needs GOOGLE_PROJECT_ID (Vertex AI) or GEMINI_API_KEY (Gemini API)"
        )

    def _build_contents(self, request: GenerationRequest) -> list[types.Content]:
        mime_type, image_bytes = decode_data_url(request.image_data)
        return [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=request.instructions),
                    types.Part.from_bytes(data=image_bytes, mime_type=mime_type),
                ],
            )
        ]

    def _build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            safety_settings=[
                types.SafetySetting(
                    category=types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
                    threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH,
                )
            ],
        )

    async def submit_generation(self, request: GenerationRequest) -> ProviderResponse:
        logger.debug(f"Sending {request.category.value} request to {self.model}")
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=self._build_contents(request),
                config=self._build_config(),
            )
        except errors.APIError as e:
            logger.warning(f"Gemini API error {e.code} {e.status}: {e.message}")
            return ProviderResponse(status_code=e.code or 500, raw_body=str(e))
        except Exception as e:
            raise ProviderNetworkError(f"Could not reach {self.model}: {e}") from e

        return self._to_provider_response(response)

    @staticmethod
    def _to_provider_response(response: types.GenerateContentResponse) -> ProviderResponse:
        parts: list[ContentPart] = []
        candidates = response.candidates or []
        if candidates and candidates[0].content and candidates[0].content.parts:
            for part in candidates[0].content.parts:
                if part.inline_data and part.inline_data.data:
                    parts.append(ContentPart.image_bytes(
                        mime_type=part.inline_data.mime_type or "image/png",
                        data=base64.b64encode(part.inline_data.data).decode("ascii"),
                    ))
                elif part.text and not getattr(part, "thought", False):
                    parts.append(ContentPart.text_part(part.text))

        block_reason = None
        if response.prompt_feedback and response.prompt_feedback.block_reason:
            block_reason = _enum_text(response.prompt_feedback.block_reason)
        elif candidates and candidates[0].finish_reason and not parts:
            reason = _enum_text(candidates[0].finish_reason)
            block_reason = None if reason == "STOP" else reason

        return ProviderResponse(status_code=200, parts=parts, block_reason=block_reason)


def _enum_text(value) -> str:
    return str(getattr(value, "value", value))
