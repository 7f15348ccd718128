"""
OpenAI-style chat-completions gateway adapter (aiohttp).

Upstream contract: the photo travels as a full data URL inside an ``image_url`` content
part; generated images come back under ``choices[0].message.images[*].image_url.url``.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from tryon.composer import GenerationRequest
from tryon.data_urls import is_data_url, split_data_url
from tryon.exceptions import ProviderConfigurationError, ProviderNetworkError
from tryon.providers.base import ContentPart, ProviderResponse

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash-image-preview"


class GatewayProvider:
    name = "gateway"

    def __init__(self, api_key: Optional[str], url: str = DEFAULT_URL, model: str = DEFAULT_MODEL):
        if not api_key:
            raise ProviderConfigurationError("GATEWAY_API_KEY is not configured")
        self.api_key = api_key
        self.url = url
        self.model = model

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": request.instructions},
                        {"type": "image_url", "image_url": {"url": request.image_data}},
                    ],
                }
            ],
            "modalities": ["image", "text"],
        }

    async def submit_generation(self, request: GenerationRequest) -> ProviderResponse:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        logger.debug(f"Posting {request.category.value} request to {self.url} model={self.model}")
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.url, headers=headers, json=self.build_payload(request)) as response:
                    status = response.status
                    body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ProviderNetworkError(f"AI gateway unreachable: {e}") from e

        if not 200 <= status < 300:
            return ProviderResponse(status_code=status, raw_body=body)
        return ProviderResponse(status_code=status, parts=parse_completion(body), raw_body=body)


def parse_completion(body: str) -> List[ContentPart]:
    """Extracts image and text parts from a chat-completion body; unparseable bodies yield none."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        logger.warning("AI gateway returned a non-JSON success body")
        return []

    choices = data.get("choices") if isinstance(data, dict) else None
    if not choices:
        return []
    message = (choices[0] or {}).get("message") or {}

    parts: List[ContentPart] = []
    for image in message.get("images") or []:
        url = ((image or {}).get("image_url") or {}).get("url")
        if not url:
            continue
        if is_data_url(url):
            mime_type, data = split_data_url(url, default_mime="image/png")
            parts.append(ContentPart.image_bytes(mime_type=mime_type, data=data))
        else:
            parts.append(ContentPart.image_url(url))

    content = message.get("content")
    if isinstance(content, str):
        parts.append(ContentPart.text_part(content))
    elif isinstance(content, list):
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text" and item.get("text"):
                parts.append(ContentPart.text_part(item["text"]))
    return parts
