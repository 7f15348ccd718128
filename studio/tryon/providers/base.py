from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from tryon.composer import GenerationRequest
from tryon.data_urls import build_data_url


@dataclass(frozen=True)
class ContentPart:
    kind: str  # "image" or "text"
    text: Optional[str] = None
    mime_type: Optional[str] = None
    data: Optional[str] = None  # base64 body
    url: Optional[str] = None  # set when the provider hands back a URL instead of bytes

    @classmethod
    def image_bytes(cls, mime_type: str, data: str) -> "ContentPart":
        return cls(kind="image", mime_type=mime_type, data=data)

    @classmethod
    def image_url(cls, url: str, mime_type: Optional[str] = None) -> "ContentPart":
        return cls(kind="image", url=url, mime_type=mime_type)

    @classmethod
    def text_part(cls, text: str) -> "ContentPart":
        return cls(kind="text", text=text)

    @property
    def is_image(self) -> bool:
        return self.kind == "image" and bool(self.url or self.data)

    @property
    def is_text(self) -> bool:
        return self.kind == "text" and bool(self.text)

    def as_image_url(self, default_mime: str = "image/png") -> str:
        if self.url:
            return self.url
        return build_data_url(self.mime_type or default_mime, self.data or "")


@dataclass(frozen=True)
class ProviderResponse:
    status_code: int
    parts: list[ContentPart] = field(default_factory=list)
    raw_body: Optional[str] = None
    block_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class GenerationProvider(Protocol):
    name: str

    async def submit_generation(self, request: GenerationRequest) -> ProviderResponse:
        """
        Sends one request upstream. Non-2xx answers are returned, not raised;
        transport failures raise ProviderNetworkError.
        """
        ...
