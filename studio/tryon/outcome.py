from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

# Shown in place of a generated image when the model answered with text only.
TEXT_ONLY_PLACEHOLDER_URL = "https://via.placeholder.com/600x800?text=Model+Returned+Text+Only"


class FailureKind(str, Enum):
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    PROVIDER_ERROR = "provider_error"
    NO_CONTENT = "no_content"
    NETWORK_FAILURE = "network_failure"


FAILURE_STATUS_CODES = {
    FailureKind.VALIDATION: 400,
    FailureKind.QUOTA_EXCEEDED: 402,
    FailureKind.RATE_LIMITED: 429,
    FailureKind.PROVIDER_ERROR: 500,
    FailureKind.NO_CONTENT: 500,
    FailureKind.NETWORK_FAILURE: 500,
}


@dataclass(frozen=True)
class ImageOutcome:
    image_url: str
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class TextOnlyOutcome:
    """The model answered with text only (declined, or described instead of generating)."""
    message: str


@dataclass(frozen=True)
class FailureOutcome:
    kind: FailureKind
    message: str
    upstream_status: Optional[int] = None
    detail: Optional[str] = None

    @property
    def status_code(self) -> int:
        return FAILURE_STATUS_CODES[self.kind]


GenerationOutcome = Union[ImageOutcome, TextOnlyOutcome, FailureOutcome]


def failure_kind_for_status(status_code: int) -> FailureKind:
    """Inverse of FAILURE_STATUS_CODES for HTTP error responses seen by the client."""
    if status_code == 400:
        return FailureKind.VALIDATION
    if status_code == 402:
        return FailureKind.QUOTA_EXCEEDED
    if status_code == 429:
        return FailureKind.RATE_LIMITED
    return FailureKind.PROVIDER_ERROR
