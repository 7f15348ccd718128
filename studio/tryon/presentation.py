import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import requests

from tryon.data_urls import decode_data_url, is_data_url
from tryon.outcome import (
    TEXT_ONLY_PLACEHOLDER_URL,
    FailureOutcome,
    GenerationOutcome,
    ImageOutcome,
    TextOnlyOutcome,
)

logger = logging.getLogger(__name__)

DEFAULT_RESULT_FILENAME = "tryon-result.png"
DOWNLOAD_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class ResultView:
    image_url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @property
    def can_download(self) -> bool:
        return bool(self.image_url) and self.image_url != TEXT_ONLY_PLACEHOLDER_URL


def present(outcome: GenerationOutcome) -> ResultView:
    """What the user sees for an outcome: the image, the model's words, or an error notice."""
    if isinstance(outcome, ImageOutcome):
        return ResultView(image_url=outcome.image_url)
    if isinstance(outcome, TextOnlyOutcome):
        return ResultView(image_url=TEXT_ONLY_PLACEHOLDER_URL, message=outcome.message)
    if isinstance(outcome, FailureOutcome):
        return ResultView(error=outcome.message)
    raise TypeError(f"Unsupported outcome type: {type(outcome).__name__}")


def save_result(image_url: str, destination: Union[str, Path, None] = None) -> Path:
    """
    Writes the result image to disk. Data URLs are decoded in place; remote URLs are fetched.
    The file name defaults to tryon-result.png regardless of the actual image format.
    """
    path = Path(destination) if destination else Path(DEFAULT_RESULT_FILENAME)
    if is_data_url(image_url):
        _, data = decode_data_url(image_url)
    else:
        response = requests.get(image_url, timeout=DOWNLOAD_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.content

    path.write_bytes(data)
    logger.info(f"Saved try-on result to {path} ({len(data)} bytes)")
    return path
