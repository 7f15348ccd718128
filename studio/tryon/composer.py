"""
Builds the outgoing generation request: canonical image payload, category and the
category-specific instruction text handed to the image model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from tryon.data_urls import decode_data_url, normalize_data_url
from tryon.exceptions import RequestValidationError


class Category(str, Enum):
    MAKEUP = "makeup"
    CLOTHES = "clothes"
    STYLE_ADVICE = "style-advice"
    OTHER = "other"

    @classmethod
    def parse(cls, tag: Optional[str]) -> "Category":
        """Maps a client tag to a category; unknown or empty tags become OTHER."""
        normalized = (tag or "").strip().lower()
        return _CATEGORY_ALIASES.get(normalized, cls.OTHER)


_CATEGORY_ALIASES: Dict[str, Category] = {
    "makeup": Category.MAKEUP,
    "clothes": Category.CLOTHES,
    "style-advice": Category.STYLE_ADVICE,
    # Tag sent by the web page
    "style-advise": Category.STYLE_ADVICE,
}


def _makeup_instructions(prompt: str) -> str:
    return (
        f"Apply makeup to the person in this image: {prompt}. "
        "Keep the same pose, gender, clothes, and age. "
        "Do not modify face shape, iris, or make them look older. "
        "Generate the edited image."
    )


def _clothes_instructions(prompt: str) -> str:
    return (
        f"Dress the person in this image with: {prompt}. "
        "Keep the same pose, gender, face, and age. "
        "Generate the edited image."
    )


def _style_advice_instructions(prompt: str) -> str:
    return (
        f"Style the person in this image according to: {prompt}. "
        "Keep the same person and adjust their overall appearance accordingly. "
        "Generate the edited image."
    )


def _generic_edit_instructions(prompt: str) -> str:
    return f"Edit this image: {prompt}. Generate the edited image."


INSTRUCTION_TEMPLATES: Dict[Category, Callable[[str], str]] = {
    Category.MAKEUP: _makeup_instructions,
    Category.CLOTHES: _clothes_instructions,
    Category.STYLE_ADVICE: _style_advice_instructions,
    Category.OTHER: _generic_edit_instructions,
}


def build_instructions(category: Category, prompt: str) -> str:
    template = INSTRUCTION_TEMPLATES.get(category, _generic_edit_instructions)
    return template(prompt)


@dataclass(frozen=True)
class GenerationRequest:
    image_data: str
    prompt: str
    category: Category
    instructions: str

    @property
    def mime_type(self) -> str:
        return decode_data_url(self.image_data)[0]

    def image_bytes(self) -> bytes:
        return decode_data_url(self.image_data)[1]


def compose_request(image: Optional[str], prompt: Optional[str], category: Optional[str]) -> GenerationRequest:
    """
    Validates and assembles a GenerationRequest.

    Raises:
        RequestValidationError: the image or prompt is missing, or the image is not base64.
    """
    prompt = (prompt or "").strip()
    image = (image or "").strip()
    if not image or not prompt:
        raise RequestValidationError("Missing required fields: imageBase64 and prompt are required")

    image_data = normalize_data_url(image)
    # Fails early on payloads the provider would reject anyway.
    decode_data_url(image_data)

    parsed_category = Category.parse(category)
    return GenerationRequest(
        image_data=image_data,
        prompt=prompt,
        category=parsed_category,
        instructions=build_instructions(parsed_category, prompt),
    )
