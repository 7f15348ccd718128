from pydantic import BaseModel, Field
from typing import Optional


class GenerateTryOnRequest(BaseModel):
    # Required-ness is checked by the relay so a bad request never reaches the provider
    # and always gets the same {"error": ...} body.
    imageBase64: Optional[str] = Field(None, description="Data URL or bare base64 of the user's photo")
    prompt: Optional[str] = Field(None, description="What to try on or get advice about")
    category: Optional[str] = Field(None, description="makeup, clothes or style-advice; anything else is a generic edit")


class GenerateTryOnResponse(BaseModel):
    generatedImageUrl: str
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
