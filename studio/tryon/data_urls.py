import base64
import binascii
import re
from typing import Tuple

from tryon.exceptions import RequestValidationError

DEFAULT_IMAGE_MIME = "image/jpeg"

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w-]+=[^;,]*)*;base64,", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


def is_data_url(payload: str) -> bool:
    return bool(payload) and payload.startswith("data:")


def split_data_url(payload: str, default_mime: str = DEFAULT_IMAGE_MIME) -> Tuple[str, str]:
    """Returns ``(mime_type, base64_body)`` for a data URL or a bare base64 string."""
    match = _DATA_URL_RE.match(payload)
    if match:
        mime_type = (match.group("mime") or default_mime).lower()
        body = payload[match.end():]
    elif is_data_url(payload):
        raise RequestValidationError("Image data URL must be base64 encoded")
    else:
        mime_type = default_mime
        body = payload
    return mime_type, _WHITESPACE_RE.sub("", body)


def strip_data_url_prefix(payload: str) -> str:
    return split_data_url(payload)[1]


def build_data_url(mime_type: str, base64_body: str) -> str:
    return f"data:{mime_type};base64,{base64_body}"


def normalize_data_url(payload: str, default_mime: str = DEFAULT_IMAGE_MIME) -> str:
    """Canonical ``data:<mime>;base64,<data>`` form of a prefixed or bare base64 image."""
    mime_type, body = split_data_url(payload, default_mime)
    return build_data_url(mime_type, body)


def decode_data_url(payload: str) -> Tuple[str, bytes]:
    """Returns ``(mime_type, raw_bytes)``; raises RequestValidationError on bad base64."""
    mime_type, body = split_data_url(payload)
    try:
        return mime_type, base64.b64decode(body, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RequestValidationError("Image payload is not valid base64") from e


def encode_bytes_as_data_url(data: bytes, mime_type: str) -> str:
    return build_data_url(mime_type, base64.b64encode(data).decode("ascii"))
