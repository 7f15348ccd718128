import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests

from tryon.exceptions import AuthenticationError
from tryon.outcome import (
    FailureKind,
    FailureOutcome,
    GenerationOutcome,
    ImageOutcome,
    TextOnlyOutcome,
    failure_kind_for_status,
)

logger = logging.getLogger(__name__)

GENERATE_PATH = "/api/generate-tryon"
DEFAULT_TIMEOUT = 120
GENERIC_FAILURE_MESSAGE = "Failed to generate image. Please try again."


class TryOnApiClient:
    """
    Thin ``requests`` wrapper around the try-on HTTP API.

    The bearer token is only ever what the caller passed in (constructor or ``token=``
    argument); ``login`` returns a token but does not keep it.
    """

    def __init__(self, base_url: str, token: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        token = token or self.token
        return {"Authorization": f"Bearer {token}"} if token else {}

    # ---------------- Auth -----------------
    def signup(self, email: str, password: str) -> Dict[str, Any]:
        resp = self.session.post(self._url("/auth/signup"), json={"email": email, "password": password}, timeout=30)
        resp.raise_for_status()
        return resp.json()

    def login(self, email: str, password: str) -> str:
        resp = self.session.post(self._url("/auth/login"), json={"email": email, "password": password}, timeout=30)
        if resp.status_code == 401:
            raise AuthenticationError(_error_message(resp, "Invalid Credential"))
        resp.raise_for_status()
        return resp.json()["token"]

    # ---------------- Todos / uploads -----------------
    def list_todos(self) -> List[Dict[str, Any]]:
        resp = self.session.get(self._url("/api/todos"), headers=self._headers(), timeout=30)
        resp.raise_for_status()
        return resp.json()

    def create_todo(self, title: str) -> Dict[str, Any]:
        resp = self.session.post(self._url("/api/todos"), json={"title": title}, headers=self._headers(), timeout=30)
        resp.raise_for_status()
        return resp.json()

    def upload(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        path = Path(file_path)
        mime, _ = mimetypes.guess_type(str(path))
        files = {"file": (path.name, path.read_bytes(), mime or "application/octet-stream")}
        resp = self.session.post(self._url("/api/upload"), files=files, headers=self._headers(), timeout=60)
        resp.raise_for_status()
        return resp.json()

    # ---------------- Generation -----------------
    def generate(
        self,
        image: str,
        prompt: str,
        category: Optional[str] = None,
        token: Optional[str] = None,
    ) -> GenerationOutcome:
        """Posts one try-on request. Never raises; HTTP and transport errors become FailureOutcomes."""
        payload = {"imageBase64": image, "prompt": prompt, "category": category}
        try:
            resp = self.session.post(
                self._url(GENERATE_PATH),
                json=payload,
                headers=self._headers(token),
                timeout=DEFAULT_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(f"Try-on request failed to reach the server: {e}")
            return FailureOutcome(kind=FailureKind.NETWORK_FAILURE, message=GENERIC_FAILURE_MESSAGE, detail=str(e))

        if not resp.ok:
            kind = failure_kind_for_status(resp.status_code)
            message = _error_message(resp, GENERIC_FAILURE_MESSAGE)
            logger.warning(f"Try-on request failed {resp.status_code}: {message}")
            return FailureOutcome(kind=kind, message=message, upstream_status=resp.status_code)

        try:
            body = resp.json()
        except ValueError:
            return FailureOutcome(kind=FailureKind.PROVIDER_ERROR, message=GENERIC_FAILURE_MESSAGE, detail=resp.text)
        if not isinstance(body, dict):
            return FailureOutcome(kind=FailureKind.PROVIDER_ERROR, message=GENERIC_FAILURE_MESSAGE, detail=str(body))

        if body.get("message"):
            return TextOnlyOutcome(message=body["message"])
        image_url = body.get("generatedImageUrl")
        if not image_url:
            return FailureOutcome(kind=FailureKind.NO_CONTENT, message="No content generated")
        return ImageOutcome(image_url=image_url)


def _error_message(resp: requests.Response, default: str) -> str:
    try:
        body = resp.json()
    except ValueError:
        return default
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return default
