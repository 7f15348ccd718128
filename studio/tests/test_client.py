"""
Tests for the requests-based API client, with the HTTP session mocked out.
"""

import pytest
import requests
from unittest.mock import MagicMock

from tryon.client import GENERIC_FAILURE_MESSAGE, TryOnApiClient
from tryon.exceptions import AuthenticationError
from tryon.outcome import FailureKind, FailureOutcome, ImageOutcome, TextOnlyOutcome


def _response(status_code, body=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if body is None:
        response.json.side_effect = ValueError("no json")
        response.text = "<html>oops</html>"
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def api(session):
    return TryOnApiClient("http://localhost:5000/", session=session)


class TestGenerate:

    def test_posts_payload_to_generate_endpoint(self, api, session):
        session.post.return_value = _response(200, {"generatedImageUrl": "data:image/png;base64,QUJD"})

        outcome = api.generate("data:image/jpeg;base64,AAAA", "red lipstick", "makeup")

        assert outcome == ImageOutcome(image_url="data:image/png;base64,QUJD")
        args, kwargs = session.post.call_args
        assert args[0] == "http://localhost:5000/api/generate-tryon"
        assert kwargs["json"] == {"imageBase64": "data:image/jpeg;base64,AAAA", "prompt": "red lipstick", "category": "makeup"}
        assert kwargs["headers"] == {}

    def test_explicit_token_is_sent(self, api, session):
        session.post.return_value = _response(200, {"generatedImageUrl": "https://cdn.test/a.png"})

        api.generate("AAAA", "red lipstick", "makeup", token="tok-1")

        assert session.post.call_args.kwargs["headers"] == {"Authorization": "Bearer tok-1"}

    def test_text_only(self, api, session):
        session.post.return_value = _response(200, {"generatedImageUrl": "placeholder", "message": "Sorry"})

        assert api.generate("AAAA", "x", "makeup") == TextOnlyOutcome(message="Sorry")

    @pytest.mark.parametrize("status_code, kind", [
        (400, FailureKind.VALIDATION),
        (402, FailureKind.QUOTA_EXCEEDED),
        (429, FailureKind.RATE_LIMITED),
        (500, FailureKind.PROVIDER_ERROR),
    ])
    def test_http_errors_map_to_failures(self, api, session, status_code, kind):
        session.post.return_value = _response(status_code, {"error": "server said no"})

        outcome = api.generate("AAAA", "x", "makeup")

        assert outcome == FailureOutcome(kind=kind, message="server said no", upstream_status=status_code)

    def test_error_without_json_body(self, api, session):
        session.post.return_value = _response(502)

        outcome = api.generate("AAAA", "x", "makeup")

        assert outcome.kind is FailureKind.PROVIDER_ERROR
        assert outcome.message == GENERIC_FAILURE_MESSAGE

    @pytest.mark.parametrize("body", [["not", "an", "object"], "ok", 42])
    def test_non_object_success_body(self, api, session, body):
        session.post.return_value = _response(200, body)

        outcome = api.generate("AAAA", "x", "makeup")

        assert outcome.kind is FailureKind.PROVIDER_ERROR
        assert outcome.message == GENERIC_FAILURE_MESSAGE

    def test_transport_error_is_network_failure(self, api, session):
        session.post.side_effect = requests.ConnectionError("refused")

        outcome = api.generate("AAAA", "x", "makeup")

        assert outcome.kind is FailureKind.NETWORK_FAILURE


class TestAccountCalls:

    def test_login_returns_token_without_storing_it(self, api, session):
        session.post.return_value = _response(200, {"token": "jwt-token", "user": {"id": 1}})

        assert api.login("ada@example.com", "pw") == "jwt-token"
        assert api.token is None

    def test_login_failure(self, api, session):
        session.post.return_value = _response(401, {"error": "Invalid Credential"})

        with pytest.raises(AuthenticationError, match="Invalid Credential"):
            api.login("ada@example.com", "wrong")

    def test_todos_use_constructor_token(self, session):
        api = TryOnApiClient("http://localhost:5000", token="tok-2", session=session)
        session.get.return_value = _response(200, [{"id": 1, "title": "Buy a blazer"}])

        assert api.list_todos() == [{"id": 1, "title": "Buy a blazer"}]
        args, kwargs = session.get.call_args
        assert args[0] == "http://localhost:5000/api/todos"
        assert kwargs["headers"] == {"Authorization": "Bearer tok-2"}

    def test_upload_sends_multipart_file(self, api, session, tmp_path):
        path = tmp_path / "look.png"
        path.write_bytes(b"png")
        session.post.return_value = _response(200, {"url": "http://localhost:5000/uploads/1-look.png", "filename": "1-look.png"})

        result = api.upload(path)

        assert result["filename"] == "1-look.png"
        assert session.post.call_args.kwargs["files"] == {"file": ("look.png", b"png", "image/png")}
