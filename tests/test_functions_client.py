"""
Tests for the remote function client.
"""

import pytest
import requests

from src import config
from src.functions_client import RemoteCallError, invoke


class FakeResponse:
    def __init__(self, status_code=200, body=None, raises=False):
        self.status_code = status_code
        self._body = body
        self._raises = raises

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._raises:
            raise ValueError("not json")
        return self._body


@pytest.fixture
def post(monkeypatch):
    calls = []
    responses = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr("src.functions_client.requests.post", fake_post)
    return calls, responses


class TestInvoke:

    def test_success(self, post):
        calls, responses = post
        responses.append(FakeResponse(body={"success": True}))

        assert invoke("enrich-contact", {"candidate_id": "c1"}) == {"success": True}
        assert calls[0]["url"] == "https://functions.test/enrich-contact"
        assert calls[0]["json"] == {"candidate_id": "c1"}
        assert calls[0]["headers"]["Authorization"] == "Bearer test_key"
        assert calls[0]["timeout"] == config.REQUEST_TIMEOUT

    def test_http_error(self, post):
        _, responses = post
        responses.append(FakeResponse(status_code=500, body={}))
        with pytest.raises(RemoteCallError) as exc:
            invoke("launch-campaign", {})
        assert exc.value.status_code == 500
        assert exc.value.function == "launch-campaign"

    def test_transport_error(self, post):
        _, responses = post
        responses.append(requests.Timeout("timed out"))
        with pytest.raises(RemoteCallError):
            invoke("check-integrations", {})

    def test_non_json_body(self, post):
        _, responses = post
        responses.append(FakeResponse(raises=True))
        with pytest.raises(RemoteCallError):
            invoke("campaign-quality-check", {})

    def test_non_object_body(self, post):
        _, responses = post
        responses.append(FakeResponse(body=["a"]))
        with pytest.raises(RemoteCallError):
            invoke("campaign-quality-check", {})

    def test_error_key_in_body(self, post):
        _, responses = post
        responses.append(FakeResponse(body={"error": "quota exceeded"}))
        with pytest.raises(RemoteCallError, match="quota exceeded"):
            invoke("enrich-contact", {})

    def test_not_configured(self, post, monkeypatch):
        calls, _ = post
        monkeypatch.setattr(config, "FUNCTIONS_BASE_URL", "")
        with pytest.raises(RemoteCallError):
            invoke("enrich-contact", {})
        assert calls == []
