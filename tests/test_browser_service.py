import pytest
import requests

from resumeboost.services.browser_service import DEFAULT_STATUS, ExternalBrowserService
from resumeboost.services.errors import UpstreamError


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def _send(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._send("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._send("POST", url, **kwargs)


def remote(session):
    return ExternalBrowserService(
        base_url="https://browser.example.com/",
        api_key="browser-key",
        self_base_url="http://localhost:8002",
        timeout=30,
        session=session,
    )


def mock_mode(session):
    return ExternalBrowserService(
        base_url="",
        api_key="",
        self_base_url="http://localhost:8002",
        session=session,
    )


def test_submit_auto_apply_posts_payload_with_headers():
    session = FakeSession(FakeResponse(200, {"success": True, "applicationId": "app-1"}))

    result = remote(session).submit_auto_apply({"jobId": "job-1", "userId": "user-1"})

    assert result["applicationId"] == "app-1"
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "https://browser.example.com/auto-apply")
    assert kwargs["headers"]["Authorization"] == "Bearer browser-key"
    assert kwargs["headers"]["X-Origin"] == "primoboost-ai"
    assert kwargs["timeout"] == 30


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(FakeResponse(500, text="boom")),
        FakeSession(error=requests.ConnectionError("refused")),
        FakeSession(FakeResponse(200, None)),
    ],
)
def test_submit_auto_apply_failures(session):
    with pytest.raises(UpstreamError):
        remote(session).submit_auto_apply({"jobId": "job-1"})


def test_analyze_form_failure_is_upstream_error():
    session = FakeSession(FakeResponse(502, text="bad gateway"))
    with pytest.raises(UpstreamError):
        remote(session).analyze_application_form("https://jobs.example.com/apply/1")


def test_status_uses_remote_endpoint_and_falls_back_to_default():
    session = FakeSession(FakeResponse(200, {"status": "completed", "progress": 100}))
    service = remote(session)

    assert service.get_auto_apply_status("app-1")["progress"] == 100
    assert session.calls[0][1] == "https://browser.example.com/auto-apply/status/app-1"

    session.response = FakeResponse(404)
    assert service.get_auto_apply_status("app-1") == DEFAULT_STATUS


def test_mock_mode_polls_local_status_endpoint():
    session = FakeSession(error=requests.ConnectionError("refused"))
    service = mock_mode(session)

    assert service.is_using_mock_mode()
    assert service.get_auto_apply_status("app-9") == DEFAULT_STATUS
    assert session.calls[0][1] == "http://localhost:8002/status/app-9"


def test_mock_mode_refuses_remote_operations():
    session = FakeSession(FakeResponse(200, {}))
    service = mock_mode(session)

    with pytest.raises(UpstreamError):
        service.analyze_application_form("https://jobs.example.com/apply/1")
    with pytest.raises(UpstreamError):
        service.submit_auto_apply({})
    assert service.cancel_auto_apply("app-1") is False
    assert service.test_connection() is True
    assert session.calls == []


def test_cancel_and_health_against_remote():
    session = FakeSession(FakeResponse(200, {}))
    service = remote(session)

    assert service.cancel_auto_apply("app-1") is True
    assert service.test_connection() is True

    session.error = requests.Timeout("slow")
    assert service.cancel_auto_apply("app-1") is False
    assert service.test_connection() is False
