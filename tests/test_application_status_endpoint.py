from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from resumeboost.db.base import utcnow
from resumeboost.db.models import ApplicationLogModel
from resumeboost.services.application_log_repository import ApplicationLogRepository
from resumeboost.services.application_status_service import ApplicationStatusService
from resumeboost.services.errors import UpstreamError


def add_log(repo, log_id, status, seconds_ago=0, **extra):
    with repo.session_scope() as session:
        session.add(
            ApplicationLogModel(
                id=log_id,
                user_id="user-1",
                job_listing_id="job-42",
                application_date=utcnow() - timedelta(seconds=seconds_ago),
                status=status,
                **extra,
            )
        )


@pytest.fixture
def status_client(database_url):
    from resumeboost.api import server

    repo = ApplicationLogRepository(database_url=database_url)
    original_service = server.application_status_service
    server.application_status_service = ApplicationStatusService(repository=repo)

    try:
        yield server.app.test_client(), repo
    finally:
        server.application_status_service = original_service


def test_status_endpoint_projects_pending_run(status_client):
    client, repo = status_client
    add_log(repo, "app-1", "pending", seconds_ago=15)

    response = client.get("/status/app-1")

    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "processing"
    assert data["progress"] == 30
    assert data["currentStep"] == "Filling personal details..."
    assert data["estimatedTimeRemaining"] == 90
    assert data["applicationId"] == "app-1"
    assert data["jobId"] == "job-42"


def test_status_endpoint_reports_submitted_run(status_client):
    client, repo = status_client
    add_log(repo, "app-2", "submitted", seconds_ago=5, screenshot_url="https://cdn.example.com/shot.png")

    response = client.get("/auto-apply-status/app-2")

    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "completed"
    assert data["progress"] == 100
    assert data["screenshotUrl"] == "https://cdn.example.com/shot.png"


def test_status_endpoint_reports_failure_message(status_client):
    client, repo = status_client
    add_log(repo, "app-3", "failed", error_message="Captcha detected")

    data = client.get("/status/app-3").get_json()

    assert data["status"] == "failed"
    assert data["progress"] == 0
    assert data["errorMessage"] == "Captcha detected"


def test_status_endpoint_unknown_id_is_not_found(status_client):
    client, _ = status_client

    response = client.get("/status/missing")

    assert response.status_code == 404
    data = response.get_json()
    assert data["kind"] == "NotFound"
    assert data["status"] == "failed"


class UnavailableLogRepository(ApplicationLogRepository):
    def get_by_id(self, application_id):
        raise OperationalError("SELECT", {}, Exception("database is locked"))


def test_status_lookup_database_error_is_upstream_error(database_url):
    service = ApplicationStatusService(repository=UnavailableLogRepository(database_url=database_url))

    with pytest.raises(UpstreamError):
        service.get_status("app-1")


def test_status_endpoint_database_error_returns_bad_gateway(status_client, database_url, monkeypatch):
    from resumeboost.api import server

    client, _ = status_client
    monkeypatch.setattr(
        server,
        "application_status_service",
        ApplicationStatusService(repository=UnavailableLogRepository(database_url=database_url)),
    )

    response = client.get("/status/app-1")

    assert response.status_code == 502
    assert response.get_json()["kind"] == "UpstreamError"


def test_health_endpoint():
    from resumeboost.api import server

    response = server.app.test_client().get("/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"


def test_auto_apply_routes_in_mock_mode(server, auth_header, monkeypatch):
    from resumeboost.services.browser_service import ExternalBrowserService

    monkeypatch.setattr(
        server, "browser_service", ExternalBrowserService(base_url="", self_base_url="http://localhost:8002")
    )
    client = server.app.test_client()

    health = client.get("/auto-apply/health").get_json()
    assert health == {"connected": True, "mockMode": True}

    response = client.post(
        "/auto-apply/analyze-form", json={"url": "https://jobs.example.com/apply/1"}, headers=auth_header()
    )
    assert response.status_code == 502
    assert response.get_json()["kind"] == "UpstreamError"

    cancelled = client.post("/auto-apply/app-1/cancel", headers=auth_header())
    assert cancelled.get_json() == {"success": False}
