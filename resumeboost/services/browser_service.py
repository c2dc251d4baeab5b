"""Client for the external browser-automation service."""

import logging
from typing import Any, Dict, Optional

import requests

from config.settings import (
    EXTERNAL_BROWSER_API_KEY,
    EXTERNAL_BROWSER_SERVICE_URL,
    EXTERNAL_BROWSER_TIMEOUT,
    SELF_BASE_URL,
)
from resumeboost.services.errors import UpstreamError

logger = logging.getLogger(__name__)

ORIGIN_HEADER = "primoboost-ai"
HEALTH_CHECK_TIMEOUT = 10
STATUS_TIMEOUT = 15

DEFAULT_STATUS = {
    "status": "processing",
    "progress": 50,
    "currentStep": "Processing application...",
    "estimatedTimeRemaining": 60,
}


class ExternalBrowserService:
    """Form analysis and auto-apply submission against the automation service.

    Without an external URL the client runs in mock mode: it polls this
    backend's own ``/status/<id>`` endpoint and refuses to analyze, submit
    or cancel.
    """

    def __init__(
        self,
        base_url: Optional[str] = EXTERNAL_BROWSER_SERVICE_URL,
        api_key: Optional[str] = EXTERNAL_BROWSER_API_KEY,
        self_base_url: str = SELF_BASE_URL,
        timeout: float = EXTERNAL_BROWSER_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.use_local_status = not base_url
        self.base_url = (self_base_url if self.use_local_status else base_url).rstrip("/")
        self.api_key = api_key or ""
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "X-Origin": ORIGIN_HEADER,
        }

    def is_using_mock_mode(self) -> bool:
        return self.use_local_status

    def _require_remote(self) -> None:
        if self.use_local_status:
            raise UpstreamError("External browser service is not configured")

    def analyze_application_form(self, application_url: str) -> Dict[str, Any]:
        """Ask the service to describe the structure of an application form."""
        self._require_remote()
        try:
            response = self.session.post(
                f"{self.base_url}/analyze-form",
                headers=self._headers(),
                json={"url": application_url},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as error:
            logger.error(f"Error analyzing application form: {error}")
            raise UpstreamError("Failed to analyze application form structure") from error

    def submit_auto_apply(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._require_remote()
        logger.info("Submitting auto-apply request to %s", self.base_url)
        try:
            response = self.session.post(
                f"{self.base_url}/auto-apply",
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as error:
            logger.error(f"Error in submit_auto_apply: {error}")
            raise UpstreamError(f"Auto-apply request failed: {error}") from error

        if not response.ok:
            raise UpstreamError(f"Auto-apply request failed: {response.status_code} - {response.text}")

        try:
            result = response.json()
        except ValueError as error:
            raise UpstreamError("Auto-apply service returned an invalid response") from error
        logger.info("Auto-apply completed: success=%s", result.get("success"))
        return result

    def get_auto_apply_status(self, application_id: str) -> Dict[str, Any]:
        """Current status of a run; falls back to a generic in-progress status on any failure."""
        if self.use_local_status:
            endpoint = f"{self.base_url}/status/{application_id}"
        else:
            endpoint = f"{self.base_url}/auto-apply/status/{application_id}"

        headers = self._headers()
        headers["apikey"] = self.api_key
        try:
            response = self.session.get(endpoint, headers=headers, timeout=STATUS_TIMEOUT)
            if not response.ok:
                logger.warning(f"Status check returned {response.status_code}, returning default status")
                return dict(DEFAULT_STATUS)
            return response.json()
        except (requests.RequestException, ValueError) as error:
            logger.error(f"Error checking auto-apply status: {error}")
            return dict(DEFAULT_STATUS)

    def cancel_auto_apply(self, application_id: str) -> bool:
        if self.use_local_status:
            return False
        try:
            response = self.session.post(
                f"{self.base_url}/auto-apply/cancel/{application_id}",
                headers=self._headers(),
                timeout=STATUS_TIMEOUT,
            )
            return response.ok
        except requests.RequestException as error:
            logger.error(f"Error canceling auto-apply: {error}")
            return False

    def test_connection(self) -> bool:
        if self.use_local_status:
            return True
        try:
            response = self.session.get(
                f"{self.base_url}/health",
                headers=self._headers(),
                timeout=HEALTH_CHECK_TIMEOUT,
            )
            return response.ok
        except requests.RequestException as error:
            logger.error(f"External browser service connection test failed: {error}")
            return False
