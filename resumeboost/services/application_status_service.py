"""Auto-apply status lookups for the status endpoint."""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from resumeboost.services.application_log_repository import ApplicationLogRepository
from resumeboost.services.errors import NotFound, UpstreamError
from resumeboost.services.status_projector import project

logger = logging.getLogger(__name__)


class ApplicationStatusService:
    """Resolve an application id to its current display status."""

    def __init__(self, repository: Optional[ApplicationLogRepository] = None) -> None:
        self._repository = repository or ApplicationLogRepository()

    def get_status(self, application_id: str, now: Optional[datetime] = None) -> Dict[str, Any]:
        try:
            log = self._repository.get_by_id(application_id)
        except SQLAlchemyError as error:
            logger.error(f"Error loading auto-apply log {application_id}: {error}")
            raise UpstreamError("Failed to load application status") from error
        if log is None:
            logger.info("Auto-apply status requested for unknown application %s", application_id)
            raise NotFound("Application not found")

        projection = project(log, now)
        payload = projection.to_dict()
        payload.update(
            {
                "applicationId": log.id,
                "jobId": log.job_listing_id,
                "screenshotUrl": log.screenshot_url,
                "errorMessage": log.error_message,
            }
        )
        return payload


application_status_service = ApplicationStatusService()
