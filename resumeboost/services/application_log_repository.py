"""Read access to auto-apply run logs."""

from __future__ import annotations

from typing import Optional

from config.settings import DATABASE_URL
from resumeboost.db.base import SessionRepository
from resumeboost.db.models import ApplicationLogModel
from resumeboost.records import ApplicationLog


class ApplicationLogRepository(SessionRepository):
    """Looks up the logs the automation worker writes; never modifies them."""

    def __init__(self, database_url: str = DATABASE_URL) -> None:
        super().__init__(database_url)

    def get_by_id(self, application_id: str) -> Optional[ApplicationLog]:
        with self.session_scope() as session:
            model = session.get(ApplicationLogModel, application_id)
            return self._model_to_log(model)

    @staticmethod
    def _model_to_log(model: Optional[ApplicationLogModel]) -> Optional[ApplicationLog]:
        if model is None:
            return None
        return ApplicationLog(
            id=model.id,
            application_date=model.application_date,
            status=model.status,
            job_listing_id=model.job_listing_id,
            screenshot_url=model.screenshot_url,
            error_message=model.error_message,
        )
