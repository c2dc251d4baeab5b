"""User job preferences and resume uploads."""

import logging
import time
from pathlib import PurePosixPath
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from resumeboost.records import UserJobPreferences
from resumeboost.schemas import PreferencesPayload, error_details
from resumeboost.services.errors import NotFound, ValidationError
from resumeboost.services.preferences_repository import PreferencesRepository
from resumeboost.services.resume_storage import BucketStorage, LocalBucketStorage

logger = logging.getLogger(__name__)

ALLOWED_RESUME_EXTENSIONS = {"pdf", "doc", "docx", "txt"}


class PreferencesService:
    """Store onboarding answers and resume files per user."""

    def __init__(
        self,
        repository: Optional[PreferencesRepository] = None,
        storage: Optional[BucketStorage] = None,
    ) -> None:
        self._repository = repository or PreferencesRepository()
        self._storage = storage or LocalBucketStorage()

    def get_preferences(self, user_id: str) -> Optional[UserJobPreferences]:
        return self._repository.get_by_user(user_id)

    def save_preferences(self, user_id: str, payload: PreferencesPayload) -> UserJobPreferences:
        values = payload.model_dump(exclude_unset=True)
        preferences = self._repository.upsert(user_id, values)
        logger.info("Saved preferences for user %s (%d fields)", user_id, len(values))
        return preferences

    def update_preference_field(self, user_id: str, field: str, value: Any) -> UserJobPreferences:
        if field not in PreferencesPayload.model_fields:
            raise ValidationError(f"Unknown preference field: {field}")
        try:
            validated = PreferencesPayload.model_validate({field: value})
        except PydanticValidationError as error:
            raise ValidationError(
                f"Invalid value for {field}", details={"errors": error_details(error)}
            ) from error

        preferences = self._repository.update_fields(user_id, {field: getattr(validated, field)})
        if preferences is None:
            raise NotFound("Preferences not found")
        return preferences

    def has_completed_onboarding(self, user_id: str) -> bool:
        preferences = self._repository.get_by_user(user_id)
        return bool(preferences and preferences.onboarding_completed)

    def complete_onboarding(self, user_id: str) -> UserJobPreferences:
        preferences = self._repository.update_fields(user_id, {"onboarding_completed": True}, touch=False)
        if preferences is None:
            raise NotFound("Preferences not found")
        return preferences

    def delete_preferences(self, user_id: str) -> bool:
        return self._repository.delete_by_user(user_id)

    def upload_resume(self, user_id: str, filename: str, content: bytes) -> str:
        """Store a resume under ``<user_id>/<millis>.<ext>`` and return its public URL."""
        extension = PurePosixPath(filename or "").suffix.lstrip(".").lower()
        if extension not in ALLOWED_RESUME_EXTENSIONS:
            raise ValidationError(
                "Unsupported resume file type",
                details={"allowed": sorted(ALLOWED_RESUME_EXTENSIONS)},
            )
        if not content:
            raise ValidationError("Resume file is empty")

        path = f"{user_id}/{int(time.time() * 1000)}.{extension}"
        try:
            return self._storage.upload(path, content)
        except ValueError as error:
            raise ValidationError("Invalid resume path") from error

    def delete_resume(self, user_id: str, resume_url: str) -> bool:
        path = self._storage.path_from_url(resume_url)
        if not path or not path.startswith(f"{user_id}/"):
            return False
        try:
            return self._storage.remove(path)
        except ValueError as error:
            raise ValidationError("Invalid resume URL") from error


preferences_service = PreferencesService()
