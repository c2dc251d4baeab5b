"""Database repository for user job preferences."""

from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from sqlalchemy import delete, select

from config.settings import DATABASE_URL
from resumeboost.db.base import SessionRepository, utcnow
from resumeboost.db.models import UserJobPreferencesModel
from resumeboost.records import UserJobPreferences


class PreferencesRepository(SessionRepository):
    """One preferences row per user, keyed on ``user_id``."""

    def __init__(self, database_url: str = DATABASE_URL) -> None:
        super().__init__(database_url)

    def _get_model(self, session, user_id: str) -> Optional[UserJobPreferencesModel]:
        stmt = select(UserJobPreferencesModel).where(UserJobPreferencesModel.user_id == user_id)
        return session.scalars(stmt).first()

    def get_by_user(self, user_id: str) -> Optional[UserJobPreferences]:
        with self.session_scope() as session:
            return self._model_to_preferences(self._get_model(session, user_id))

    def upsert(self, user_id: str, values: Dict[str, Any]) -> UserJobPreferences:
        with self.session_scope() as session:
            model = self._get_model(session, user_id)
            if model is None:
                model = UserJobPreferencesModel(id=uuid.uuid4().hex, user_id=user_id)
            for key, value in values.items():
                setattr(model, key, value)
            model.last_updated = utcnow()
            session.add(model)
            session.flush()
            return self._model_to_preferences(model)

    def update_fields(self, user_id: str, values: Dict[str, Any], touch: bool = True) -> Optional[UserJobPreferences]:
        with self.session_scope() as session:
            model = self._get_model(session, user_id)
            if model is None:
                return None
            for key, value in values.items():
                setattr(model, key, value)
            if touch:
                model.last_updated = utcnow()
            session.add(model)
            session.flush()
            return self._model_to_preferences(model)

    def delete_by_user(self, user_id: str) -> bool:
        stmt = delete(UserJobPreferencesModel).where(UserJobPreferencesModel.user_id == user_id)
        with self.session_scope() as session:
            result = session.execute(stmt)
            return result.rowcount > 0

    @staticmethod
    def _model_to_preferences(model: Optional[UserJobPreferencesModel]) -> Optional[UserJobPreferences]:
        if model is None:
            return None
        return UserJobPreferences(
            id=model.id,
            user_id=model.user_id,
            resume_text=model.resume_text,
            resume_url=model.resume_url,
            passout_year=model.passout_year,
            role_type=model.role_type,
            tech_interests=list(model.tech_interests or []),
            preferred_modes=list(model.preferred_modes or []),
            skills_extracted=model.skills_extracted,
            onboarding_completed=bool(model.onboarding_completed),
            last_updated=model.last_updated,
            created_at=model.created_at,
        )
