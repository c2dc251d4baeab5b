"""Database repository for webinar updates and per-user views."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from config.settings import DATABASE_URL
from resumeboost.db.base import SessionRepository
from resumeboost.db.models import WebinarUpdateModel, WebinarUpdateViewModel
from resumeboost.records import WebinarUpdate


class WebinarUpdateRepository(SessionRepository):
    def __init__(self, database_url: str = DATABASE_URL) -> None:
        super().__init__(database_url)

    def list_for_webinar(self, webinar_id: str, published_only: bool = True) -> List[WebinarUpdate]:
        stmt = (
            select(WebinarUpdateModel)
            .where(WebinarUpdateModel.webinar_id == webinar_id)
            .order_by(WebinarUpdateModel.created_at.desc())
        )
        if published_only:
            stmt = stmt.where(WebinarUpdateModel.is_published.is_(True))
        with self.session_scope() as session:
            return [self._model_to_update(model) for model in session.scalars(stmt).all()]

    def viewed_update_ids(self, user_id: str, update_ids: List[str]) -> Set[str]:
        if not update_ids:
            return set()
        stmt = (
            select(WebinarUpdateViewModel.update_id)
            .where(WebinarUpdateViewModel.user_id == user_id)
            .where(WebinarUpdateViewModel.update_id.in_(update_ids))
        )
        with self.session_scope() as session:
            return set(session.scalars(stmt).all())

    def count_unread(self, user_id: str, webinar_id: str) -> int:
        viewed = select(WebinarUpdateViewModel.update_id).where(WebinarUpdateViewModel.user_id == user_id)
        stmt = (
            select(func.count(WebinarUpdateModel.id))
            .where(WebinarUpdateModel.webinar_id == webinar_id)
            .where(WebinarUpdateModel.is_published.is_(True))
            .where(WebinarUpdateModel.id.not_in(viewed))
        )
        with self.session_scope() as session:
            return session.scalar(stmt) or 0

    def record_views(self, update_ids: List[str], user_id: str) -> int:
        """Insert missing view rows; existing ``(update_id, user_id)`` pairs are kept."""
        if not update_ids:
            return 0
        already = self.viewed_update_ids(user_id, update_ids)
        created = 0
        for update_id in update_ids:
            if update_id in already:
                continue
            try:
                with self.session_scope() as session:
                    session.add(
                        WebinarUpdateViewModel(id=uuid.uuid4().hex, update_id=update_id, user_id=user_id)
                    )
                created += 1
            except IntegrityError:
                # A concurrent request recorded the same view first.
                continue
        return created

    def get_by_id(self, update_id: str) -> Optional[WebinarUpdate]:
        with self.session_scope() as session:
            model = session.get(WebinarUpdateModel, update_id)
            return self._model_to_update(model) if model else None

    def create(self, values: Dict[str, Any]) -> WebinarUpdate:
        model = WebinarUpdateModel(id=uuid.uuid4().hex, **values)
        with self.session_scope() as session:
            session.add(model)
            session.flush()
            return self._model_to_update(model)

    def update(self, update_id: str, values: Dict[str, Any]) -> Optional[WebinarUpdate]:
        with self.session_scope() as session:
            model = session.get(WebinarUpdateModel, update_id)
            if model is None:
                return None
            for key, value in values.items():
                setattr(model, key, value)
            session.add(model)
            session.flush()
            return self._model_to_update(model)

    def delete(self, update_id: str) -> bool:
        with self.session_scope() as session:
            model = session.get(WebinarUpdateModel, update_id)
            if model is None:
                return False
            session.execute(delete(WebinarUpdateViewModel).where(WebinarUpdateViewModel.update_id == update_id))
            session.delete(model)
            return True

    @staticmethod
    def _model_to_update(model: WebinarUpdateModel) -> WebinarUpdate:
        return WebinarUpdate(
            id=model.id,
            webinar_id=model.webinar_id,
            update_type=model.update_type,
            title=model.title,
            is_published=bool(model.is_published),
            description=model.description,
            link_url=model.link_url,
            attachment_url=model.attachment_url,
            publish_at=model.publish_at,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
