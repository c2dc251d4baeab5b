"""Webinar announcements, links and materials for registered attendees."""

import logging
from typing import List, Optional

from resumeboost.db.base import to_naive_utc
from resumeboost.records import WebinarUpdate
from resumeboost.schemas import WebinarUpdateChange, WebinarUpdateCreate
from resumeboost.services.errors import NotFound
from resumeboost.services.webinar_repository import WebinarUpdateRepository

logger = logging.getLogger(__name__)


class WebinarService:
    def __init__(self, repository: Optional[WebinarUpdateRepository] = None) -> None:
        self._repository = repository or WebinarUpdateRepository()

    def get_webinar_updates(self, webinar_id: str, user_id: Optional[str] = None) -> List[WebinarUpdate]:
        """Published updates, newest first, flagged with ``is_viewed`` when a user is given."""
        updates = self._repository.list_for_webinar(webinar_id, published_only=True)
        if not user_id or not updates:
            return updates

        viewed = self._repository.viewed_update_ids(user_id, [update.id for update in updates])
        for update in updates:
            update.is_viewed = update.id in viewed
        return updates

    def get_unread_updates_count(self, user_id: str, webinar_id: str) -> int:
        return self._repository.count_unread(user_id, webinar_id)

    def mark_update_as_viewed(self, update_id: str, user_id: str) -> None:
        if self._repository.get_by_id(update_id) is None:
            raise NotFound("Webinar update not found")
        self._repository.record_views([update_id], user_id)

    def mark_all_updates_as_viewed(self, webinar_id: str, user_id: str) -> int:
        updates = self._repository.list_for_webinar(webinar_id, published_only=True)
        created = self._repository.record_views([update.id for update in updates], user_id)
        logger.info("Marked %d updates of webinar %s as viewed for %s", created, webinar_id, user_id)
        return created

    def get_all_webinar_updates(self, webinar_id: str) -> List[WebinarUpdate]:
        return self._repository.list_for_webinar(webinar_id, published_only=False)

    def create_webinar_update(self, data: WebinarUpdateCreate, created_by: Optional[str] = None) -> WebinarUpdate:
        values = data.model_dump()
        values["publish_at"] = to_naive_utc(values["publish_at"])
        values["created_by"] = created_by
        update = self._repository.create(values)
        logger.info("Created %s update %s for webinar %s", update.update_type, update.id, update.webinar_id)
        return update

    def update_webinar_update(self, update_id: str, data: WebinarUpdateChange) -> WebinarUpdate:
        values = data.model_dump(exclude_unset=True)
        for key in ("update_type", "title", "is_published"):
            if key in values and values[key] is None:
                values.pop(key)
        if "publish_at" in values:
            values["publish_at"] = to_naive_utc(values["publish_at"])

        update = self._repository.update(update_id, values)
        if update is None:
            raise NotFound("Webinar update not found")
        return update

    def delete_webinar_update(self, update_id: str) -> None:
        if not self._repository.delete(update_id):
            raise NotFound("Webinar update not found")


webinar_service = WebinarService()
