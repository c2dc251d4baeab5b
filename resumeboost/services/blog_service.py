"""Blog content service."""

import logging
import math
import re
from datetime import datetime
from typing import List, Optional

from resumeboost.db.base import to_naive_utc, utcnow
from resumeboost.records import BlogCategory, BlogPost, BlogPostsPage, BlogTag
from resumeboost.schemas import BlogPostCreate, BlogPostFilters, BlogPostUpdate
from resumeboost.services.blog_repository import BlogRepository
from resumeboost.services.errors import NotFound, ValidationError

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 100


def generate_slug(title: str) -> str:
    """URL slug for a title: ``"Hello, World!"`` -> ``"hello-world"``."""
    slug = (title or "").lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def calculate_reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words per minute, rounded up."""
    words = (content or "").split()
    return math.ceil(len(words) / WORDS_PER_MINUTE)


class BlogService:
    """Published-post listing for readers plus post management for admins."""

    def __init__(self, repository: Optional[BlogRepository] = None) -> None:
        self._repository = repository or BlogRepository()

    def fetch_published_posts(
        self,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        filters: Optional[BlogPostFilters] = None,
        now: Optional[datetime] = None,
    ) -> BlogPostsPage:
        if page < 1:
            raise ValidationError("page must be 1 or greater")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise ValidationError(f"pageSize must be between 1 and {MAX_PAGE_SIZE}")

        filters = filters or BlogPostFilters()
        posts, total = self._repository.list_published(
            now or utcnow(),
            offset=(page - 1) * page_size,
            limit=page_size,
            search=filters.search,
            category_id=filters.category_id,
            tag_id=filters.tag_id,
        )
        for post in posts:
            post.reading_time = calculate_reading_time(post.body_content)
        return BlogPostsPage(
            posts=posts,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )

    def fetch_post_by_slug(self, slug: str, now: Optional[datetime] = None) -> Optional[BlogPost]:
        post = self._repository.get_published_by_slug(slug, now or utcnow())
        if post is None:
            return None
        self.increment_view_count(post.id)
        post.view_count += 1
        post.reading_time = calculate_reading_time(post.body_content)
        return post

    def fetch_related_posts(self, post_id: str, limit: int = 4, now: Optional[datetime] = None) -> List[BlogPost]:
        return self._repository.list_related(post_id, now or utcnow(), limit)

    def fetch_all_categories(self) -> List[BlogCategory]:
        return self._repository.list_categories()

    def fetch_all_tags(self) -> List[BlogTag]:
        return self._repository.list_tags()

    def fetch_category_by_slug(self, slug: str) -> Optional[BlogCategory]:
        return self._repository.get_category_by_slug(slug)

    def fetch_tag_by_slug(self, slug: str) -> Optional[BlogTag]:
        return self._repository.get_tag_by_slug(slug)

    def increment_view_count(self, post_id: str) -> None:
        self._repository.increment_view_count(post_id)

    def create_post(self, data: BlogPostCreate, author_id: Optional[str] = None) -> BlogPost:
        values = data.model_dump(exclude={"category_ids", "tag_ids"})
        values["published_at"] = to_naive_utc(values["published_at"])
        values["slug"] = generate_slug(data.slug or data.title)
        if not values["slug"]:
            raise ValidationError("Could not derive a slug from the title")
        if self._repository.slug_exists(values["slug"]):
            raise ValidationError(f"Slug already in use: {values['slug']}")
        if values["status"] == "published" and values["published_at"] is None:
            values["published_at"] = utcnow()
        values["author_id"] = data.author_id or author_id

        post = self._repository.create_post(values, data.category_ids, data.tag_ids)
        logger.info("Created blog post %s (%s)", post.id, post.slug)
        return post

    def update_post(self, post_id: str, data: BlogPostUpdate) -> BlogPost:
        values = data.model_dump(exclude_unset=True, exclude={"category_ids", "tag_ids"})
        # Required columns cannot be cleared.
        for key in ("title", "body_content", "status"):
            if key in values and values[key] is None:
                values.pop(key)
        if "published_at" in values:
            values["published_at"] = to_naive_utc(values["published_at"])
        if "slug" in values and values["slug"] is not None:
            values["slug"] = generate_slug(values["slug"])
            if not values["slug"]:
                raise ValidationError("Slug cannot be empty")
            if self._repository.slug_exists(values["slug"], exclude_id=post_id):
                raise ValidationError(f"Slug already in use: {values['slug']}")
        if values.get("status") == "published" and "published_at" not in values:
            existing = self._repository.get_by_id(post_id)
            if existing is not None and existing.published_at is None:
                values["published_at"] = utcnow()

        post = self._repository.update_post(post_id, values, data.category_ids, data.tag_ids)
        if post is None:
            raise NotFound("Blog post not found")
        return post

    def delete_post(self, post_id: str) -> None:
        if not self._repository.delete_post(post_id):
            raise NotFound("Blog post not found")
        logger.info("Deleted blog post %s", post_id)


blog_service = BlogService()
