"""Database repository for blog posts, categories and tags."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, or_, select, update

from config.settings import DATABASE_URL
from resumeboost.db.base import SessionRepository
from resumeboost.db.models import (
    BlogCategoryModel,
    BlogPostModel,
    BlogTagModel,
    blog_post_categories,
    blog_post_tags,
)
from resumeboost.records import BlogCategory, BlogPost, BlogTag
from resumeboost.services.errors import ValidationError


class BlogRepository(SessionRepository):
    """Queries over the blog tables; callers decide what "now" means."""

    def __init__(self, database_url: str = DATABASE_URL) -> None:
        super().__init__(database_url)

    @staticmethod
    def _published(stmt, now: datetime):
        return stmt.where(BlogPostModel.status == "published").where(BlogPostModel.published_at <= now)

    def list_published(
        self,
        now: datetime,
        *,
        offset: int,
        limit: int,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        tag_id: Optional[str] = None,
    ) -> Tuple[List[BlogPost], int]:
        stmt = self._published(select(BlogPostModel), now)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(or_(BlogPostModel.title.ilike(pattern), BlogPostModel.body_content.ilike(pattern)))
        if category_id:
            linked = select(blog_post_categories.c.blog_post_id).where(
                blog_post_categories.c.blog_category_id == category_id
            )
            stmt = stmt.where(BlogPostModel.id.in_(linked))
        if tag_id:
            linked = select(blog_post_tags.c.blog_post_id).where(blog_post_tags.c.blog_tag_id == tag_id)
            stmt = stmt.where(BlogPostModel.id.in_(linked))

        count_stmt = select(func.count()).select_from(stmt.subquery())
        page_stmt = stmt.order_by(BlogPostModel.published_at.desc()).offset(offset).limit(limit)

        with self.session_scope() as session:
            total = session.scalar(count_stmt) or 0
            models = session.scalars(page_stmt).all()
            return [self._model_to_post(model) for model in models], total

    def get_published_by_slug(self, slug: str, now: datetime) -> Optional[BlogPost]:
        stmt = self._published(select(BlogPostModel).where(BlogPostModel.slug == slug), now)
        with self.session_scope() as session:
            model = session.scalars(stmt).first()
            return self._model_to_post(model) if model else None

    def get_by_id(self, post_id: str) -> Optional[BlogPost]:
        with self.session_scope() as session:
            model = session.get(BlogPostModel, post_id)
            return self._model_to_post(model) if model else None

    def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(BlogPostModel.id).where(BlogPostModel.slug == slug)
        if exclude_id:
            stmt = stmt.where(BlogPostModel.id != exclude_id)
        with self.session_scope() as session:
            return session.scalars(stmt).first() is not None

    def increment_view_count(self, post_id: str) -> None:
        stmt = (
            update(BlogPostModel)
            .where(BlogPostModel.id == post_id)
            .values(view_count=BlogPostModel.view_count + 1)
        )
        with self.session_scope() as session:
            session.execute(stmt)

    def list_related(self, post_id: str, now: datetime, limit: int) -> List[BlogPost]:
        with self.session_scope() as session:
            post = session.get(BlogPostModel, post_id)
            if post is None:
                return []
            category_ids = [category.id for category in post.categories]
            tag_ids = [tag.id for tag in post.tags]
            if not category_ids and not tag_ids:
                return []

            related = []
            if category_ids:
                related.append(
                    select(blog_post_categories.c.blog_post_id).where(
                        blog_post_categories.c.blog_category_id.in_(category_ids)
                    )
                )
            if tag_ids:
                related.append(
                    select(blog_post_tags.c.blog_post_id).where(blog_post_tags.c.blog_tag_id.in_(tag_ids))
                )

            stmt = (
                self._published(select(BlogPostModel), now)
                .where(or_(*[BlogPostModel.id.in_(ids) for ids in related]))
                .where(BlogPostModel.id != post_id)
                .order_by(BlogPostModel.published_at.desc())
                .limit(limit)
            )
            return [self._model_to_post(model) for model in session.scalars(stmt).all()]

    def list_categories(self) -> List[BlogCategory]:
        stmt = select(BlogCategoryModel).order_by(BlogCategoryModel.name)
        with self.session_scope() as session:
            return [self._model_to_category(model) for model in session.scalars(stmt).all()]

    def list_tags(self) -> List[BlogTag]:
        stmt = select(BlogTagModel).order_by(BlogTagModel.name)
        with self.session_scope() as session:
            return [self._model_to_tag(model) for model in session.scalars(stmt).all()]

    def get_category_by_slug(self, slug: str) -> Optional[BlogCategory]:
        stmt = select(BlogCategoryModel).where(BlogCategoryModel.slug == slug)
        with self.session_scope() as session:
            model = session.scalars(stmt).first()
            return self._model_to_category(model) if model else None

    def get_tag_by_slug(self, slug: str) -> Optional[BlogTag]:
        stmt = select(BlogTagModel).where(BlogTagModel.slug == slug)
        with self.session_scope() as session:
            model = session.scalars(stmt).first()
            return self._model_to_tag(model) if model else None

    def create_category(self, name: str, slug: str, description: Optional[str] = None) -> BlogCategory:
        model = BlogCategoryModel(id=uuid.uuid4().hex, name=name, slug=slug, description=description)
        with self.session_scope() as session:
            session.add(model)
            session.flush()
            return self._model_to_category(model)

    def create_tag(self, name: str, slug: str) -> BlogTag:
        model = BlogTagModel(id=uuid.uuid4().hex, name=name, slug=slug)
        with self.session_scope() as session:
            session.add(model)
            session.flush()
            return self._model_to_tag(model)

    def create_post(
        self,
        values: Dict[str, Any],
        category_ids: Sequence[str] = (),
        tag_ids: Sequence[str] = (),
    ) -> BlogPost:
        with self.session_scope() as session:
            model = BlogPostModel(id=uuid.uuid4().hex, **values)
            model.categories = self._load(session, BlogCategoryModel, category_ids)
            model.tags = self._load(session, BlogTagModel, tag_ids)
            session.add(model)
            session.flush()
            return self._model_to_post(model)

    def update_post(
        self,
        post_id: str,
        values: Dict[str, Any],
        category_ids: Optional[Sequence[str]] = None,
        tag_ids: Optional[Sequence[str]] = None,
    ) -> Optional[BlogPost]:
        with self.session_scope() as session:
            model = session.get(BlogPostModel, post_id)
            if model is None:
                return None
            for key, value in values.items():
                setattr(model, key, value)
            if category_ids is not None:
                model.categories = self._load(session, BlogCategoryModel, category_ids)
            if tag_ids is not None:
                model.tags = self._load(session, BlogTagModel, tag_ids)
            session.add(model)
            session.flush()
            return self._model_to_post(model)

    def delete_post(self, post_id: str) -> bool:
        with self.session_scope() as session:
            model = session.get(BlogPostModel, post_id)
            if model is None:
                return False
            session.delete(model)
            return True

    @staticmethod
    def _load(session, model_cls, ids: Sequence[str]) -> list:
        if not ids:
            return []
        models = session.scalars(select(model_cls).where(model_cls.id.in_(list(ids)))).all()
        if len(models) != len(set(ids)):
            missing = sorted(set(ids) - {model.id for model in models})
            raise ValidationError(f"Unknown {model_cls.__tablename__} ids", details={"ids": missing})
        return list(models)

    @staticmethod
    def _model_to_category(model: BlogCategoryModel) -> BlogCategory:
        return BlogCategory(
            id=model.id,
            name=model.name,
            slug=model.slug,
            description=model.description,
            created_at=model.created_at,
        )

    @staticmethod
    def _model_to_tag(model: BlogTagModel) -> BlogTag:
        return BlogTag(id=model.id, name=model.name, slug=model.slug, created_at=model.created_at)

    def _model_to_post(self, model: BlogPostModel) -> BlogPost:
        return BlogPost(
            id=model.id,
            title=model.title,
            slug=model.slug,
            body_content=model.body_content,
            status=model.status,
            excerpt=model.excerpt,
            featured_image_url=model.featured_image_url,
            author_id=model.author_id,
            author_name=model.author_name,
            published_at=model.published_at,
            meta_title=model.meta_title,
            meta_description=model.meta_description,
            view_count=model.view_count or 0,
            created_at=model.created_at,
            updated_at=model.updated_at,
            categories=[self._model_to_category(category) for category in model.categories],
            tags=[self._model_to_tag(tag) for tag in model.tags],
        )
