"""ORM models for the backend tables."""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from resumeboost.db.base import Base, utcnow

# Statuses that count as a redemption of a coupon.
ACTIVE_TRANSACTION_STATUSES = ("success", "pending")

_ACTIVE_COUPON_PREDICATE = text(
    "coupon_code IS NOT NULL AND status IN ('success', 'pending')"
)


class ApplicationLogModel(Base):
    """Auto-apply run written by the automation worker."""

    __tablename__ = "auto_apply_logs"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=True, index=True)
    job_listing_id = Column(String(64), nullable=True, index=True)
    application_date = Column(DateTime, nullable=False, default=utcnow)
    status = Column(String(32), nullable=False, default="pending")
    screenshot_url = Column(Text, nullable=True)
    error_message = Column(Text, nullable=True)


class PaymentTransactionModel(Base):
    """A checkout attempt, created pending and resolved by the payment webhook."""

    __tablename__ = "payment_transactions"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    plan_id = Column(String(64), nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    amount = Column(Integer, nullable=False)
    currency = Column(String(8), nullable=False, default="INR")
    coupon_code = Column(String(64), nullable=True, index=True)
    discount_amount = Column(Integer, nullable=False, default=0)
    final_amount = Column(Integer, nullable=False)
    purchase_type = Column(String(32), nullable=False)
    gateway_order_id = Column(String(64), nullable=True)
    metadata_json = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index(
            "uq_payment_transactions_user_active_coupon",
            "user_id",
            "coupon_code",
            unique=True,
            sqlite_where=_ACTIVE_COUPON_PREDICATE,
            postgresql_where=_ACTIVE_COUPON_PREDICATE,
        ),
    )


blog_post_categories = Table(
    "blog_post_categories",
    Base.metadata,
    Column("blog_post_id", String(64), ForeignKey("blog_posts.id", ondelete="CASCADE"), primary_key=True),
    Column("blog_category_id", String(64), ForeignKey("blog_categories.id", ondelete="CASCADE"), primary_key=True),
)

blog_post_tags = Table(
    "blog_post_tags",
    Base.metadata,
    Column("blog_post_id", String(64), ForeignKey("blog_posts.id", ondelete="CASCADE"), primary_key=True),
    Column("blog_tag_id", String(64), ForeignKey("blog_tags.id", ondelete="CASCADE"), primary_key=True),
)


class BlogCategoryModel(Base):
    __tablename__ = "blog_categories"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class BlogTagModel(Base):
    __tablename__ = "blog_tags"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class BlogPostModel(Base):
    __tablename__ = "blog_posts"

    id = Column(String(64), primary_key=True)
    title = Column(String(512), nullable=False)
    slug = Column(String(512), nullable=False, unique=True)
    excerpt = Column(Text, nullable=True)
    body_content = Column(Text, nullable=False, default="")
    featured_image_url = Column(Text, nullable=True)
    author_id = Column(String(64), nullable=True)
    author_name = Column(String(255), nullable=True)
    status = Column(String(32), nullable=False, default="draft")
    published_at = Column(DateTime, nullable=True, index=True)
    meta_title = Column(String(512), nullable=True)
    meta_description = Column(Text, nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    categories = relationship(
        BlogCategoryModel, secondary=blog_post_categories, order_by=BlogCategoryModel.name, lazy="selectin"
    )
    tags = relationship(BlogTagModel, secondary=blog_post_tags, order_by=BlogTagModel.name, lazy="selectin")

    __table_args__ = (
        Index("idx_blog_posts_status_published_at", "status", "published_at"),
    )


class UserJobPreferencesModel(Base):
    __tablename__ = "user_job_preferences"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(64), nullable=False, unique=True)
    resume_text = Column(Text, nullable=True)
    resume_url = Column(Text, nullable=True)
    passout_year = Column(Integer, nullable=True)
    role_type = Column(String(32), nullable=True)
    tech_interests = Column(JSON, nullable=False, default=list)
    preferred_modes = Column(JSON, nullable=False, default=list)
    skills_extracted = Column(JSON, nullable=True)
    onboarding_completed = Column(Boolean, nullable=False, default=False)
    last_updated = Column(DateTime, nullable=False, default=utcnow)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class WebinarUpdateModel(Base):
    __tablename__ = "webinar_updates"

    id = Column(String(64), primary_key=True)
    webinar_id = Column(String(64), nullable=False, index=True)
    update_type = Column(String(32), nullable=False)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    link_url = Column(Text, nullable=True)
    attachment_url = Column(Text, nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)
    publish_at = Column(DateTime, nullable=True)
    created_by = Column(String(64), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class WebinarUpdateViewModel(Base):
    __tablename__ = "webinar_update_views"

    id = Column(String(64), primary_key=True)
    update_id = Column(String(64), ForeignKey("webinar_updates.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(64), nullable=False, index=True)
    viewed_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("update_id", "user_id", name="uq_webinar_update_views_update_user"),
    )
