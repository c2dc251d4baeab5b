"""Plain records passed between repositories, services and the API layer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class ApplicationLog:
    """One auto-apply run as recorded by the automation worker."""

    id: str
    application_date: datetime
    status: str
    job_listing_id: Optional[str] = None
    screenshot_url: Optional[str] = None
    error_message: Optional[str] = None


@dataclass(frozen=True)
class StatusProjection:
    """Display status derived from an ApplicationLog at a point in time."""

    status: str
    progress: int
    current_step: str
    estimated_time_remaining: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "progress": self.progress,
            "currentStep": self.current_step,
            "estimatedTimeRemaining": self.estimated_time_remaining,
        }


@dataclass
class PaymentTransaction:
    id: str
    user_id: str
    status: str
    amount: int
    currency: str
    final_amount: int
    purchase_type: str
    plan_id: Optional[str] = None
    coupon_code: Optional[str] = None
    discount_amount: int = 0
    gateway_order_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderHandle:
    order_id: str
    amount: int
    currency: str
    transaction_id: str
    key_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "orderId": self.order_id,
            "amount": self.amount,
            "currency": self.currency,
            "transactionId": self.transaction_id,
            "keyId": self.key_id,
        }


@dataclass
class BlogCategory:
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "created_at": _isoformat(self.created_at),
        }


@dataclass
class BlogTag:
    id: str
    name: str
    slug: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "created_at": _isoformat(self.created_at),
        }


@dataclass
class BlogPost:
    id: str
    title: str
    slug: str
    body_content: str
    status: str
    excerpt: Optional[str] = None
    featured_image_url: Optional[str] = None
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    view_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    categories: List[BlogCategory] = field(default_factory=list)
    tags: List[BlogTag] = field(default_factory=list)
    reading_time: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "excerpt": self.excerpt,
            "body_content": self.body_content,
            "featured_image_url": self.featured_image_url,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "status": self.status,
            "published_at": _isoformat(self.published_at),
            "meta_title": self.meta_title,
            "meta_description": self.meta_description,
            "view_count": self.view_count,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
            "categories": [category.to_dict() for category in self.categories],
            "tags": [tag.to_dict() for tag in self.tags],
            "reading_time": self.reading_time,
        }


@dataclass
class BlogPostsPage:
    posts: List[BlogPost]
    total: int
    page: int
    page_size: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "posts": [post.to_dict() for post in self.posts],
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
        }


@dataclass
class UserJobPreferences:
    id: str
    user_id: str
    resume_text: Optional[str] = None
    resume_url: Optional[str] = None
    passout_year: Optional[int] = None
    role_type: Optional[str] = None
    tech_interests: List[str] = field(default_factory=list)
    preferred_modes: List[str] = field(default_factory=list)
    skills_extracted: Optional[Any] = None
    onboarding_completed: bool = False
    last_updated: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "resume_text": self.resume_text,
            "resume_url": self.resume_url,
            "passout_year": self.passout_year,
            "role_type": self.role_type,
            "tech_interests": list(self.tech_interests),
            "preferred_modes": list(self.preferred_modes),
            "skills_extracted": self.skills_extracted,
            "onboarding_completed": self.onboarding_completed,
            "last_updated": _isoformat(self.last_updated),
            "created_at": _isoformat(self.created_at),
        }


@dataclass
class WebinarUpdate:
    id: str
    webinar_id: str
    update_type: str
    title: str
    is_published: bool
    description: Optional[str] = None
    link_url: Optional[str] = None
    attachment_url: Optional[str] = None
    publish_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_viewed: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "webinar_id": self.webinar_id,
            "update_type": self.update_type,
            "title": self.title,
            "description": self.description,
            "link_url": self.link_url,
            "attachment_url": self.attachment_url,
            "is_published": self.is_published,
            "publish_at": _isoformat(self.publish_at),
            "created_by": self.created_by,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }
        if self.is_viewed is not None:
            data["is_viewed"] = self.is_viewed
        return data
