"""Request bodies accepted by the API."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

BlogStatus = Literal["draft", "published", "scheduled"]
RoleType = Literal["internship", "fulltime", "both"]
WebinarUpdateType = Literal["meet_link", "announcement", "material", "schedule_change", "reminder"]


class OrderMetadata(BaseModel):
    """Purchase context sent alongside an order."""

    type: Optional[Literal["webinar", "subscription"]] = Field(default=None, description="Purchase type")
    webinarId: Optional[str] = Field(default=None, description="Webinar being purchased")
    registrationId: Optional[str] = Field(default=None, description="Pending webinar registration")
    webinarTitle: Optional[str] = Field(default=None, description="Display title for the receipt")


class OrderRequest(BaseModel):
    """Checkout request; ``amount`` is the client's own total in minor units."""

    planId: Optional[str] = Field(default=None, description="Catalog plan id")
    couponCode: Optional[str] = Field(default=None, description="Coupon code as typed")
    walletDeduction: Optional[int] = Field(default=None, ge=0, description="Wallet credit in minor units")
    addOnsTotal: Optional[int] = Field(default=None, ge=0, description="Add-on total in minor units")
    amount: int = Field(description="Client-computed amount in minor units")
    selectedAddOns: Dict[str, int] = Field(default_factory=dict, description="Add-on id to quantity")
    metadata: Optional[OrderMetadata] = Field(default=None)

    @property
    def is_webinar(self) -> bool:
        return self.metadata is not None and self.metadata.type == "webinar"


class BlogPostFilters(BaseModel):
    search: Optional[str] = None
    category_id: Optional[str] = None
    tag_id: Optional[str] = None


class BlogPostCreate(BaseModel):
    title: str = Field(min_length=1)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    body_content: str = ""
    featured_image_url: Optional[str] = None
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    status: BlogStatus = "draft"
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    category_ids: List[str] = Field(default_factory=list)
    tag_ids: List[str] = Field(default_factory=list)


class BlogPostUpdate(BaseModel):
    """Partial update; only fields present in the request are applied."""

    title: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    body_content: Optional[str] = None
    featured_image_url: Optional[str] = None
    author_name: Optional[str] = None
    status: Optional[BlogStatus] = None
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    category_ids: Optional[List[str]] = None
    tag_ids: Optional[List[str]] = None


class PreferencesPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resume_text: Optional[str] = None
    resume_url: Optional[str] = None
    passout_year: Optional[int] = Field(default=None, ge=1950, le=2100)
    role_type: Optional[RoleType] = None
    tech_interests: List[str] = Field(default_factory=list)
    preferred_modes: List[str] = Field(default_factory=list)
    skills_extracted: Optional[Any] = None
    onboarding_completed: bool = False


class WebinarUpdateCreate(BaseModel):
    webinar_id: str = Field(min_length=1)
    update_type: WebinarUpdateType
    title: str = Field(min_length=1)
    description: Optional[str] = None
    link_url: Optional[str] = None
    attachment_url: Optional[str] = None
    is_published: bool = False
    publish_at: Optional[datetime] = None


class WebinarUpdateChange(BaseModel):
    update_type: Optional[WebinarUpdateType] = None
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    link_url: Optional[str] = None
    attachment_url: Optional[str] = None
    is_published: Optional[bool] = None
    publish_at: Optional[datetime] = None


class TextGenerationRequest(BaseModel):
    prompt: str = Field(min_length=1, description="Prompt sent to the model as a single user message")


def error_details(error) -> List[Dict[str, Any]]:
    """JSON-safe summary of a pydantic ValidationError."""
    return error.errors(include_url=False, include_context=False, include_input=False)
