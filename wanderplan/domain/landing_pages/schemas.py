"""Landing page and lead schemas"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...models_crm import LandingPage, Lead
from ...shared.validators import require_uuid, validate_email, validate_slug
from ...utils.sanitization import strip_control_characters

BlockType = Literal["hero", "text", "features", "gallery", "lead-capture", "pricing"]


class ContentBlock(BaseModel):
    id: str
    type: BlockType
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def check_id(cls, v):
        return require_uuid(v)


class PageContent(BaseModel):
    blocks: list[ContentBlock] = Field(..., min_length=1)


class LandingPageCreate(BaseModel):
    slug: str
    tripId: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    content: PageContent
    isPublished: bool = False

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return validate_slug(v)

    @field_validator("tripId")
    @classmethod
    def check_trip_id(cls, v):
        return require_uuid(v) if v else None


class LandingPageUpdate(BaseModel):
    slug: Optional[str] = None
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)
    content: Optional[PageContent] = None
    isPublished: Optional[bool] = None

    @field_validator("slug")
    @classmethod
    def check_slug(cls, v):
        return validate_slug(v) if v is not None else v


class LeadCreate(BaseModel):
    """Public lead capture form"""

    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    message: Optional[str] = Field(None, max_length=1000)

    @field_validator("firstName", "lastName")
    @classmethod
    def check_name(cls, v):
        v = strip_control_characters(v)
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("phone", "message")
    @classmethod
    def strip_controls(cls, v):
        return strip_control_characters(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if not v:
            raise ValueError("Invalid email address")
        return validate_email(v)


class LandingPageResponse(BaseModel):
    id: str
    userId: str
    tripId: Optional[str] = None
    slug: str
    title: str
    description: Optional[str] = None
    content: dict
    isPublished: bool
    publishedAt: Optional[datetime] = None
    leadCount: Optional[int] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class PublicLandingPageResponse(BaseModel):
    slug: str
    title: str
    description: Optional[str] = None
    content: dict
    publishedAt: Optional[datetime] = None


class LeadResponse(BaseModel):
    id: str
    firstName: str
    lastName: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None
    status: str
    createdAt: Optional[datetime] = None


def landing_page_response(page: LandingPage, lead_count: Optional[int] = None) -> LandingPageResponse:
    return LandingPageResponse(
        id=page.id,
        userId=page.user_id,
        tripId=page.trip_id,
        slug=page.slug,
        title=page.title,
        description=page.description,
        content=page.content or {"blocks": []},
        isPublished=page.is_published,
        publishedAt=page.published_at,
        leadCount=lead_count,
        createdAt=page.created_at,
        updatedAt=page.updated_at,
    )


def public_page_response(page: LandingPage) -> PublicLandingPageResponse:
    return PublicLandingPageResponse(
        slug=page.slug,
        title=page.title,
        description=page.description,
        content=page.content or {"blocks": []},
        publishedAt=page.published_at,
    )


def lead_response(lead: Lead) -> LeadResponse:
    return LeadResponse(
        id=lead.id,
        firstName=lead.first_name,
        lastName=lead.last_name,
        email=lead.email,
        phone=lead.phone,
        message=lead.message,
        source=lead.source,
        status=lead.status,
        createdAt=lead.created_at,
    )
