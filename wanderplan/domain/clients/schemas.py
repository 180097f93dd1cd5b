"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...models_crm import CrmClient
from ...shared.validators import validate_email, validate_phone

ClientStatus = Literal["LEAD", "ACTIVE", "INACTIVE"]


def _clean_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if not tag:
            continue
        if len(tag) > 50:
            raise ValueError("Tags must be 50 characters or less")
        if tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class ClientCreate(BaseModel):
    """Schema for creating a new CRM client"""

    firstName: str = Field(..., min_length=1, max_length=50)
    lastName: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=255)
    phone: Optional[str] = None
    status: ClientStatus = "LEAD"
    source: Optional[str] = Field(None, max_length=100)
    tags: list[str] = Field(default_factory=list, max_length=20)
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("firstName", "lastName")
    @classmethod
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return _clean_tags(v)


class ClientUpdate(BaseModel):
    """Schema for updating an existing client"""

    firstName: Optional[str] = Field(None, min_length=1, max_length=50)
    lastName: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = None
    status: Optional[ClientStatus] = None
    source: Optional[str] = Field(None, max_length=100)
    tags: Optional[list[str]] = Field(None, max_length=20)
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return validate_phone(v)

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return _clean_tags(v)


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: str
    userId: str
    firstName: str
    lastName: str
    email: str
    phone: Optional[str] = None
    status: str
    source: Optional[str] = None
    tags: list[str]
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


def client_response(client: CrmClient) -> ClientResponse:
    return ClientResponse(
        id=client.id,
        userId=client.user_id,
        firstName=client.first_name,
        lastName=client.last_name,
        email=client.email,
        phone=client.phone,
        status=client.status,
        source=client.source,
        tags=client.tags or [],
        notes=client.notes,
        createdAt=client.created_at,
        updatedAt=client.updated_at,
    )
