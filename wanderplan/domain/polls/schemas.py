"""Poll domain schemas"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...models import Poll, utcnow
from ...shared.validators import UtcDatetime, require_uuid


class PollCreate(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    options: list[str] = Field(..., min_length=2, max_length=10)
    allowMultipleVotes: bool = False
    expiresAt: Optional[UtcDatetime] = None

    @field_validator("question")
    @classmethod
    def strip_question(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Question is required")
        return v

    @field_validator("options")
    @classmethod
    def clean_options(cls, v):
        cleaned = [o.strip() for o in v]
        if any(not o for o in cleaned):
            raise ValueError("Poll options cannot be empty")
        if any(len(o) > 200 for o in cleaned):
            raise ValueError("Poll options must be 200 characters or less")
        if len({o.lower() for o in cleaned}) != len(cleaned):
            raise ValueError("Poll options must be unique")
        return cleaned

    @field_validator("expiresAt")
    @classmethod
    def future_expiry(cls, v):
        if v is not None and v <= utcnow():
            raise ValueError("Expiration must be in the future")
        return v


class PollUpdate(BaseModel):
    status: Optional[Literal["OPEN", "CLOSED"]] = None
    question: Optional[str] = Field(None, min_length=1, max_length=500)
    description: Optional[str] = Field(None, max_length=2000)
    expiresAt: Optional[UtcDatetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def upper_status(cls, v):
        return v.upper() if isinstance(v, str) else v


class VoteRequest(BaseModel):
    optionIds: list[str] = Field(..., min_length=1, max_length=10)

    @field_validator("optionIds")
    @classmethod
    def check_ids(cls, v):
        ids = [require_uuid(i) for i in v]
        if len(set(ids)) != len(ids):
            raise ValueError("Option IDs must be unique")
        return ids


class PollOptionResponse(BaseModel):
    id: str
    text: str
    order: int
    voteCount: int
    percentage: float
    userVoted: bool


class PollResponse(BaseModel):
    id: str
    tripId: str
    createdBy: str
    question: str
    description: Optional[str] = None
    allowMultipleVotes: bool
    status: str
    isExpired: bool
    expiresAt: Optional[datetime] = None
    options: list[PollOptionResponse]
    totalVotes: int
    userHasVoted: bool
    createdAt: Optional[datetime] = None


def is_expired(poll: Poll) -> bool:
    return poll.expires_at is not None and poll.expires_at <= utcnow()


def poll_response(poll: Poll, user_id: str) -> PollResponse:
    """Poll with per-option results as seen by `user_id`"""
    total_votes = len(poll.votes)
    options = []
    for option in poll.options:
        count = len(option.votes)
        options.append(
            PollOptionResponse(
                id=option.id,
                text=option.text,
                order=option.order,
                voteCount=count,
                percentage=round(count * 100 / total_votes, 1) if total_votes else 0.0,
                userVoted=any(v.user_id == user_id for v in option.votes),
            )
        )
    return PollResponse(
        id=poll.id,
        tripId=poll.trip_id,
        createdBy=poll.created_by,
        question=poll.question,
        description=poll.description,
        allowMultipleVotes=poll.allow_multiple_votes,
        status=poll.status,
        isExpired=is_expired(poll),
        expiresAt=poll.expires_at,
        options=options,
        totalVotes=total_votes,
        userHasVoted=any(v.user_id == user_id for v in poll.votes),
        createdAt=poll.created_at,
    )
