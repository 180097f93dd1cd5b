"""Poll router - trip polls and voting"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import PollCreate, PollUpdate, VoteRequest, poll_response
from .service import PollService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trips/{trip_id}/polls", tags=["Polls"])


def get_poll_service(db: Session = Depends(get_db)) -> PollService:
    """Dependency injection for PollService"""
    return PollService(db)


@router.get("")
async def list_polls(
    trip_id: str,
    status: Optional[Literal["OPEN", "CLOSED"]] = Query(None),
    current_user: User = Depends(get_current_user),
    service: PollService = Depends(get_poll_service),
):
    polls = service.list_polls(trip_id, current_user, status)
    return {"polls": [poll_response(p, current_user.id) for p in polls], "count": len(polls)}


@router.post("", status_code=201)
async def create_poll(
    trip_id: str,
    data: PollCreate,
    current_user: User = Depends(get_current_user),
    service: PollService = Depends(get_poll_service),
):
    poll = service.create_poll(trip_id, data, current_user)
    return {"poll": poll_response(poll, current_user.id)}


@router.get("/{poll_id}")
async def get_poll(
    trip_id: str,
    poll_id: str,
    current_user: User = Depends(get_current_user),
    service: PollService = Depends(get_poll_service),
):
    poll = service.get_poll(trip_id, poll_id, current_user)
    return {"poll": poll_response(poll, current_user.id)}


@router.post("/{poll_id}/vote")
async def vote(
    trip_id: str,
    poll_id: str,
    data: VoteRequest,
    current_user: User = Depends(get_current_user),
    service: PollService = Depends(get_poll_service),
):
    poll = service.vote(trip_id, poll_id, data, current_user)
    return {"message": "Vote recorded", "poll": poll_response(poll, current_user.id)}


@router.patch("/{poll_id}")
async def update_poll(
    trip_id: str,
    poll_id: str,
    data: PollUpdate,
    current_user: User = Depends(get_current_user),
    service: PollService = Depends(get_poll_service),
):
    poll = service.update_poll(trip_id, poll_id, data, current_user)
    return {"poll": poll_response(poll, current_user.id)}


@router.delete("/{poll_id}")
async def delete_poll(
    trip_id: str,
    poll_id: str,
    current_user: User = Depends(get_current_user),
    service: PollService = Depends(get_poll_service),
):
    service.delete_poll(trip_id, poll_id, current_user)
    return {"message": "Poll deleted successfully", "pollId": poll_id}


__all__ = ["router", "list_polls", "create_poll", "get_poll", "vote", "update_poll", "delete_poll"]
