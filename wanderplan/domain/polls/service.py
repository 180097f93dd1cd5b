"""Poll service - Business logic for trip polls and voting"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Poll, User, utcnow
from ...permissions import require_trip_permission
from .repository import PollRepository
from .schemas import PollCreate, PollUpdate, VoteRequest, is_expired

logger = logging.getLogger(__name__)


class PollService:
    """Service layer for poll business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PollRepository()

    def _get_poll(self, trip_id: str, poll_id: str) -> Poll:
        poll = self.repo.get_poll(self.db, trip_id, poll_id)
        if not poll:
            raise HTTPException(status_code=404, detail="Poll not found")
        return poll

    def list_polls(self, trip_id: str, user: User, status: Optional[str] = None) -> list[Poll]:
        require_trip_permission(self.db, user, trip_id, "view")
        return self.repo.list_polls(self.db, trip_id, status)

    def get_poll(self, trip_id: str, poll_id: str, user: User) -> Poll:
        require_trip_permission(self.db, user, trip_id, "view")
        return self._get_poll(trip_id, poll_id)

    def create_poll(self, trip_id: str, data: PollCreate, user: User) -> Poll:
        require_trip_permission(self.db, user, trip_id, "edit")
        poll = Poll(
            trip_id=trip_id,
            created_by=user.id,
            question=data.question,
            description=data.description,
            allow_multiple_votes=data.allowMultipleVotes,
            status="OPEN",
            expires_at=data.expiresAt,
        )
        poll = self.repo.create_poll(self.db, poll, data.options)
        logger.info(f"📊 Poll {poll.id} created in trip {trip_id} with {len(data.options)} options")
        return poll

    def vote(self, trip_id: str, poll_id: str, data: VoteRequest, user: User) -> Poll:
        """
        Record the caller's vote, replacing any earlier one.

        Raises:
            HTTPException 400 for closed or expired polls, unknown options, or
            several options on a single-choice poll.
        """
        require_trip_permission(self.db, user, trip_id, "vote")
        poll = self._get_poll(trip_id, poll_id)

        if poll.status == "CLOSED":
            raise HTTPException(status_code=400, detail="This poll is closed")
        if is_expired(poll):
            raise HTTPException(status_code=400, detail="This poll has expired")
        if not poll.allow_multiple_votes and len(data.optionIds) > 1:
            raise HTTPException(status_code=400, detail="This poll only allows a single vote")

        valid_ids = {option.id for option in poll.options}
        unknown = [oid for oid in data.optionIds if oid not in valid_ids]
        if unknown:
            raise HTTPException(status_code=400, detail="Invalid option for this poll")

        self.repo.replace_votes(self.db, poll, user.id, data.optionIds)
        logger.info(f"🗳️ User {user.id} voted on poll {poll_id}")
        return self._get_poll(trip_id, poll_id)

    def update_poll(self, trip_id: str, poll_id: str, data: PollUpdate, user: User) -> Poll:
        """Close, reopen or edit a poll; allowed for its creator and the trip owner or admins"""
        _, context = require_trip_permission(self.db, user, trip_id, "view")
        poll = self._get_poll(trip_id, poll_id)
        if poll.created_by != user.id and not context.can_delete():
            raise HTTPException(
                status_code=403, detail="Only the poll creator or a trip admin can modify this poll"
            )

        updates = data.model_dump(exclude_unset=True)
        if "status" in updates and updates["status"]:
            poll.status = updates["status"]
        if updates.get("question"):
            poll.question = updates["question"].strip()
        if "description" in updates:
            poll.description = updates["description"]
        if "expiresAt" in updates:
            if updates["expiresAt"] is not None and updates["expiresAt"] <= utcnow():
                raise HTTPException(status_code=400, detail="Expiration must be in the future")
            poll.expires_at = updates["expiresAt"]

        poll = self.repo.save(self.db, poll)
        logger.info(f"📊 Poll {poll_id} updated (status={poll.status})")
        return poll

    def delete_poll(self, trip_id: str, poll_id: str, user: User) -> None:
        _, context = require_trip_permission(self.db, user, trip_id, "view")
        poll = self._get_poll(trip_id, poll_id)
        if poll.created_by != user.id and not context.can_delete():
            raise HTTPException(
                status_code=403, detail="Only the poll creator or a trip admin can delete this poll"
            )
        self.repo.delete_poll(self.db, poll)
        logger.info(f"🗑️ Poll {poll_id} deleted by {user.id}")
