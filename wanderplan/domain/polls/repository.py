"""Poll repository - Database operations for trip polls"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Poll, PollOption, PollVote


class PollRepository:
    """Repository for poll database operations"""

    @staticmethod
    def list_polls(db: Session, trip_id: str, status: Optional[str] = None) -> list[Poll]:
        query = (
            db.query(Poll)
            .options(selectinload(Poll.options).selectinload(PollOption.votes), selectinload(Poll.votes))
            .filter(Poll.trip_id == trip_id)
        )
        if status:
            query = query.filter(Poll.status == status)
        return query.order_by(Poll.created_at.desc()).all()

    @staticmethod
    def get_poll(db: Session, trip_id: str, poll_id: str) -> Optional[Poll]:
        return db.query(Poll).filter(Poll.id == poll_id, Poll.trip_id == trip_id).first()

    @staticmethod
    def create_poll(db: Session, poll: Poll, option_texts: list[str]) -> Poll:
        try:
            db.add(poll)
            db.flush()
            for index, text in enumerate(option_texts):
                db.add(PollOption(poll_id=poll.id, text=text, order=index))
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.refresh(poll)
        return poll

    @staticmethod
    def replace_votes(db: Session, poll: Poll, user_id: str, option_ids: list[str]) -> None:
        """Drop the user's previous votes on the poll and record the new ones in one commit"""
        try:
            db.query(PollVote).filter(
                PollVote.poll_id == poll.id, PollVote.user_id == user_id
            ).delete(synchronize_session=False)
            for option_id in option_ids:
                db.add(PollVote(poll_id=poll.id, option_id=option_id, user_id=user_id))
            db.commit()
        except Exception:
            db.rollback()
            raise
        db.expire_all()

    @staticmethod
    def save(db: Session, poll: Poll) -> Poll:
        db.commit()
        db.refresh(poll)
        return poll

    @staticmethod
    def delete_poll(db: Session, poll: Poll) -> None:
        db.delete(poll)
        db.commit()
