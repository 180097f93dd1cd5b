"""Proposal repository - Database operations for proposals"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models_crm import Proposal
from ...shared.pagination import paginate
from ...utils.sanitization import escape_like


class ProposalRepository:
    """Repository for proposal database operations"""

    @staticmethod
    def list_proposals(
        db: Session,
        user_id: str,
        page: int,
        limit: int,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[Proposal], int]:
        query = (
            db.query(Proposal)
            .options(joinedload(Proposal.client), joinedload(Proposal.trip))
            .filter(Proposal.user_id == user_id, Proposal.deleted_at.is_(None))
        )
        if status:
            query = query.filter(Proposal.status == status)
        if client_id:
            query = query.filter(Proposal.client_id == client_id)
        if search:
            pattern = f"%{escape_like(search)}%"
            query = query.filter(
                or_(
                    Proposal.title.ilike(pattern, escape="\\"),
                    Proposal.description.ilike(pattern, escape="\\"),
                )
            )
        return paginate(query.order_by(Proposal.created_at.desc()), page, limit)

    @staticmethod
    def get_proposal(db: Session, proposal_id: str, user_id: str) -> Optional[Proposal]:
        return (
            db.query(Proposal)
            .filter(
                Proposal.id == proposal_id,
                Proposal.user_id == user_id,
                Proposal.deleted_at.is_(None),
            )
            .first()
        )

    @staticmethod
    def create_proposal(db: Session, **fields) -> Proposal:
        proposal = Proposal(**fields)
        db.add(proposal)
        db.commit()
        db.refresh(proposal)
        return proposal

    @staticmethod
    def save(db: Session, proposal: Proposal) -> Proposal:
        db.commit()
        db.refresh(proposal)
        return proposal
