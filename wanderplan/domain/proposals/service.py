"""Proposal service - Business logic for proposals"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User, utcnow
from ...models_crm import Proposal
from ...rate_limiter import PROPOSAL_CREATE_LIMIT, check_rate_limit, rate_limit_exceeded
from ...shared.financial import calculate_subtotal, calculate_total
from ...shared.pagination import clamp_limit, total_pages
from ..invoices.repository import InvoiceRepository
from .repository import ProposalRepository
from .schemas import ProposalCreate, ProposalUpdate

logger = logging.getLogger(__name__)


class ProposalService:
    """Service layer for proposal business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProposalRepository()

    def _get_proposal(self, proposal_id: str, user: User) -> Proposal:
        proposal = self.repo.get_proposal(self.db, proposal_id, user.id)
        if not proposal:
            raise HTTPException(status_code=404, detail="Proposal not found")
        return proposal

    def list_proposals(
        self,
        user: User,
        page: int,
        limit: int,
        status: Optional[str] = None,
        client_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> dict:
        proposals, total = self.repo.list_proposals(
            self.db, user.id, page, limit, status, client_id, search
        )
        return {
            "proposals": proposals,
            "total": total,
            "page": page,
            "limit": clamp_limit(limit),
            "totalPages": total_pages(total, limit),
        }

    def get_proposal(self, proposal_id: str, user: User) -> Proposal:
        return self._get_proposal(proposal_id, user)

    def create_proposal(self, data: ProposalCreate, user: User) -> Proposal:
        limit, window = PROPOSAL_CREATE_LIMIT
        allowed, _, ttl = check_rate_limit(f"proposals:{user.id}", limit, window)
        if not allowed:
            raise rate_limit_exceeded(
                ttl, "Too many proposal creations. Please try again in {minutes} minutes."
            )

        if not InvoiceRepository.get_owned_client(self.db, data.clientId, user.id):
            raise HTTPException(status_code=404, detail="Client not found or does not belong to you")
        if data.tripId and not InvoiceRepository.get_owned_trip(self.db, data.tripId, user.id):
            raise HTTPException(status_code=404, detail="Trip not found or does not belong to you")
        if data.validUntil and data.validUntil <= utcnow():
            raise HTTPException(status_code=400, detail="Valid until date must be in the future")

        subtotal = calculate_subtotal(data.lineItems)
        tax = data.tax or 0
        discount = data.discount or 0
        total = calculate_total(subtotal, tax, discount)
        if total < 0:
            raise HTTPException(status_code=400, detail="Total cannot be negative")

        proposal = self.repo.create_proposal(
            self.db,
            user_id=user.id,
            client_id=data.clientId,
            trip_id=data.tripId,
            title=data.title,
            description=data.description or None,
            line_items=[item.model_dump() for item in data.lineItems],
            subtotal=subtotal,
            tax=tax,
            discount=discount,
            total=total,
            currency=data.currency or "USD",
            status="DRAFT",
            valid_until=data.validUntil,
            notes=data.notes or None,
            terms=data.terms or None,
        )
        logger.info(f"📄 Proposal {proposal.id} created for client {data.clientId}")
        return proposal

    def update_proposal(self, proposal_id: str, data: ProposalUpdate, user: User) -> Proposal:
        """
        Edit a proposal and move it through DRAFT -> SENT -> ACCEPTED/REJECTED.

        Accepted and rejected proposals are final; a proposal past its
        valid-until date cannot be sent.
        """
        proposal = self._get_proposal(proposal_id, user)
        updates = data.model_dump(exclude_unset=True)

        if data.status:
            if proposal.status == "ACCEPTED":
                raise HTTPException(status_code=400, detail="Cannot modify an accepted proposal")
            if proposal.status == "REJECTED":
                raise HTTPException(status_code=400, detail="Cannot modify a rejected proposal")
            if data.status == "SENT" and proposal.valid_until and proposal.valid_until <= utcnow():
                raise HTTPException(status_code=400, detail="Cannot send a proposal that has expired")

        subtotal = proposal.subtotal
        if data.lineItems is not None:
            subtotal = calculate_subtotal(data.lineItems)
        tax = data.tax if data.tax is not None else proposal.tax
        discount = data.discount if data.discount is not None else proposal.discount
        total = calculate_total(subtotal, tax, discount)
        if total < 0:
            raise HTTPException(status_code=400, detail="Total cannot be negative")

        if data.title:
            proposal.title = data.title
        for key, column in (("description", "description"), ("notes", "notes"), ("terms", "terms")):
            if key in updates:
                setattr(proposal, column, updates[key])
        if "validUntil" in updates:
            proposal.valid_until = updates["validUntil"]

        if data.lineItems is not None:
            proposal.line_items = [item.model_dump() for item in data.lineItems]
            proposal.subtotal = subtotal
        if data.tax is not None:
            proposal.tax = data.tax
        if data.discount is not None:
            proposal.discount = data.discount
        if data.lineItems is not None or data.tax is not None or data.discount is not None:
            proposal.total = total

        if data.status:
            now = utcnow()
            if data.status == "SENT" and proposal.status != "SENT":
                proposal.sent_at = now
            if data.status == "ACCEPTED" and proposal.status != "ACCEPTED":
                proposal.accepted_at = now
            proposal.status = data.status

        proposal = self.repo.save(self.db, proposal)
        logger.info(f"✅ Proposal {proposal_id} updated (status={proposal.status})")
        return proposal

    def delete_proposal(self, proposal_id: str, user: User) -> None:
        proposal = self._get_proposal(proposal_id, user)
        if proposal.status == "ACCEPTED":
            raise HTTPException(status_code=409, detail="Cannot delete an accepted proposal")
        proposal.deleted_at = utcnow()
        self.repo.save(self.db, proposal)
        logger.info(f"🗑️ Proposal {proposal_id} soft deleted")
