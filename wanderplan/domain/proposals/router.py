"""Proposal router - proposal endpoints"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from .schemas import ProposalCreate, ProposalStatus, ProposalUpdate, proposal_response
from .service import ProposalService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/proposals", tags=["Proposals"])


def get_proposal_service(db: Session = Depends(get_db)) -> ProposalService:
    """Dependency injection for ProposalService"""
    return ProposalService(db)


@router.get("")
async def list_proposals(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[ProposalStatus] = Query(None),
    clientId: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    result = service.list_proposals(current_user, page, limit, status, clientId, search)
    result["proposals"] = [proposal_response(p) for p in result["proposals"]]
    return result


@router.post("", status_code=201)
async def create_proposal(
    data: ProposalCreate,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    proposal = service.create_proposal(data, current_user)
    return {"proposal": proposal_response(proposal)}


@router.get("/{proposal_id}")
async def get_proposal(
    proposal_id: str,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    return {"proposal": proposal_response(service.get_proposal(proposal_id, current_user))}


@router.patch("/{proposal_id}")
async def update_proposal(
    proposal_id: str,
    data: ProposalUpdate,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    proposal = service.update_proposal(proposal_id, data, current_user)
    return {"proposal": proposal_response(proposal)}


@router.delete("/{proposal_id}")
async def delete_proposal(
    proposal_id: str,
    current_user: User = Depends(get_current_user),
    service: ProposalService = Depends(get_proposal_service),
):
    service.delete_proposal(proposal_id, current_user)
    return {"message": "Proposal deleted successfully"}


__all__ = [
    "router",
    "list_proposals",
    "create_proposal",
    "get_proposal",
    "update_proposal",
    "delete_proposal",
]
