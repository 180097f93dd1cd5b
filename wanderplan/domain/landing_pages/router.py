"""Landing page router - page management, public view and lead capture"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ...auth import get_current_user, get_optional_user
from ...database import get_db
from ...errors import api_error
from ...models import User
from ...rate_limiter import LEAD_SUBMISSION_LIMIT, create_rate_limiter
from .schemas import (
    LandingPageCreate,
    LandingPageUpdate,
    landing_page_response,
    lead_response,
    public_page_response,
)
from .service import LandingPageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/landing-pages", tags=["Landing Pages"])

lead_rate_limit = create_rate_limiter(
    limit=LEAD_SUBMISSION_LIMIT[0],
    window_seconds=LEAD_SUBMISSION_LIMIT[1],
    key_prefix="leads",
    message="Too many submissions. Please try again in {minutes} minutes.",
)


def get_landing_page_service(db: Session = Depends(get_db)) -> LandingPageService:
    """Dependency injection for LandingPageService"""
    return LandingPageService(db)


# ============================================================================
# AUTHENTICATED PAGE MANAGEMENT
# ============================================================================


@router.get("")
async def list_landing_pages(
    current_user: User = Depends(get_current_user),
    service: LandingPageService = Depends(get_landing_page_service),
):
    pages, counts = service.list_pages(current_user)
    return {
        "success": True,
        "data": [landing_page_response(p, counts.get(p.id, 0)) for p in pages],
    }


@router.post("", status_code=201)
async def create_landing_page(
    data: LandingPageCreate,
    current_user: User = Depends(get_current_user),
    service: LandingPageService = Depends(get_landing_page_service),
):
    page = service.create_page(data, current_user)
    return {"success": True, "data": landing_page_response(page, 0)}


@router.get("/{slug}")
async def get_landing_page(
    slug: str,
    current_user: Optional[User] = Depends(get_optional_user),
    service: LandingPageService = Depends(get_landing_page_service),
):
    """Owners get the full record; everyone else gets the public view of a published page"""
    page, is_owner = service.get_page(slug, current_user)
    data = landing_page_response(page) if is_owner else public_page_response(page)
    return {"success": True, "data": data}


@router.patch("/{slug}")
async def update_landing_page(
    slug: str,
    data: LandingPageUpdate,
    current_user: User = Depends(get_current_user),
    service: LandingPageService = Depends(get_landing_page_service),
):
    page = service.update_page(slug, data, current_user)
    return {"success": True, "data": landing_page_response(page)}


@router.delete("/{slug}")
async def delete_landing_page(
    slug: str,
    current_user: User = Depends(get_current_user),
    service: LandingPageService = Depends(get_landing_page_service),
):
    service.delete_page(slug, current_user)
    return {"success": True, "message": "Landing page deleted successfully"}


# ============================================================================
# PUBLIC
# ============================================================================


@router.get("/{slug}/public")
async def get_public_landing_page(
    slug: str,
    service: LandingPageService = Depends(get_landing_page_service),
):
    return {"success": True, "data": public_page_response(service.get_public_page(slug))}


@router.post("/{slug}/leads", status_code=201, dependencies=[Depends(lead_rate_limit)])
async def submit_lead(
    slug: str,
    request: Request,
    service: LandingPageService = Depends(get_landing_page_service),
):
    """Public lead form; rate limited per client IP"""
    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise api_error(400, "Invalid lead data", code="VALIDATION_ERROR") from e

    await service.submit_lead(slug, payload)
    return {
        "success": True,
        "message": "Thank you for your interest! We will be in touch soon.",
    }


@router.get("/{slug}/leads")
async def list_leads(
    slug: str,
    current_user: User = Depends(get_current_user),
    service: LandingPageService = Depends(get_landing_page_service),
):
    leads = service.list_leads(slug, current_user)
    return {"success": True, "data": {"leads": [lead_response(lead) for lead in leads], "total": len(leads)}}


__all__ = [
    "router",
    "list_landing_pages",
    "create_landing_page",
    "get_landing_page",
    "update_landing_page",
    "delete_landing_page",
    "get_public_landing_page",
    "submit_lead",
    "list_leads",
]
