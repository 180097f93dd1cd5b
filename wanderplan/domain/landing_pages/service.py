"""Landing page service - page management and public lead capture"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...errors import api_error, format_validation_errors
from ...models import User, utcnow
from ...models_crm import LandingPage, Lead
from ...permissions import get_active_trip, get_permission_context
from ...shared.validators import SLUG_PATTERN
from .repository import DuplicateSlugError, LandingPageRepository
from .schemas import LandingPageCreate, LandingPageUpdate, LeadCreate

logger = logging.getLogger(__name__)


def _slug_conflict() -> HTTPException:
    return api_error(409, "A landing page with this slug already exists", code="SLUG_ALREADY_EXISTS")


def check_slug_param(slug: str) -> str:
    """Reject malformed slugs in the URL before touching the database"""
    if not (3 <= len(slug) <= 100) or not SLUG_PATTERN.match(slug):
        raise api_error(400, "Invalid slug format", code="VALIDATION_ERROR")
    return slug


class LandingPageService:
    """Service layer for landing pages and leads"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = LandingPageRepository()

    def _get_live_page(self, slug: str) -> LandingPage:
        check_slug_param(slug)
        page = self.repo.get_by_slug(self.db, slug)
        if not page or page.deleted_at is not None:
            raise api_error(404, "Landing page not found", code="NOT_FOUND")
        return page

    def _get_owned_page(self, slug: str, user: User, action: str) -> LandingPage:
        page = self._get_live_page(slug)
        if page.user_id != user.id:
            raise api_error(
                403, f"You do not have permission to {action} this landing page", code="FORBIDDEN"
            )
        return page

    # ------------------------------------------------------------------
    # Authenticated management
    # ------------------------------------------------------------------

    def list_pages(self, user: User) -> tuple[list[LandingPage], dict[str, int]]:
        pages = self.repo.list_pages(self.db, user.id)
        return pages, self.repo.lead_counts(self.db, [p.id for p in pages])

    def create_page(self, data: LandingPageCreate, user: User) -> LandingPage:
        if self.repo.get_by_slug(self.db, data.slug):
            raise _slug_conflict()

        if data.tripId:
            trip = get_active_trip(self.db, data.tripId)
            if not trip or not get_permission_context(self.db, user, trip).can_view():
                raise api_error(404, "Trip not found or access denied", code="TRIP_NOT_FOUND")

        try:
            page = self.repo.create_page(
                self.db,
                user_id=user.id,
                trip_id=data.tripId,
                slug=data.slug,
                title=data.title,
                description=data.description,
                content=data.content.model_dump(),
                is_published=data.isPublished,
                published_at=utcnow() if data.isPublished else None,
            )
        except DuplicateSlugError as e:
            raise _slug_conflict() from e

        logger.info(f"🌐 Landing page '{page.slug}' created by {user.id}")
        return page

    def get_page(self, slug: str, user: Optional[User]) -> tuple[LandingPage, bool]:
        """
        Published pages are visible to anyone; drafts only to their owner.

        Returns:
            (page, is_owner)
        """
        page = self._get_live_page(slug)
        is_owner = user is not None and page.user_id == user.id
        if page.is_published or is_owner:
            return page, is_owner
        if user is None:
            raise api_error(
                401, "Authentication required to view unpublished pages", code="UNAUTHORIZED"
            )
        raise api_error(
            403, "You do not have permission to view this landing page", code="FORBIDDEN"
        )

    def get_public_page(self, slug: str) -> LandingPage:
        page = self._get_live_page(slug)
        if not page.is_published:
            raise api_error(404, "This landing page is not published", code="NOT_PUBLISHED")
        return page

    def update_page(self, slug: str, data: LandingPageUpdate, user: User) -> LandingPage:
        page = self._get_owned_page(slug, user, "update")
        updates = data.model_dump(exclude_unset=True)

        if data.slug and data.slug != page.slug:
            if self.repo.get_by_slug(self.db, data.slug):
                raise _slug_conflict()
            page.slug = data.slug
        if data.title:
            page.title = data.title
        if "description" in updates:
            page.description = updates["description"]
        if data.content is not None:
            page.content = data.content.model_dump()
        if data.isPublished is not None:
            if data.isPublished and not page.is_published:
                page.published_at = utcnow()
            page.is_published = data.isPublished

        try:
            page = self.repo.save(self.db, page)
        except DuplicateSlugError as e:
            raise _slug_conflict() from e
        logger.info(f"🌐 Landing page '{page.slug}' updated")
        return page

    def delete_page(self, slug: str, user: User) -> None:
        page = self._get_owned_page(slug, user, "delete")
        page.deleted_at = utcnow()
        page.is_published = False
        self.repo.save(self.db, page)
        logger.info(f"🗑️ Landing page '{slug}' soft deleted")

    def list_leads(self, slug: str, user: User) -> list[Lead]:
        page = self._get_owned_page(slug, user, "view leads for")
        return self.repo.list_leads(self.db, page.id)

    # ------------------------------------------------------------------
    # Public lead capture
    # ------------------------------------------------------------------

    async def submit_lead(self, slug: str, payload: Any) -> Lead:
        """
        Store a lead from the public form and notify the page owner.

        The page is resolved before the body is validated, so a bad slug or an
        unpublished page is reported even for malformed submissions. Nothing is
        written when validation fails.
        """
        page = self.get_public_page(slug)

        try:
            data = LeadCreate.model_validate(payload)
        except ValidationError as e:
            raise api_error(
                400,
                "Invalid lead data",
                code="VALIDATION_ERROR",
                details=format_validation_errors(e.errors()),
            ) from e

        lead = self.repo.create_lead(
            self.db,
            landing_page_id=page.id,
            first_name=data.firstName,
            last_name=data.lastName,
            email=data.email,
            phone=data.phone or None,
            message=data.message or None,
            source=f"landing-page:{page.slug}",
            status="NEW",
            assigned_to_id=page.user_id,
        )
        logger.info(f"📥 Lead {lead.id} captured on landing page '{page.slug}'")

        try:
            from ...email_service import send_new_lead_notification

            await send_new_lead_notification(
                to=page.owner.email,
                page_title=page.title,
                lead_name=f"{lead.first_name} {lead.last_name}",
                lead_email=lead.email,
                message=lead.message,
            )
        except Exception as e:
            logger.warning(f"⚠️ Failed to send lead notification for page '{page.slug}': {e}")

        return lead
