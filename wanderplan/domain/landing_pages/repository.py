"""Landing page repository - Database operations for landing pages and leads"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models_crm import LandingPage, Lead


class DuplicateSlugError(Exception):
    """Another landing page already uses this slug"""


class LandingPageRepository:
    """Repository for landing page database operations"""

    @staticmethod
    def list_pages(db: Session, user_id: str) -> list[LandingPage]:
        return (
            db.query(LandingPage)
            .filter(LandingPage.user_id == user_id, LandingPage.deleted_at.is_(None))
            .order_by(LandingPage.created_at.desc())
            .all()
        )

    @staticmethod
    def lead_counts(db: Session, page_ids: list[str]) -> dict[str, int]:
        if not page_ids:
            return {}
        rows = (
            db.query(Lead.landing_page_id, func.count(Lead.id))
            .filter(Lead.landing_page_id.in_(page_ids))
            .group_by(Lead.landing_page_id)
            .all()
        )
        return {page_id: count for page_id, count in rows}

    @staticmethod
    def get_by_slug(db: Session, slug: str) -> Optional[LandingPage]:
        """Any page with this slug, soft-deleted ones included"""
        return db.query(LandingPage).filter(LandingPage.slug == slug).first()

    @staticmethod
    def create_page(db: Session, **fields) -> LandingPage:
        page = LandingPage(**fields)
        db.add(page)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DuplicateSlugError(fields.get("slug")) from e
        db.refresh(page)
        return page

    @staticmethod
    def save(db: Session, page: LandingPage) -> LandingPage:
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise DuplicateSlugError(page.slug) from e
        db.refresh(page)
        return page

    @staticmethod
    def list_leads(db: Session, page_id: str) -> list[Lead]:
        return (
            db.query(Lead)
            .filter(Lead.landing_page_id == page_id)
            .order_by(Lead.created_at.desc())
            .all()
        )

    @staticmethod
    def create_lead(db: Session, **fields) -> Lead:
        lead = Lead(**fields)
        db.add(lead)
        db.commit()
        db.refresh(lead)
        return lead
