"""Guest router - import guest-mode trips into the signed-in account"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import MigrateRequest, MigrationResult
from .service import GuestMigrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/guest", tags=["Guest"])


def get_guest_migration_service(db: Session = Depends(get_db)) -> GuestMigrationService:
    """Dependency injection for GuestMigrationService"""
    return GuestMigrationService(db)


@router.post("/migrate", response_model=MigrationResult)
async def migrate_guest_trips(
    data: MigrateRequest,
    current_user: User = Depends(get_current_user),
    service: GuestMigrationService = Depends(get_guest_migration_service),
):
    return service.migrate(data.trips, current_user)


__all__ = ["router", "migrate_guest_trips"]
