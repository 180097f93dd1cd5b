import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import User
from ..schemas import UserUpdate, user_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["Users"])

PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "avatarUrl": "avatar_url",
    "timezone": "timezone",
}


@router.get("/profile")
async def get_profile(current_user: User = Depends(get_current_user)):
    return {"user": user_response(current_user)}


@router.patch("/profile")
async def update_profile(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update the caller's own profile; omitted fields are left unchanged"""
    updates = data.model_dump(exclude_unset=True)
    for key, column in PROFILE_FIELDS.items():
        if key not in updates:
            continue
        # timezone is required; an explicit null leaves it alone
        if key == "timezone" and updates[key] is None:
            continue
        setattr(current_user, column, updates[key])

    db.commit()
    db.refresh(current_user)
    logger.info(f"✅ Profile updated for user {current_user.id}")
    return {"user": user_response(current_user)}
