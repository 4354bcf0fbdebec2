from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from app.database import get_db
from app.core.deps import get_current_user
from app.models.user import User
from app.schemas.user import UserProfileResponse, UserProfileUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{user_id}", response_model=UserProfileResponse)
def get_user_profile(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Profile of any user, for signed-in callers"""
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.put("/{user_id}", response_model=UserProfileResponse)
def update_user_profile(
    user_id: UUID,
    profile_update: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Edit your own name and compatibility attributes"""
    if user_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only edit your own profile")

    changes = profile_update.model_dump(exclude_unset=True)
    if "gender" in changes:
        changes["gender"] = changes["gender"].value if changes["gender"] else None
    if "religion" in changes:
        changes["religion"] = changes["religion"].upper() if changes["religion"] else None
    if "name" in changes and not changes["name"]:
        changes.pop("name")

    for key, value in changes.items():
        setattr(current_user, key, value)
    db.commit()
    db.refresh(current_user)
    logger.info(f"[USER] Profile updated for {current_user.id}")
    return current_user
