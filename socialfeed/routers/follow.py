import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.db.session import get_db
from socialfeed.db.models.user import User
from socialfeed.schemas.user import FollowToggled, UserSummary
from socialfeed.crud import social
from socialfeed.core.errors import InputValidationError, NotFoundError, StoreError
from socialfeed.core.security import get_current_user

router = APIRouter()

# Follow or unfollow
@router.post("/{user_id}/follow", response_model=FollowToggled)
def toggle_follow(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if user_id == current_user.id:
        raise InputValidationError("Cannot follow yourself")

    target = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise NotFoundError("User not found")

    try:
        following = social.toggle_follow(db, follower_id=current_user.id, following_id=user_id)
    except SQLAlchemyError as e:
        logging.error(f"Database error: {str(e)}")
        raise StoreError("Failed to process follow")

    return {
        "message": "User followed" if following else "User unfollowed",
        "following": following,
    }


@router.get("/{user_id}/followers", response_model=List[UserSummary])
def get_followers(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return social.get_followers(db, viewer_id=current_user.id, user_id=user_id)


@router.get("/{user_id}/following", response_model=List[UserSummary])
def get_following(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return social.get_following(db, viewer_id=current_user.id, user_id=user_id)
