import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.db.session import get_db
from socialfeed.db.models.user import User
from socialfeed.schemas.post import LikeToggled
from socialfeed.crud import engagement, post as post_crud
from socialfeed.core.errors import NotFoundError, StoreError
from socialfeed.core.security import get_current_user

router = APIRouter()

@router.post("/{post_id}/like", response_model=LikeToggled)
def toggle_like(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not post_crud.get_post(db, post_id):
        raise NotFoundError("Post not found")

    try:
        liked = engagement.toggle_like(db, user_id=current_user.id, post_id=post_id)
    except SQLAlchemyError as e:
        logging.error(f"Database error: {str(e)}")
        raise StoreError("Failed to process like")

    return {
        "message": "Post liked" if liked else "Post unliked",
        "liked": liked,
        "likes_count": engagement.count_likes(db, post_id),
    }
