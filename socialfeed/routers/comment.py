import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.db.session import get_db
from socialfeed.db.models.user import User
from socialfeed.schemas.comment import CommentCreate, CommentCreated, CommentOut
from socialfeed.crud import engagement, post as post_crud
from socialfeed.core.errors import InputValidationError, NotFoundError, StoreError
from socialfeed.core.security import get_current_user

router = APIRouter()


@router.get("/{post_id}/comments", response_model=list[CommentOut])
def get_comments(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return engagement.get_comments(db, post_id)


@router.post("/{post_id}/comments", response_model=CommentCreated, status_code=status.HTTP_201_CREATED)
def add_comment(
    post_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not comment_in.content or not comment_in.content.strip():
        raise InputValidationError("Comment content is required")
    if not post_crud.get_post(db, post_id):
        raise NotFoundError("Post not found")

    try:
        comment = engagement.add_comment(db, user_id=current_user.id, post_id=post_id, content=comment_in.content)
    except SQLAlchemyError as e:
        logging.error(f"Database error: {str(e)}")
        raise StoreError("Failed to add comment")

    return {"message": "Comment added successfully", "comment_id": comment.id}
