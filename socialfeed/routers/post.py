from fastapi import APIRouter, Depends, status, UploadFile, File, Form, Query
from fastapi.concurrency import run_in_threadpool
from typing import Optional
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.db.models.user import User
from socialfeed.db.session import get_db
from socialfeed.schemas.post import PostCreated, PostOut
from socialfeed.schemas.message import Message
from socialfeed.crud import post as crud
from socialfeed.core.errors import InputValidationError, NotFoundError, OwnershipError, StoreError
from socialfeed.core.media import accept_image, discard_image
from socialfeed.core.security import get_current_user

router = APIRouter()


@router.get("", response_model=list[PostOut])
def get_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return crud.get_posts(db, viewer_id=current_user.id, skip=(page - 1) * limit, limit=limit)


@router.post("", response_model=PostCreated, status_code=status.HTTP_201_CREATED)
async def create_post(
    content: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not content or not content.strip():
        raise InputValidationError("Content is required")

    image_url = None
    if image is not None and image.filename:
        image_url = await accept_image(image)

    try:
        new_post = await run_in_threadpool(
            crud.create_post, db, user_id=current_user.id, content=content, image_url=image_url
        )
    except SQLAlchemyError as e:
        logging.error(f"Database error: {str(e)}")
        # the row never landed, so the file would be unreachable
        discard_image(image_url)
        raise StoreError("Failed to create post")

    return {"message": "Post created successfully", "post_id": new_post.id}


@router.delete("/{post_id}", response_model=Message)
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    post = crud.get_post(db, post_id)
    if not post:
        raise NotFoundError("Post not found")
    if post.user_id != current_user.id:
        raise OwnershipError("You can only delete your own posts")

    try:
        crud.delete_post(db, post_id)
    except SQLAlchemyError as e:
        logging.error(f"Database error: {str(e)}")
        raise StoreError("Failed to delete post")

    return {"message": "Post deleted successfully"}
