from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.concurrency import run_in_threadpool
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.db.models.user import User
from socialfeed.db.session import get_db
from socialfeed.schemas.user import ProfileOut, ProfileUpdated, UserOut, UserSummary
from socialfeed.schemas.post import PostOut
from socialfeed.schemas.message import Message
from socialfeed.crud import post as post_crud, social, user as crud
from socialfeed.core.errors import NotFoundError, StoreError
from socialfeed.core.media import accept_image, discard_image
from socialfeed.core.security import get_current_user


router = APIRouter()

# Fixed paths are declared before /{user_id} so they are never read as an id.

# Users the viewer doesn't follow yet, in no particular order.
@router.get("/suggested", response_model=List[UserSummary])
def get_suggested_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return social.get_suggested_users(db, viewer_id=current_user.id)


@router.get("/search/{query}", response_model=List[UserSummary])
def search_users(
    query: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    term = query.strip()
    if not term:
        return []
    return social.search_users(db, viewer_id=current_user.id, term=term)


@router.put("/profile", response_model=ProfileUpdated)
async def update_profile(
    full_name: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    profile_picture: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    picture_url = None
    if profile_picture is not None and profile_picture.filename:
        picture_url = await accept_image(profile_picture)

    # TODO: remove the replaced picture file once nothing can still be serving it
    try:
        user = await run_in_threadpool(
            crud.update_profile,
            db,
            current_user,
            full_name=full_name,
            bio=bio,
            profile_picture=picture_url,
        )
    except SQLAlchemyError as e:
        logging.error(f"Database error: {str(e)}")
        discard_image(picture_url)
        raise StoreError("Failed to update profile")

    return {"message": "Profile updated successfully", "user": UserOut.model_validate(user)}


@router.delete("/account", response_model=Message)
def delete_account(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user_id = current_user.id
    try:
        crud.delete_account(db, user_id)
    except SQLAlchemyError as e:
        logging.error(f"Account deletion failed for user {user_id}, rolled back: {str(e)}")
        raise StoreError("Failed to delete account")

    logging.info(f"Account deleted: user {user_id}")
    return {"message": "Account deleted successfully"}


@router.get("/{user_id}", response_model=ProfileOut)
def get_profile(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    profile = crud.get_profile(db, viewer_id=current_user.id, user_id=user_id)
    if profile is None:
        raise NotFoundError("User not found")
    return profile


@router.get("/{user_id}/posts", response_model=List[PostOut])
def get_user_posts(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return post_crud.get_user_posts(
        db, viewer_id=current_user.id, user_id=user_id, skip=(page - 1) * limit, limit=limit
    )
