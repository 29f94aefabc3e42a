from typing import Optional
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.crud.social import is_following_clause
from socialfeed.db.models.comment import Comment
from socialfeed.db.models.follow import Follow
from socialfeed.db.models.like import Like
from socialfeed.db.models.post import Post
from socialfeed.db.models.user import User


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def is_taken(db: Session, username: str, email: str) -> bool:
    return db.query(User).filter(or_(User.username == username, User.email == email)).first() is not None


def create_user(db: Session, username: str, email: str, password_hash: str, full_name: Optional[str]) -> User:
    """Raises IntegrityError when a concurrent registration took the username or email."""
    new_user = User(username=username, email=email, password=password_hash, full_name=full_name)
    db.add(new_user)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(new_user)
    return new_user


def get_profile(db: Session, viewer_id: int, user_id: int) -> Optional[dict]:
    posts_count = select(func.count(Post.id)).where(Post.user_id == User.id).scalar_subquery()
    followers_count = select(func.count(Follow.id)).where(Follow.following_id == User.id).scalar_subquery()
    following_count = select(func.count(Follow.id)).where(Follow.follower_id == User.id).scalar_subquery()

    row = (
        db.query(
            User,
            posts_count.label("posts_count"),
            followers_count.label("followers_count"),
            following_count.label("following_count"),
            is_following_clause(viewer_id).label("is_following"),
        )
        .filter(User.id == user_id)
        .first()
    )
    if row is None:
        return None

    user, posts, followers, following, is_following = row
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "bio": user.bio,
        "profile_picture": user.profile_picture,
        "created_at": user.created_at,
        "posts_count": posts or 0,
        "followers_count": followers or 0,
        "following_count": following or 0,
        "is_following": bool(is_following),
    }


def update_profile(
    db: Session,
    user: User,
    full_name: Optional[str] = None,
    bio: Optional[str] = None,
    profile_picture: Optional[str] = None,
) -> User:
    """Only the fields that were supplied change."""
    if full_name is not None:
        user.full_name = full_name
    if bio is not None:
        user.bio = bio
    if profile_picture is not None:
        user.profile_picture = profile_picture
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(user)
    return user


def delete_account(db: Session, user_id: int) -> None:
    """
    Remove a user and everything that points at them, all or nothing.

    Likes and comments left by others on the user's posts go too, otherwise
    they would outlive the posts they belong to.
    """
    own_posts = select(Post.id).where(Post.user_id == user_id)
    try:
        db.query(Like).filter(
            or_(Like.user_id == user_id, Like.post_id.in_(own_posts))
        ).delete(synchronize_session=False)
        db.query(Comment).filter(
            or_(Comment.user_id == user_id, Comment.post_id.in_(own_posts))
        ).delete(synchronize_session=False)
        db.query(Post).filter(Post.user_id == user_id).delete(synchronize_session=False)
        db.query(Follow).filter(
            or_(Follow.follower_id == user_id, Follow.following_id == user_id)
        ).delete(synchronize_session=False)
        db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
