from typing import Optional
from sqlalchemy import exists, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.db.models.post import Post
from socialfeed.db.models.user import User
from socialfeed.db.models.like import Like
from socialfeed.db.models.comment import Comment


def _posts_query(db: Session, viewer_id: int):
    # counts are computed live so they can never drift from the join tables
    likes_count = (
        select(func.count(Like.id)).where(Like.post_id == Post.id).scalar_subquery()
    )
    comments_count = (
        select(func.count(Comment.id)).where(Comment.post_id == Post.id).scalar_subquery()
    )
    is_liked = exists().where(Like.post_id == Post.id, Like.user_id == viewer_id)

    return (
        db.query(
            Post,
            User.username,
            User.full_name,
            User.profile_picture,
            likes_count.label("likes_count"),
            comments_count.label("comments_count"),
            is_liked.label("is_liked"),
        )
        .join(User, Post.user_id == User.id)
        .order_by(Post.created_at.desc(), Post.id.desc())
    )


def _shape(rows) -> list[dict]:
    return [
        {
            "id": post.id,
            "user_id": post.user_id,
            "content": post.content,
            "image_url": post.image_url,
            "created_at": post.created_at,
            "username": username,
            "full_name": full_name,
            "profile_picture": profile_picture,
            "likes_count": likes_count or 0,
            "comments_count": comments_count or 0,
            "is_liked": bool(is_liked),
        }
        for post, username, full_name, profile_picture, likes_count, comments_count, is_liked in rows
    ]


def get_posts(db: Session, viewer_id: int, skip: int = 0, limit: int = 10) -> list[dict]:
    """Newest first, annotated for ``viewer_id``. A full page only means more *may* exist."""
    return _shape(_posts_query(db, viewer_id).offset(skip).limit(limit).all())


def get_user_posts(db: Session, viewer_id: int, user_id: int, skip: int = 0, limit: int = 10) -> list[dict]:
    rows = (
        _posts_query(db, viewer_id)
        .filter(Post.user_id == user_id)
        .offset(skip)
        .limit(limit)
        .all()
    )
    return _shape(rows)


def get_post(db: Session, post_id: int) -> Optional[Post]:
    return db.query(Post).filter(Post.id == post_id).first()


def create_post(db: Session, user_id: int, content: str, image_url: Optional[str] = None) -> Post:
    new_post = Post(user_id=user_id, content=content, image_url=image_url)
    db.add(new_post)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(new_post)
    return new_post


def delete_post(db: Session, post_id: int) -> None:
    """Remove a post with its likes and comments in one transaction."""
    try:
        db.query(Like).filter(Like.post_id == post_id).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.post_id == post_id).delete(synchronize_session=False)
        db.query(Post).filter(Post.id == post_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
