from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from socialfeed.crud.toggles import toggle_edge
from socialfeed.db.models.comment import Comment
from socialfeed.db.models.like import Like
from socialfeed.db.models.user import User


def toggle_like(db: Session, user_id: int, post_id: int) -> bool:
    """Like or unlike ``post_id``. Returns True when the post ends up liked."""
    return toggle_edge(db, Like, post_id=post_id, user_id=user_id)


def count_likes(db: Session, post_id: int) -> int:
    return db.query(Like).filter(Like.post_id == post_id).count()


def add_comment(db: Session, user_id: int, post_id: int, content: str) -> Comment:
    comment = Comment(post_id=post_id, user_id=user_id, content=content)
    db.add(comment)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(comment)
    return comment


def get_comments(db: Session, post_id: int) -> list[dict]:
    rows = (
        db.query(Comment, User.username, User.full_name, User.profile_picture)
        .join(User, Comment.user_id == User.id)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    return [
        {
            "id": comment.id,
            "post_id": comment.post_id,
            "user_id": comment.user_id,
            "content": comment.content,
            "created_at": comment.created_at,
            "username": username,
            "full_name": full_name,
            "profile_picture": profile_picture,
        }
        for comment, username, full_name, profile_picture in rows
    ]
