from sqlalchemy import exists, func, or_
from sqlalchemy.orm import Session, aliased
from socialfeed.crud.toggles import toggle_edge
from socialfeed.db.models.follow import Follow
from socialfeed.db.models.user import User

SUGGESTED_LIMIT = 5
SEARCH_LIMIT = 20


def is_following_clause(viewer_id: int):
    # aliased so it never correlates with a follows table joined in the outer query
    edge = aliased(Follow)
    return exists().where(edge.follower_id == viewer_id, edge.following_id == User.id)


def _summaries(query) -> list[dict]:
    return [
        {
            "id": user.id,
            "username": user.username,
            "full_name": user.full_name,
            "profile_picture": user.profile_picture,
            "is_following": bool(is_following),
        }
        for user, is_following in query.all()
    ]


def toggle_follow(db: Session, follower_id: int, following_id: int) -> bool:
    """Follow or unfollow. Callers reject self-follows before getting here."""
    return toggle_edge(db, Follow, follower_id=follower_id, following_id=following_id)


def get_followers(db: Session, viewer_id: int, user_id: int) -> list[dict]:
    query = (
        db.query(User, is_following_clause(viewer_id).label("is_following"))
        .join(Follow, Follow.follower_id == User.id)
        .filter(Follow.following_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return _summaries(query)


def get_following(db: Session, viewer_id: int, user_id: int) -> list[dict]:
    query = (
        db.query(User, is_following_clause(viewer_id).label("is_following"))
        .join(Follow, Follow.following_id == User.id)
        .filter(Follow.follower_id == user_id)
        .order_by(Follow.created_at.desc(), Follow.id.desc())
    )
    return _summaries(query)


def get_suggested_users(db: Session, viewer_id: int) -> list[dict]:
    """Up to five random users the viewer doesn't follow yet. No ranking."""
    followed = db.query(Follow.following_id).filter(Follow.follower_id == viewer_id)
    query = (
        db.query(User, is_following_clause(viewer_id).label("is_following"))
        .filter(User.id != viewer_id, ~User.id.in_(followed))
        .order_by(func.random())
        .limit(SUGGESTED_LIMIT)
    )
    return _summaries(query)


def search_users(db: Session, viewer_id: int, term: str) -> list[dict]:
    # autoescape keeps % and _ in the term literal
    query = (
        db.query(User, is_following_clause(viewer_id).label("is_following"))
        .filter(
            or_(
                User.username.icontains(term, autoescape=True),
                User.full_name.icontains(term, autoescape=True),
            )
        )
        .order_by(User.username)
        .limit(SEARCH_LIMIT)
    )
    return _summaries(query)
