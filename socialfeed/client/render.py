"""Plain-text rendering of API payloads for the terminal."""

from datetime import datetime, timezone
from typing import Optional, Union
from socialfeed.client.api import FeedPage

NO_PHOTO = "[no photo]"


def _parse(moment: Union[str, datetime]) -> datetime:
    if isinstance(moment, str):
        moment = datetime.fromisoformat(moment.replace("Z", "+00:00"))
    # the API stores naive UTC timestamps
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_relative(moment: Union[str, datetime], now: Optional[datetime] = None) -> str:
    moment = _parse(moment)
    now = _parse(now) if now is not None else datetime.now(timezone.utc)
    seconds = int((now - moment).total_seconds())

    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 30 * 86400:
        return f"{seconds // 86400}d ago"
    return moment.strftime("%Y-%m-%d")


def display_name(item: dict) -> str:
    return item.get("full_name") or item["username"]


def render_post(post: dict, current_user_id: Optional[int] = None, now: Optional[datetime] = None) -> str:
    heart = "♥" if post.get("is_liked") else "♡"
    header = f"#{post['id']}  {display_name(post)} @{post['username']} · {format_relative(post['created_at'], now)}"
    if current_user_id is not None and post["user_id"] == current_user_id:
        header += "  [delete]"

    lines = [header, post["content"]]
    if post.get("image_url"):
        lines.append(f"[image] {post['image_url']}")
    lines.append(f"{heart} {post.get('likes_count', 0)}   💬 {post.get('comments_count', 0)}")
    return "\n".join(lines)


def render_feed(page: FeedPage, current_user_id: Optional[int] = None, now: Optional[datetime] = None) -> str:
    if not page.posts:
        if page.page == 1:
            return "No posts yet\nBe the first to share something!"
        return "No more posts"
    blocks = [render_post(post, current_user_id, now) for post in page.posts]
    if page.may_have_more:
        blocks.append(f"-- more posts may follow (page {page.page + 1}) --")
    return "\n\n".join(blocks)


def render_comment(comment: dict, now: Optional[datetime] = None) -> str:
    return f"{display_name(comment)} @{comment['username']} · {format_relative(comment['created_at'], now)}\n  {comment['content']}"


def render_comments(comments: list, now: Optional[datetime] = None) -> str:
    if not comments:
        return "No comments yet"
    return "\n".join(render_comment(comment, now) for comment in comments)


def render_user_card(user: dict, current_user_id: Optional[int] = None) -> str:
    card = f"#{user['id']}  {display_name(user)} @{user['username']}"
    if current_user_id is None or user["id"] != current_user_id:
        card += "  [Following]" if user.get("is_following") else "  [Follow]"
    return card


def render_user_list(users: list, current_user_id: Optional[int] = None, empty: str = "No users found") -> str:
    if not users:
        return empty
    return "\n".join(render_user_card(user, current_user_id) for user in users)


def render_profile(profile: dict, current_user_id: Optional[int] = None) -> str:
    lines = [
        f"{display_name(profile)} @{profile['username']}",
        f"Photo: {profile.get('profile_picture') or NO_PHOTO}",
        profile.get("bio") or "No bio yet",
        f"{profile['posts_count']} posts · {profile['followers_count']} followers · {profile['following_count']} following",
    ]
    if current_user_id is not None and profile["id"] != current_user_id:
        lines.append("[Following]" if profile.get("is_following") else "[Follow]")
    return "\n".join(lines)
