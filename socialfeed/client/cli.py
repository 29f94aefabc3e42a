"""Command-line front end: ``socialfeed <command> ...``."""

import argparse
import getpass
import sys
from typing import Callable, Optional, TextIO
import httpx
from socialfeed.client import render
from socialfeed.client.api import ApiClient, ApiError, DEFAULT_API_URL
from socialfeed.client.search import SearchBox
from socialfeed.client.state import DEFAULT_STATE_PATH, load_state, save_state

PUBLIC_COMMANDS = {"register", "login", "logout"}


def notify(message: str, kind: str = "info", stream: Optional[TextIO] = None) -> None:
    """One-off notice on stderr; nothing is retried."""
    print(f"[{kind}] {message}", file=stream or sys.stderr)


def confirm_twice(first: str, second: str, ask: Callable[[str], str]) -> bool:
    for prompt in (first, second):
        if ask(f"{prompt} [y/N] ").strip().lower() not in ("y", "yes"):
            return False
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="socialfeed", description="SocialFeed terminal client")
    parser.add_argument("--api-url", default=DEFAULT_API_URL)
    parser.add_argument("--state", default=str(DEFAULT_STATE_PATH), help="session file")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register")
    p.add_argument("username")
    p.add_argument("email")
    p.add_argument("--full-name")
    p.add_argument("--password")

    p = sub.add_parser("login")
    p.add_argument("username")
    p.add_argument("--password")

    sub.add_parser("logout")

    p = sub.add_parser("feed")
    p.add_argument("--page", type=int)
    p.add_argument("--more", action="store_true", help="next page after the last one shown")

    p = sub.add_parser("post")
    p.add_argument("content")
    p.add_argument("--image")

    p = sub.add_parser("delete-post")
    p.add_argument("post_id", type=int)

    p = sub.add_parser("like")
    p.add_argument("post_id", type=int)

    p = sub.add_parser("comments")
    p.add_argument("post_id", type=int)

    p = sub.add_parser("comment")
    p.add_argument("post_id", type=int)
    p.add_argument("content")

    p = sub.add_parser("profile")
    p.add_argument("user_id", type=int, nargs="?")
    p.add_argument("--posts", action="store_true")

    p = sub.add_parser("edit-profile")
    p.add_argument("--full-name")
    p.add_argument("--bio")
    p.add_argument("--picture")

    p = sub.add_parser("follow")
    p.add_argument("user_id", type=int)

    for name in ("followers", "following"):
        p = sub.add_parser(name)
        p.add_argument("user_id", type=int, nargs="?")

    sub.add_parser("suggested")

    p = sub.add_parser("search")
    p.add_argument("query", nargs="?", default="")
    p.add_argument("--interactive", action="store_true", help="read queries line by line from stdin")

    sub.add_parser("delete-account")
    return parser


def _me(client: ApiClient) -> int:
    return client.state.current_user.id


def run_command(args, client: ApiClient, ask: Callable[[str], str], out: TextIO) -> None:
    """Execute one parsed command, printing results to ``out``. ApiError propagates."""
    state = client.state
    me = state.current_user.id if state.current_user else None
    command = args.command

    if command == "register":
        password = args.password or getpass.getpass("Password: ")
        user = client.register(args.username, args.email, password, args.full_name)
        notify(f"Account created for @{user['username']}", "success")
    elif command == "login":
        password = args.password or getpass.getpass("Password: ")
        user = client.login(args.username, password)
        notify(f"Logged in as @{user['username']}", "success")
    elif command == "logout":
        client.logout()
        notify("Logged out", "success")
    elif command == "feed":
        page = client.load_more() if args.more else client.load_feed(args.page or 1)
        print(render.render_feed(page, me), file=out)
    elif command == "post":
        post_id = client.create_post(args.content, args.image)
        notify(f"Post #{post_id} created", "success")
    elif command == "delete-post":
        if not confirm_twice(
            "Are you sure you want to delete this post? This action cannot be undone.",
            "Delete it for good?",
            ask,
        ):
            notify("Nothing deleted")
            return
        client.delete_post(args.post_id)
        notify("Post deleted successfully!", "success")
    elif command == "like":
        result = client.toggle_like(args.post_id)
        heart = "♥" if result["liked"] else "♡"
        print(f"{heart} {result['likes_count']}", file=out)
    elif command == "comments":
        print(render.render_comments(client.comments(args.post_id)), file=out)
    elif command == "comment":
        client.add_comment(args.post_id, args.content)
        notify("Comment added", "success")
    elif command == "profile":
        user_id = args.user_id or _me(client)
        print(render.render_profile(client.profile(user_id), me), file=out)
        if args.posts:
            print("", file=out)
            print(render.render_feed(client.user_posts(user_id), me), file=out)
    elif command == "edit-profile":
        client.update_profile(args.full_name, args.bio, args.picture)
        notify("Profile updated successfully!", "success")
    elif command == "follow":
        following = client.toggle_follow(args.user_id)
        notify("Following" if following else "Unfollowed", "success")
    elif command in ("followers", "following"):
        user_id = args.user_id or _me(client)
        users = client.followers(user_id) if command == "followers" else client.following(user_id)
        print(render.render_user_list(users, me), file=out)
    elif command == "suggested":
        print(render.render_user_list(client.suggested(), me, empty="No suggestions right now"), file=out)
    elif command == "search":
        if args.interactive:
            _interactive_search(client, me, out)
        else:
            print(render.render_user_list(client.search(args.query), me), file=out)
    elif command == "delete-account":
        if not confirm_twice(
            "Are you sure you want to delete your account? All your posts, comments, likes and followers go with it.",
            "This is your final warning. Your account and all associated data will be permanently deleted. Are you absolutely sure?",
            ask,
        ):
            notify("Account kept")
            return
        client.delete_account()
        notify("Account deleted", "success")


def _interactive_search(client: ApiClient, me: Optional[int], out: TextIO) -> None:
    def show(text, users):
        if len(text.strip()) >= box.min_length:
            print(render.render_user_list(users, me), file=out)

    box = SearchBox(client.search, show, on_error=lambda e: notify(e.message, "error"))
    for line in sys.stdin:
        box.type(line.rstrip("\n"))
    box.flush()


def main(
    argv: Optional[list] = None,
    http: Optional[httpx.Client] = None,
    ask: Callable[[str], str] = input,
    out: Optional[TextIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    out = out or sys.stdout
    state = load_state(args.state)

    if args.command not in PUBLIC_COMMANDS and not state.is_authenticated:
        notify("Please log in first", "error")
        return 1

    client = ApiClient(state, base_url=args.api_url, http=http)
    try:
        run_command(args, client, ask, out)
        return 0
    except ApiError as e:
        notify(e.message, "error")
        return 1
    finally:
        client.close()
        save_state(state, args.state)


if __name__ == "__main__":
    sys.exit(main())
