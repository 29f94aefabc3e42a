"""Synchronous client for the SocialFeed REST API.

Every call either returns the decoded JSON payload or raises ``ApiError``.
The client reads the bearer token from, and writes sign-in/sign-out changes
to, the ``ClientState`` it was given; persisting that state is the caller's job.
"""

import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import quote
import httpx
from socialfeed.client.state import ClientState
from socialfeed.schemas.user import UserOut

DEFAULT_API_URL = os.getenv("SOCIALFEED_API_URL", "http://localhost:8000")
PAGE_SIZE = 10
MIN_SEARCH_LENGTH = 2


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


@dataclass
class FeedPage:
    posts: list
    page: int
    # page-size heuristic: a full page means another one *may* exist
    may_have_more: bool


class ApiClient:
    def __init__(
        self,
        state: ClientState,
        base_url: str = DEFAULT_API_URL,
        http: Optional[httpx.Client] = None,
        page_size: int = PAGE_SIZE,
    ):
        self.state = state
        self.page_size = page_size
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if self.state.token:
            headers["Authorization"] = f"Bearer {self.state.token}"

        try:
            response = self.http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ApiError(0, f"Could not reach the server: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(response.status_code, message or "Something went wrong")
        return data

    def _file_part(self, path: Union[str, Path]) -> tuple:
        path = Path(path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise ApiError(0, f"Cannot read {path}: {e.strerror or e}")
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return path.name, content, content_type

    def _page(self, path: str, page: int) -> FeedPage:
        posts = self._request("GET", path, params={"page": page, "limit": self.page_size})
        return FeedPage(posts=posts, page=page, may_have_more=len(posts) == self.page_size)

    # Auth

    def register(self, username: str, email: str, password: str, full_name: Optional[str] = None) -> dict:
        data = self._request(
            "POST",
            "/api/register",
            json={"username": username, "email": email, "password": password, "full_name": full_name},
        )
        self.state.sign_in(data["token"], data["user"])
        return data["user"]

    def login(self, username: str, password: str) -> dict:
        data = self._request("POST", "/api/login", json={"username": username, "password": password})
        self.state.sign_in(data["token"], data["user"])
        return data["user"]

    def logout(self) -> None:
        self.state.sign_out()

    # Posts

    def load_feed(self, page: int = 1) -> FeedPage:
        result = self._page("/api/posts", page)
        self.state.feed_page = page
        return result

    def load_more(self) -> FeedPage:
        return self.load_feed(self.state.feed_page + 1)

    def create_post(self, content: str, image: Union[str, Path, None] = None) -> int:
        files = {"image": self._file_part(image)} if image is not None else None
        data = self._request("POST", "/api/posts", data={"content": content}, files=files)
        return data["post_id"]

    def delete_post(self, post_id: int) -> None:
        self._request("DELETE", f"/api/posts/{post_id}")

    def toggle_like(self, post_id: int) -> dict:
        return self._request("POST", f"/api/posts/{post_id}/like")

    def comments(self, post_id: int) -> list:
        return self._request("GET", f"/api/posts/{post_id}/comments")

    def add_comment(self, post_id: int, content: str) -> int:
        data = self._request("POST", f"/api/posts/{post_id}/comments", json={"content": content})
        return data["comment_id"]

    # People

    def profile(self, user_id: int) -> dict:
        data = self._request("GET", f"/api/users/{user_id}")
        self.state.viewed_profile_id = user_id
        return data

    def user_posts(self, user_id: int, page: int = 1) -> FeedPage:
        return self._page(f"/api/users/{user_id}/posts", page)

    def update_profile(
        self,
        full_name: Optional[str] = None,
        bio: Optional[str] = None,
        picture: Union[str, Path, None] = None,
    ) -> dict:
        fields = {key: value for key, value in (("full_name", full_name), ("bio", bio)) if value is not None}
        files = {"profile_picture": self._file_part(picture)} if picture is not None else None
        data = self._request("PUT", "/api/users/profile", data=fields, files=files)
        self.state.current_user = UserOut.model_validate(data["user"])
        return data["user"]

    def toggle_follow(self, user_id: int) -> bool:
        return self._request("POST", f"/api/users/{user_id}/follow")["following"]

    def followers(self, user_id: int) -> list:
        return self._request("GET", f"/api/users/{user_id}/followers")

    def following(self, user_id: int) -> list:
        return self._request("GET", f"/api/users/{user_id}/following")

    def suggested(self) -> list:
        return self._request("GET", "/api/users/suggested")

    def search(self, query: str) -> list:
        term = query.strip()
        if len(term) < MIN_SEARCH_LENGTH:
            return []
        return self._request("GET", f"/api/users/search/{quote(term, safe='')}")

    def delete_account(self) -> None:
        self._request("DELETE", "/api/users/account")
        self.state.sign_out()
