"""Client session state and the file it is persisted to between runs."""

import logging
import os
from pathlib import Path
from typing import Optional, Union
from pydantic import BaseModel, ValidationError
from socialfeed.schemas.user import UserOut

DEFAULT_STATE_PATH = Path(
    os.getenv("SOCIALFEED_STATE", str(Path.home() / ".socialfeed" / "session.json"))
)


class ClientState(BaseModel):
    token: Optional[str] = None
    current_user: Optional[UserOut] = None
    feed_page: int = 1
    viewed_profile_id: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None and self.current_user is not None

    def sign_in(self, token: str, user: dict) -> None:
        self.token = token
        self.current_user = UserOut.model_validate(user)
        self.feed_page = 1
        self.viewed_profile_id = None

    def sign_out(self) -> None:
        self.token = None
        self.current_user = None
        self.feed_page = 1
        self.viewed_profile_id = None


def load_state(path: Union[str, Path, None] = None) -> ClientState:
    """Read saved state; a missing or unreadable file gives a signed-out state."""
    path = Path(path or DEFAULT_STATE_PATH)
    try:
        return ClientState.model_validate_json(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return ClientState()
    except (OSError, ValidationError) as e:
        logging.warning(f"Ignoring unreadable session file {path}: {e}")
        return ClientState()


def save_state(state: ClientState, path: Union[str, Path, None] = None) -> None:
    path = Path(path or DEFAULT_STATE_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
    # holds a bearer token
    path.chmod(0o600)
