"""
Persistent storage for the login session.

This module manages the file (see config.default_session_path):

    data/session.json  ->  {"authToken": "...", "user": {"nome": "..."}}

The token is issued elsewhere and stored with `estagios login`. It is read on
every API call and removed on logout or whenever the API answers 401/403.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from estagios.config import default_session_path
from estagios.log import get_logger
from estagios.model import UserIdentity

logger = get_logger(__name__)


@dataclass
class Session:
    token: str
    user: UserIdentity


def _resolve(path: str | Path | None) -> Path:
    return Path(path) if path is not None else default_session_path()


def load_session(path: str | Path | None = None) -> Optional[Session]:
    """
    Load the stored session.

    Returns None if the file does not exist, is invalid, or lacks a token
    or user name. A broken file is treated like being logged out.
    """
    session_path = _resolve(path)

    if not session_path.exists():
        return None

    try:
        data = json.loads(session_path.read_text(encoding="utf-8"))
        token = data.get("authToken")
        user = data.get("user")
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, AttributeError):
        logger.warning("Ignoring unreadable session file %s", session_path)
        return None

    if not isinstance(token, str) or not token.strip():
        return None
    if not isinstance(user, dict):
        return None
    name = user.get("nome")
    if not isinstance(name, str) or not name.strip():
        return None

    return Session(token=token.strip(), user=UserIdentity(name=name, raw=user))


def save_session(token: str, user: dict[str, Any], path: str | Path | None = None) -> None:
    """
    Save token and user to session.json, creating parent directories.
    """
    session_path = _resolve(path)
    session_path.parent.mkdir(parents=True, exist_ok=True)

    payload = {"authToken": token.strip(), "user": user}
    session_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


def clear_session(path: str | Path | None = None) -> None:
    session_path = _resolve(path)
    try:
        session_path.unlink()
    except FileNotFoundError:
        pass


class SessionStore:
    """
    Session access bound to one file, shared by the API client and the UI.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = _resolve(path)

    def load(self) -> Optional[Session]:
        return load_session(self.path)

    def token(self) -> Optional[str]:
        session = self.load()
        return session.token if session else None

    def current_user(self) -> Optional[UserIdentity]:
        session = self.load()
        return session.user if session else None

    def save(self, token: str, user: dict[str, Any]) -> None:
        save_session(token, user, self.path)

    def clear(self) -> None:
        clear_session(self.path)
