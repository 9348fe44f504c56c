"""
Client-side session: the token and user returned by login/register.

The session is an explicit object handed to the API client and to whatever
drives the screens. It is loaded once on start, saved after login, and
cleared (including its file) on logout.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_SESSION_FILE = Path.home() / ".calendar_app" / "session.json"


@dataclass
class Session:
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    path: Optional[Path] = field(default=None, repr=False)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Session":
        """
        Read a saved session. A missing or unreadable file gives an empty
        session bound to the same path.
        """
        path = Path(path) if path else DEFAULT_SESSION_FILE
        if not path.exists():
            return cls(path=path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logging.warning(f"Ignoring unreadable session file {path}: {e}")
            return cls(path=path)

        if not isinstance(data, dict):
            return cls(path=path)
        return cls(token=data.get("token"), user=data.get("user"), path=path)

    def start(self, token: str, user: Dict[str, Any]) -> None:
        """Adopt a freshly minted token and persist it."""
        self.token = token
        self.user = user
        self.save()

    def save(self) -> None:
        """Atomically write the session to its file (no-op without a path)."""
        if self.path is None:
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=self.path.parent, delete=False, encoding="utf-8"
        ) as tf:
            json.dump({"token": self.token, "user": self.user}, tf)
            temp_path = Path(tf.name)

        try:
            os.replace(temp_path, self.path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        """Forget the token and user and remove the saved file."""
        self.token = None
        self.user = None
        if self.path is not None:
            self.path.unlink(missing_ok=True)
