"""
Session Store - persistence of the token cookie and key-value storage.

A store owns a cookie jar (the ``token`` cookie) and a flat key-value
storage (the ``userId`` key). It is decoupled from the provider's in-memory
session so a session can be rebuilt after a restart.
"""

import json
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from requests.cookies import RequestsCookieJar

from tour_booking.domain.session import StoredSession
from tour_booking.utils.logger import get_logger, mask_token
from .exceptions import SessionStoreError

logger = get_logger(__name__)

TOKEN_COOKIE = "token"
USER_ID_KEY = "userId"
ROLE_KEY = "role"
DEFAULT_TTL_SECONDS = 86400


def parse_cookie_header(header: Optional[str], name: str) -> Optional[str]:
    """
    Read one cookie from a raw ``Cookie`` header string by name.

    Example:
        >>> parse_cookie_header("theme=dark; token=a.b=c", "token")
        "a.b=c"
    """
    if not header:
        return None

    # Split on the first "=" only; JWT values may contain "=" padding
    for pair in header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep and key.strip() == name:
            return value.strip()
    return None


class SessionStore:
    """
    In-memory session store; base class for persistent stores.

    Subclasses override ``_persist``, ``_restore`` and ``_wipe`` to mirror
    the jar and storage into a backend.
    """

    def __init__(self):
        self.cookies = RequestsCookieJar()
        self.storage: Dict[str, str] = {}
        self._restored = False

    # ------------------------------------------------------------------ #
    # Backend hooks
    # ------------------------------------------------------------------ #

    def _persist(self) -> None:
        pass

    def _restore(self) -> Optional[Dict[str, Any]]:
        return None

    def _wipe(self) -> None:
        pass

    def _ensure_restored(self) -> None:
        if self._restored:
            return
        # A failed read propagates and is retried on the next access
        snapshot = self._restore()
        if snapshot:
            self._load_snapshot(snapshot)
        self._restored = True

    def _commit(self, change: Callable[[], None]) -> None:
        """
        Apply an in-memory change and persist it.

        If persisting fails the jar and storage are put back as they were
        and the SessionStoreError is re-raised.
        """
        self._ensure_restored()
        before = self.snapshot()
        change()
        try:
            self._persist()
        except SessionStoreError:
            self._load_snapshot(before)
            raise

    # ------------------------------------------------------------------ #
    # Snapshot (de)serialization
    # ------------------------------------------------------------------ #

    def snapshot(self) -> Dict[str, Any]:
        """Serializable view of the jar and storage."""
        cookies: List[Dict[str, Any]] = [
            {"name": c.name, "value": c.value, "expires": c.expires} for c in self.cookies
        ]
        return {"cookies": cookies, "storage": dict(self.storage)}

    def _load_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self.cookies.clear()
        for cookie in snapshot.get("cookies") or []:
            if not cookie.get("name"):
                continue
            self.cookies.set(cookie["name"], cookie.get("value"), expires=cookie.get("expires"))
        self.storage = {str(k): str(v) for k, v in (snapshot.get("storage") or {}).items()}

    # ------------------------------------------------------------------ #
    # Cookie jar
    # ------------------------------------------------------------------ #

    def get_cookie(self, name: str) -> Optional[str]:
        """Return a cookie's value by name; expired cookies read as absent."""
        self._ensure_restored()
        for cookie in self.cookies:
            if cookie.name == name:
                if cookie.is_expired():
                    return None
                return cookie.value
        return None

    def set_cookie(self, name: str, value: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        expires = int(datetime.now(timezone.utc).timestamp()) + ttl_seconds
        self._commit(lambda: self.cookies.set(name, value, expires=expires))

    def expire_cookie(self, name: str) -> None:
        # A None value removes every cookie with this name
        self._commit(lambda: self.cookies.set(name, None))

    # ------------------------------------------------------------------ #
    # Key-value storage
    # ------------------------------------------------------------------ #

    def get_item(self, key: str) -> Optional[str]:
        self._ensure_restored()
        return self.storage.get(key)

    def set_item(self, key: str, value: Any) -> None:
        def write() -> None:
            self.storage[key] = str(value)

        self._commit(write)

    # ------------------------------------------------------------------ #
    # Session-level operations
    # ------------------------------------------------------------------ #

    def save(self, stored: StoredSession) -> None:
        """
        Write the token cookie and the user id (and role) in one pass.

        Either all of them are persisted or none are; on failure the store
        keeps whatever session it held before.
        """
        expires = None
        if stored.expires_at is not None:
            expires = max(int(stored.expires_at.timestamp()), int(datetime.now(timezone.utc).timestamp()))

        def write() -> None:
            self.cookies.set(TOKEN_COOKIE, stored.token, expires=expires)
            self.storage[USER_ID_KEY] = stored.user_id
            if stored.role:
                self.storage[ROLE_KEY] = stored.role
            else:
                self.storage.pop(ROLE_KEY, None)

        self._commit(write)
        logger.info(
            "Session saved",
            operation="save_session",
            context={
                "store": type(self).__name__,
                "user_id": stored.user_id,
                "token_masked": mask_token(stored.token),
            },
        )

    def load(self) -> Optional[StoredSession]:
        """Rebuild the persisted session, or None if the token or user id is missing."""
        self._ensure_restored()
        token = None
        expires_at = None
        for cookie in self.cookies:
            if cookie.name == TOKEN_COOKIE and not cookie.is_expired():
                token = cookie.value
                if cookie.expires is not None:
                    expires_at = datetime.fromtimestamp(cookie.expires, tz=timezone.utc)
        user_id = self.storage.get(USER_ID_KEY)

        if not token or not user_id:
            logger.debug(
                "No persisted session",
                operation="load_session",
                context={"has_token": bool(token), "has_user_id": bool(user_id)},
            )
            return None

        return StoredSession(
            user_id=user_id, token=token, expires_at=expires_at, role=self.storage.get(ROLE_KEY)
        )

    def clear(self) -> None:
        """Expire the token cookie and clear all storage."""
        self._ensure_restored()
        self.cookies.set(TOKEN_COOKIE, None)
        self.storage.clear()
        self._wipe()
        logger.info("Session cleared", operation="clear_session", context={"store": type(self).__name__})


class MemorySessionStore(SessionStore):
    """Store that lives only as long as the process."""


class FileSessionStore(SessionStore):
    """
    Store mirrored into a JSON file.

    The file holds ``{"cookies": [...], "storage": {...}}`` and is rewritten
    on every mutation.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path

    def _restore(self) -> Optional[Dict[str, Any]]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            logger.warning(
                "Session file is corrupt; starting empty",
                operation="restore_session",
                context={"path": self.path},
                error=str(e),
            )
            return None
        except OSError as e:
            raise SessionStoreError(f"Cannot read session file {self.path}: {e}") from e

    def _persist(self) -> None:
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            tmp_path = f"{self.path}.tmp"
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self.snapshot(), f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise SessionStoreError(f"Cannot write session file {self.path}: {e}") from e

    def _wipe(self) -> None:
        self._persist()
