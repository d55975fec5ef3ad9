"""
Expiring key-value persistence for the browser session.

Two logical keys are stored: ``auth_token`` (raw bearer token) and
``user_data`` (URL-encoded JSON of the last-known user record). They are
written and cleared together; ``read_session`` discards a half-written pair.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Protocol, Tuple
from urllib.parse import quote, unquote

log = logging.getLogger(__name__)

AUTH_TOKEN_KEY = "auth_token"
USER_DATA_KEY = "user_data"
DEFAULT_TTL_DAYS = 7

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore(Protocol):
    def set(self, key: str, value: str, ttl_days: float = DEFAULT_TTL_DAYS) -> None: ...

    def get(self, key: str) -> Optional[str]: ...

    def delete(self, key: str) -> None: ...


class MemorySessionStore:
    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, datetime]] = {}

    def set(self, key: str, value: str, ttl_days: float = DEFAULT_TTL_DAYS) -> None:
        self._entries[key] = (value, self._clock() + timedelta(days=ttl_days))

    def get(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (_, expires_at) in list(self._entries.items()) if now >= expires_at]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)


@dataclass(frozen=True)
class SessionRecord:
    token: str
    cached_user: Dict[str, Any]


def encode_user_data(user_data: Dict[str, Any]) -> str:
    return quote(json.dumps(user_data, separators=(",", ":")), safe="")


def decode_user_data(raw: str) -> Dict[str, Any]:
    data = json.loads(unquote(raw))
    if not isinstance(data, dict):
        raise ValueError("user_data must decode to an object")
    return data


def write_session(store: SessionStore, token: str, user_data: Dict[str, Any], ttl_days: float = DEFAULT_TTL_DAYS) -> None:
    store.set(AUTH_TOKEN_KEY, token, ttl_days)
    store.set(USER_DATA_KEY, encode_user_data(user_data), ttl_days)


def clear_session(store: SessionStore) -> None:
    store.delete(AUTH_TOKEN_KEY)
    store.delete(USER_DATA_KEY)


def read_session(store: SessionStore) -> Optional[SessionRecord]:
    token = store.get(AUTH_TOKEN_KEY)
    raw_user = store.get(USER_DATA_KEY)
    if token is None and raw_user is None:
        return None
    if not token or raw_user is None:
        log.warning("Discarding partial session record")
        clear_session(store)
        return None
    try:
        cached_user = decode_user_data(raw_user)
    except ValueError:
        # json.JSONDecodeError is a ValueError
        log.warning("Discarding session record with undecodable user_data")
        clear_session(store)
        return None
    return SessionRecord(token=token, cached_user=cached_user)
