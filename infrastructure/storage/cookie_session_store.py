import json
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Tuple

import streamlit as st
import streamlit.components.v1 as components

from infrastructure.storage.session_store import DEFAULT_TTL_DAYS, Clock, utc_now

log = logging.getLogger(__name__)

OVERLAY_KEY = "_cookie_overlay"
EPOCH_EXPIRES = "Thu, 01 Jan 1970 00:00:00 GMT"


class CookieSessionStore:
    """
    Session Store backed by browser cookies.

    The browser only sends a cookie written by this run on the next request,
    so pending writes and deletes are kept in a per-session overlay until
    then. Overlay entries carry their own expiry; deletes are stored as None.
    """

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock

    def _overlay(self) -> Dict[str, Tuple[Optional[str], Optional[datetime]]]:
        if OVERLAY_KEY not in st.session_state:
            st.session_state[OVERLAY_KEY] = {}
        return st.session_state[OVERLAY_KEY]

    def _read_browser_cookies(self) -> Dict[str, str]:
        try:
            return dict(st.context.cookies)
        except Exception:
            # No request context (bare mode, tests)
            return {}

    def _emit(self, key: str, value: str, expires: str) -> None:
        cookie = f"{key}={value};expires={expires};path=/;SameSite=Strict"
        cookie_js = json.dumps(cookie)
        components.html(
            f"""
            <script>
              document.cookie = {cookie_js};
              try {{ window.parent.document.cookie = {cookie_js}; }} catch (e) {{}}
            </script>
            """,
            height=0,
        )

    def set(self, key: str, value: str, ttl_days: float = DEFAULT_TTL_DAYS) -> None:
        expires_at = self._clock() + timedelta(days=ttl_days)
        self._overlay()[key] = (value, expires_at)
        self._emit(key, value, expires_at.strftime("%a, %d %b %Y %H:%M:%S GMT"))

    def get(self, key: str) -> Optional[str]:
        overlay = self._overlay()
        if key in overlay:
            value, expires_at = overlay[key]
            if value is None:
                return None
            if expires_at is not None and self._clock() >= expires_at:
                overlay[key] = (None, None)
                return None
            return value
        return self._read_browser_cookies().get(key)

    def delete(self, key: str) -> None:
        self._overlay()[key] = (None, None)
        self._emit(key, "", EPOCH_EXPIRES)
