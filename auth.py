import os
import secrets
from typing import Optional
from urllib.parse import urlencode

import streamlit as st

DEFAULT_API_BASE_URL = "https://innoverse-backend.yashmishra.xyz"
DEFAULT_REDIRECT_URI = "http://localhost:8501"
GOOGLE_AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_SCOPES = ["openid", "email", "profile"]

SESSION_TTL_DAYS = 7
OAUTH_STATE_TTL_DAYS = 10 / (24 * 60)  # 10 minutes
DEFAULT_API_TIMEOUT = 10


class AuthError(Exception):
    """Base error for auth operations a user explicitly asked for."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SignInError(AuthError):
    pass


class ProfileUpdateError(AuthError):
    pass


class AccountDeletionError(AuthError):
    pass


class NotAuthenticatedError(AuthError):
    pass


def get_secret(key):
    try:
        return st.secrets.get(key)
    except FileNotFoundError:
        return None


def get_setting(key: str, default: Optional[str] = None) -> Optional[str]:
    return get_secret(key) or os.getenv(key) or default


def get_api_base_url() -> str:
    return get_setting("API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/")


def get_api_timeout() -> float:
    raw = get_setting("API_TIMEOUT_SECONDS")
    try:
        return float(raw) if raw else DEFAULT_API_TIMEOUT
    except ValueError:
        return DEFAULT_API_TIMEOUT


def get_session_backend() -> str:
    backend = (get_setting("SESSION_BACKEND", "cookie") or "cookie").strip().lower()
    return backend if backend in {"cookie", "memory"} else "cookie"


def new_oauth_state() -> str:
    return secrets.token_urlsafe(16)


def build_google_auth_url(state: str) -> Optional[str]:
    """Authorization-code URL for Google; None when no client id is configured."""
    client_id = get_setting("GOOGLE_CLIENT_ID")
    if not client_id:
        return None
    params = {
        "client_id": client_id,
        "redirect_uri": get_setting("GOOGLE_REDIRECT_URI", DEFAULT_REDIRECT_URI),
        "response_type": "code",
        "scope": " ".join(GOOGLE_SCOPES),
        "access_type": "offline",
        "prompt": "select_account",
        "state": state,
    }
    return f"{GOOGLE_AUTHORIZATION_ENDPOINT}?{urlencode(params)}"
