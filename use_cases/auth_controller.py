"""
Auth Controller: the single writer of "who is the current user".

States: BOOTSTRAPPING -> ANONYMOUS | AUTHENTICATED, with SIGNING_IN while an
OAuth code exchange is in flight. Every published user comes from a
successful backend read; local merges are never published.
"""

import copy
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from auth import (
    SESSION_TTL_DAYS,
    AccountDeletionError,
    NotAuthenticatedError,
    ProfileUpdateError,
    SignInError,
)
from infrastructure.api.backend_client import ApiResponse, BackendClient
from infrastructure.observability import mask_token
from infrastructure.storage.session_store import (
    AUTH_TOKEN_KEY,
    SessionStore,
    clear_session,
    read_session,
    write_session,
)
from use_cases.session_models import User

log = logging.getLogger(__name__)


class AuthState(str, Enum):
    BOOTSTRAPPING = "BOOTSTRAPPING"
    ANONYMOUS = "ANONYMOUS"
    AUTHENTICATED = "AUTHENTICATED"
    SIGNING_IN = "SIGNING_IN"


@dataclass(frozen=True)
class AuthSnapshot:
    state: AuthState
    user: Optional[User]
    loading: bool
    auth_loading: bool

    @property
    def profile(self) -> Optional[User]:
        return self.user

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


@dataclass(frozen=True)
class SignInResult:
    success: bool
    user: User
    is_new_user: bool


@dataclass(frozen=True)
class OperationResult:
    success: bool
    error: Optional[str] = None
    signed_out: bool = False


Listener = Callable[[AuthSnapshot], None]


def merge_user_record(current: Dict[str, Any], partial: Mapping[str, Any]) -> Dict[str, Any]:
    """Lay ``partial`` over ``current``; a ``profile`` key merges field-wise."""
    merged = copy.deepcopy(current)
    for key, value in partial.items():
        if key == "profile" and isinstance(value, Mapping):
            profile = dict(merged.get("profile") or {})
            profile.update(value)
            merged["profile"] = profile
        else:
            merged[key] = value
    return merged


class AuthController:
    def __init__(self, store: SessionStore, client: BackendClient, ttl_days: float = SESSION_TTL_DAYS):
        self.store = store
        self.client = client
        self.ttl_days = ttl_days
        self._state = AuthState.BOOTSTRAPPING
        self._user: Optional[User] = None
        self._loading = True
        self._auth_loading = False
        self._bootstrapped = False
        self._seq = 0
        self._listeners: List[Listener] = []

    # --- published state ---

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def profile(self) -> Optional[User]:
        return self._user

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def auth_loading(self) -> bool:
        return self._auth_loading

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def snapshot(self) -> AuthSnapshot:
        return AuthSnapshot(
            state=self._state,
            user=self._user,
            loading=self._loading,
            auth_loading=self._auth_loading,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception as e:
                log.error(f"Auth listener {listener!r} failed: {e}", exc_info=True)

    # --- request sequencing ---

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def _is_stale(self, seq: int, operation: str) -> bool:
        if seq != self._seq:
            log.info(f"Dropping stale {operation} response (seq {seq}, latest {self._seq})")
            return True
        return False

    # --- transitions ---

    def _become_authenticated(self, user: User, token: str) -> None:
        write_session(self.store, token, user.to_dict(), self.ttl_days)
        log.debug(f"Session stored for user {user.id} (token {mask_token(token)})")
        self._user = user
        self._state = AuthState.AUTHENTICATED

    def _become_anonymous(self) -> None:
        clear_session(self.store)
        self._user = None
        self._state = AuthState.ANONYMOUS

    def get_auth_header(self) -> Optional[str]:
        token = self.store.get(AUTH_TOKEN_KEY)
        return f"Bearer {token}" if token else None

    def bootstrap(self) -> AuthSnapshot:
        """Validate any persisted session against the backend. Runs once."""
        if self._bootstrapped:
            return self.snapshot()
        self._bootstrapped = True
        try:
            record = read_session(self.store)
            if record is None:
                self._state = AuthState.ANONYMOUS
            else:
                seq = self._next_seq()
                resp = self.client.get_profile()
                if not self._is_stale(seq, "bootstrap"):
                    user = self._user_from_response(resp)
                    if user is None:
                        log.info(f"Stored session rejected ({resp.error or 'no user'}); signing out")
                        self._become_anonymous()
                    else:
                        self._become_authenticated(user, record.token)
        except Exception as e:
            log.error(f"Error checking existing auth: {e}", exc_info=True)
            self._become_anonymous()
        finally:
            self._loading = False
            self._publish()
        return self.snapshot()

    def sign_in_with_google(self, auth_code: str) -> SignInResult:
        if not auth_code or not auth_code.strip():
            raise SignInError("Authorization code is required")

        self._state = AuthState.SIGNING_IN
        self._auth_loading = True
        self._publish()
        seq = self._next_seq()
        try:
            resp = self.client.sign_in_with_google(auth_code)
            data = resp.data if resp.success and isinstance(resp.data, Mapping) else None
            token = data.get("token") if data else None
            raw_user = data.get("user") if data else None
            if not token or not isinstance(raw_user, Mapping):
                raise SignInError(resp.error or "Authentication failed", resp.status_code)
            try:
                user = User.from_dict(raw_user)
            except (ValueError, TypeError) as e:
                raise SignInError(f"Malformed user record: {e}", resp.status_code) from e

            is_new_user = bool(data.get("is_new_user", False))
            if not self._is_stale(seq, "sign-in"):
                self._become_authenticated(user, token)
                log.info(f"Signed in user {user.id} (new={is_new_user})")
            return SignInResult(success=True, user=user, is_new_user=is_new_user)
        except Exception:
            # A failed exchange leaves any existing session untouched
            self._state = AuthState.AUTHENTICATED if self._user is not None else AuthState.ANONYMOUS
            log.warning("Google sign-in failed", exc_info=True)
            raise
        finally:
            self._auth_loading = False
            self._loading = False
            self._publish()

    def refresh_profile(self) -> OperationResult:
        token = self.store.get(AUTH_TOKEN_KEY)
        if not token:
            if self._user is not None:
                log.info("Auth token missing or expired; signing out")
                self.sign_out()
                return OperationResult(success=False, error="Session expired", signed_out=True)
            return OperationResult(success=False, error="No auth token found")

        seq = self._next_seq()
        resp = self.client.get_profile()
        if self._is_stale(seq, "refresh"):
            return OperationResult(success=False, error="Superseded by a newer request")

        user = self._user_from_response(resp)
        if user is not None:
            self._become_authenticated(user, token)
            self._publish()
            return OperationResult(success=True)

        if resp.is_unauthorized:
            log.info("Profile refresh unauthorized; signing out")
            self.sign_out()
            return OperationResult(success=False, error=resp.error or "Unauthorized", signed_out=True)

        log.warning(f"Profile refresh failed, keeping last known user: {resp.error}")
        return OperationResult(success=False, error=resp.error or "Failed to refresh profile")

    def update_profile(self, partial: Mapping[str, Any]) -> OperationResult:
        if self._user is None or not self.store.get(AUTH_TOKEN_KEY):
            raise NotAuthenticatedError("No auth token found")

        merged = merge_user_record(self._user.to_dict(), partial)
        resp = self.client.update_profile(merged)
        if not resp.success:
            raise ProfileUpdateError(resp.error or "Failed to update profile", resp.status_code)

        refreshed = self.refresh_profile()
        if not refreshed.success:
            log.warning(f"Profile saved but re-hydration failed: {refreshed.error}")
        return OperationResult(success=True, signed_out=refreshed.signed_out)

    def delete_account(self) -> OperationResult:
        if self._user is None or not self.store.get(AUTH_TOKEN_KEY):
            raise NotAuthenticatedError("No auth token found")
        resp = self.client.delete_profile()
        if not resp.success:
            raise AccountDeletionError(resp.error or "Failed to delete account", resp.status_code)
        log.info(f"Account {self._user.id} deleted")
        self.sign_out()
        return OperationResult(success=True, signed_out=True)

    def sign_out(self) -> None:
        """Clear the session locally. Never raises and never calls the backend."""
        self._next_seq()
        try:
            clear_session(self.store)
        except Exception as e:
            log.error(f"Failed to clear session store: {e}", exc_info=True)
        self._user = None
        self._state = AuthState.ANONYMOUS
        self._loading = False
        self._auth_loading = False
        log.info("User signed out")
        self._publish()

    @staticmethod
    def _user_from_response(resp: ApiResponse) -> Optional[User]:
        if not resp.success or not isinstance(resp.data, Mapping):
            return None
        try:
            return User.from_dict(resp.data)
        except (ValueError, TypeError) as e:
            log.warning(f"Backend returned a malformed user record: {e}")
            return None
