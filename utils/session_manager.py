import hmac
import logging
from typing import Optional

import streamlit as st

import auth
from infrastructure.api.backend_client import BackendClient
from infrastructure.observability import set_user_context
from infrastructure.storage.cookie_session_store import CookieSessionStore
from infrastructure.storage.session_store import AUTH_TOKEN_KEY, MemorySessionStore
from use_cases.auth_controller import AuthController, AuthSnapshot
from use_cases.session_models import is_admin

"""
SESSION STATE CONTRACT

Этот модуль управляет состоянием пользовательской сессии Streamlit.
Единственный писатель auth-состояния: AuthController. Ключи ниже являются
его зеркалом для остального UI (обновляются подпиской).

Ключи st.session_state:

auth_controller: AuthController | None
    контроллер аутентификации этой браузерной сессии
    default: None
    owner: session_manager

auth_user: User | None
    текущий пользователь (зеркало контроллера)
    default: None
    owner: auth_controller (через подписку)

is_admin: bool
    роль admin у текущего пользователя
    default: False
    owner: auth_controller (через подписку)

auth_loading: bool
    идёт обмен OAuth-кода
    default: False
    owner: auth_controller (через подписку)

oauth_state: str | None
    state, выданный в ссылке входа Google
    default: None
    owner: login_view / auth_flow

sign_in_error: str | None
    текст последней ошибки входа для экрана логина
    default: None
    owner: auth_flow

show_onboarding: bool
    пользователь только что зарегистрирован, нужно выбрать трек
    default: False
    owner: auth_flow / profile_view

memory_session: MemorySessionStore
    хранилище сессии для SESSION_BACKEND=memory
    default: создаётся при первом обращении
    owner: session_manager
"""

log = logging.getLogger(__name__)

OAUTH_STATE_KEY = "oauth_state"


def init_session_state():
    if 'auth_controller' not in st.session_state:
        st.session_state.auth_controller = None
    if 'auth_user' not in st.session_state:
        st.session_state.auth_user = None
    if 'is_admin' not in st.session_state:
        st.session_state.is_admin = False
    if 'auth_loading' not in st.session_state:
        st.session_state.auth_loading = False
    if 'oauth_state' not in st.session_state:
        st.session_state.oauth_state = None
    if 'sign_in_error' not in st.session_state:
        st.session_state.sign_in_error = None
    if 'show_onboarding' not in st.session_state:
        st.session_state.show_onboarding = False


def build_session_store():
    if auth.get_session_backend() == "memory":
        if 'memory_session' not in st.session_state:
            st.session_state.memory_session = MemorySessionStore()
        return st.session_state.memory_session
    return CookieSessionStore()


def publish_to_session_state(snapshot: AuthSnapshot) -> None:
    st.session_state.auth_user = snapshot.user
    st.session_state.is_admin = is_admin(snapshot.user)
    st.session_state.auth_loading = snapshot.auth_loading
    set_user_context(snapshot.user)


def get_auth_controller() -> AuthController:
    controller = st.session_state.get("auth_controller")
    if controller is None:
        store = build_session_store()
        client = BackendClient(
            auth.get_api_base_url(),
            token_provider=lambda: store.get(AUTH_TOKEN_KEY),
            timeout=auth.get_api_timeout(),
        )
        controller = AuthController(store, client, ttl_days=auth.SESSION_TTL_DAYS)
        controller.subscribe(publish_to_session_state)
        st.session_state.auth_controller = controller
        log.info(f"Auth controller created (backend={auth.get_session_backend()})")
    return controller


@st.cache_resource
def pending_oauth_states() -> MemorySessionStore:
    """Process-wide issued states for the memory backend, keyed by state value."""
    return MemorySessionStore()


def issue_oauth_state() -> str:
    """
    State for the Google sign-in link. Google redirects back into a fresh
    Streamlit session, so the value is also kept outside st.session_state:
    in the cookie store, or in the process-wide map for the memory backend.
    """
    state = st.session_state.get("oauth_state")
    if not state:
        state = auth.new_oauth_state()
        st.session_state.oauth_state = state
        if auth.get_session_backend() == "memory":
            pending = pending_oauth_states()
            pending.purge_expired()
            pending.set(f"{OAUTH_STATE_KEY}:{state}", "1", ttl_days=auth.OAUTH_STATE_TTL_DAYS)
        else:
            get_auth_controller().store.set(OAUTH_STATE_KEY, state, ttl_days=auth.OAUTH_STATE_TTL_DAYS)
    return state


def consume_oauth_state(returned_state: Optional[str]) -> bool:
    """True if ``returned_state`` was issued to this browser. A state is good for one callback."""
    expected = st.session_state.get("oauth_state")
    st.session_state.oauth_state = None
    if not returned_state:
        return False

    if auth.get_session_backend() == "memory":
        pending = pending_oauth_states()
        key = f"{OAUTH_STATE_KEY}:{returned_state}"
        if pending.get(key) is not None:
            pending.delete(key)
            return True
    else:
        store = get_auth_controller().store
        expected = expected or store.get(OAUTH_STATE_KEY)
        store.delete(OAUTH_STATE_KEY)

    return bool(expected) and hmac.compare_digest(returned_state, expected)


def logout():
    controller = st.session_state.get("auth_controller")
    if controller is not None:
        controller.sign_out()
    else:
        st.session_state.auth_user = None
        st.session_state.is_admin = False
    st.session_state.show_onboarding = False
    st.rerun()
