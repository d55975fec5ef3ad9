from unittest.mock import MagicMock, patch

import streamlit as st

from infrastructure.api.backend_client import ApiResponse
from infrastructure.storage.cookie_session_store import CookieSessionStore
from infrastructure.storage.session_store import MemorySessionStore
from use_cases.auth_controller import AuthController
from utils import session_manager


def test_init_session_state():
    st.session_state.clear()
    session_manager.init_session_state()
    assert st.session_state.auth_controller is None
    assert st.session_state.is_admin is False
    assert st.session_state.auth_user is None
    assert st.session_state.auth_loading is False
    assert st.session_state.oauth_state is None
    assert st.session_state.show_onboarding is False


def test_init_session_state_keeps_existing_values():
    st.session_state.clear()
    st.session_state.show_onboarding = True
    session_manager.init_session_state()
    assert st.session_state.show_onboarding is True


@patch("utils.session_manager.auth.get_secret", return_value=None)
@patch("utils.session_manager.auth.get_session_backend", return_value="memory")
def test_get_auth_controller_is_cached_per_session(_mock_backend, _mock_secret):
    st.session_state.clear()
    session_manager.init_session_state()

    first = session_manager.get_auth_controller()
    second = session_manager.get_auth_controller()

    assert isinstance(first, AuthController)
    assert first is second
    assert isinstance(first.store, MemorySessionStore)
    assert first.store is st.session_state.memory_session


@patch("utils.session_manager.auth.get_secret", return_value=None)
@patch("utils.session_manager.auth.get_session_backend", return_value="memory")
def test_controller_changes_are_mirrored_into_session_state(_mock_backend, _mock_secret):
    st.session_state.clear()
    session_manager.init_session_state()
    controller = session_manager.get_auth_controller()
    controller.client = MagicMock()
    controller.client.sign_in_with_google.return_value = ApiResponse(
        success=True, data={"token": "T1", "user": {"id": "u1", "role": "admin"}}
    )

    controller.sign_in_with_google("code")

    assert st.session_state.auth_user.id == "u1"
    assert st.session_state.is_admin is True
    assert st.session_state.auth_loading is False


@patch("utils.session_manager.auth.get_secret", return_value=None)
@patch("utils.session_manager.auth.get_session_backend", return_value="memory")
def test_client_sends_stored_token(_mock_backend, _mock_secret):
    st.session_state.clear()
    session_manager.init_session_state()
    controller = session_manager.get_auth_controller()
    controller.store.set("auth_token", "T9")

    assert controller.client._headers()["Authorization"] == "Bearer T9"


@patch("utils.session_manager.auth.get_secret", return_value=None)
@patch("utils.session_manager.auth.get_session_backend", return_value="cookie")
def test_oauth_state_survives_redirect_with_cookie_backend(_mock_backend, _mock_secret):
    st.session_state.clear()
    session_manager.init_session_state()

    with patch("infrastructure.storage.cookie_session_store.components.html") as mock_html:
        state = session_manager.issue_oauth_state()
        assert session_manager.issue_oauth_state() == state
    assert f"oauth_state={state}" in mock_html.call_args[0][0]

    # Google redirects into a new Streamlit session: only the browser cookie remains
    st.session_state.clear()
    session_manager.init_session_state()
    with patch("infrastructure.storage.cookie_session_store.components.html"), patch.object(
        CookieSessionStore, "_read_browser_cookies", return_value={"oauth_state": state}
    ):
        assert session_manager.consume_oauth_state("forged") is False
        assert session_manager.consume_oauth_state(state) is False

    st.session_state.clear()
    session_manager.init_session_state()
    with patch("infrastructure.storage.cookie_session_store.components.html"), patch.object(
        CookieSessionStore, "_read_browser_cookies", return_value={"oauth_state": state}
    ):
        assert session_manager.consume_oauth_state(state) is True


@patch("utils.session_manager.auth.get_secret", return_value=None)
@patch("utils.session_manager.auth.get_session_backend", return_value="memory")
def test_oauth_state_survives_redirect_with_memory_backend(_mock_backend, _mock_secret):
    st.session_state.clear()
    session_manager.init_session_state()
    state = session_manager.issue_oauth_state()

    # Google redirects into a new Streamlit session
    st.session_state.clear()
    session_manager.init_session_state()

    assert session_manager.consume_oauth_state("forged") is False
    assert session_manager.consume_oauth_state(state) is True
    assert session_manager.consume_oauth_state(state) is False


@patch("utils.session_manager.auth.get_secret", return_value=None)
@patch("utils.session_manager.auth.get_session_backend", return_value="memory")
def test_oauth_states_of_different_browsers_do_not_collide(_mock_backend, _mock_secret):
    st.session_state.clear()
    first = session_manager.issue_oauth_state()
    st.session_state.clear()
    second = session_manager.issue_oauth_state()
    st.session_state.clear()

    assert first != second
    assert session_manager.consume_oauth_state(first) is True
    assert session_manager.consume_oauth_state(second) is True


@patch("streamlit.rerun")
def test_logout(mock_rerun):
    st.session_state.clear()
    session_manager.init_session_state()
    controller = MagicMock()
    st.session_state.auth_controller = controller
    st.session_state.show_onboarding = True

    session_manager.logout()

    controller.sign_out.assert_called_once()
    mock_rerun.assert_called_once()
    assert st.session_state.show_onboarding is False


@patch("streamlit.rerun")
def test_logout_without_controller(mock_rerun):
    st.session_state.clear()
    session_manager.init_session_state()
    st.session_state.auth_user = MagicMock()
    st.session_state.is_admin = True

    session_manager.logout()

    mock_rerun.assert_called_once()
    assert st.session_state.auth_user is None
    assert st.session_state.is_admin is False
