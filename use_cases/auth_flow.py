"""Authentication flow orchestration (application layer)."""

import logging
from dataclasses import dataclass
from typing import Literal, Optional

import auth
from utils import session_manager

AuthFlowStatus = Literal["CONTINUE", "STOP"]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthFlowResult:
    """Result contract for auth flow orchestration."""

    status: AuthFlowStatus
    reason: str
    user_id: Optional[str] = None
    is_new_user: bool = False


def _query_value(params, key: str) -> Optional[str]:
    val = params.get(key)
    if isinstance(val, list):
        return val[0] if val else None
    return val


def handle_oauth_callback() -> Optional[AuthFlowResult]:
    """Exchange a Google ``?code=`` callback if the current URL carries one."""
    st = session_manager.st
    params = st.query_params
    code = _query_value(params, "code")
    if not code:
        return None

    returned_state = _query_value(params, "state") or ""
    state_ok = session_manager.consume_oauth_state(returned_state)
    st.query_params.clear()

    if not state_ok:
        log.warning("OAuth callback state mismatch; ignoring code")
        st.session_state.sign_in_error = "Sign-in link expired. Please try again."
        return AuthFlowResult(status="STOP", reason="state_mismatch")

    controller = session_manager.get_auth_controller()
    try:
        result = controller.sign_in_with_google(code)
    except auth.AuthError as e:
        st.session_state.sign_in_error = str(e)
        return AuthFlowResult(status="STOP", reason="sign_in_failed")

    st.session_state.sign_in_error = None
    st.session_state.show_onboarding = result.is_new_user
    return AuthFlowResult(
        status="CONTINUE",
        reason="signed_in",
        user_id=result.user.id,
        is_new_user=result.is_new_user,
    )


def ensure_authenticated_session() -> AuthFlowResult:
    """Run auth-gate orchestration and return a control-flow status."""
    session_manager.init_session_state()
    controller = session_manager.get_auth_controller()
    controller.bootstrap()

    callback_result = handle_oauth_callback()

    user = controller.user
    if user is None:
        if callback_result is not None and callback_result.status == "STOP":
            return callback_result
        return AuthFlowResult(status="STOP", reason="auth_required")

    if callback_result is not None and callback_result.status == "CONTINUE":
        return callback_result
    return AuthFlowResult(status="CONTINUE", reason="authenticated", user_id=user.id)
