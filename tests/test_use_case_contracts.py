from unittest.mock import MagicMock, patch

from use_cases import auth_flow, bootstrap
from use_cases.auth_controller import AuthSnapshot, AuthState


def _anonymous_controller():
    ctrl = MagicMock()
    ctrl.user = None
    ctrl.bootstrap.return_value = AuthSnapshot(
        state=AuthState.ANONYMOUS, user=None, loading=False, auth_loading=False
    )
    return ctrl


@patch("streamlit.query_params", new_callable=dict)
@patch("use_cases.auth_flow.session_manager.get_auth_controller")
@patch("use_cases.auth_flow.session_manager.init_session_state")
def test_auth_flow_contract(_, mock_get_controller, __) -> None:
    assert hasattr(auth_flow, "ensure_authenticated_session")
    mock_get_controller.return_value = _anonymous_controller()
    auth_flow.session_manager.st.session_state.clear()
    result = auth_flow.ensure_authenticated_session()
    assert isinstance(result, auth_flow.AuthFlowResult)
    assert result.status in {"CONTINUE", "STOP"}


@patch("use_cases.bootstrap.session_manager.get_auth_controller")
@patch("use_cases.bootstrap.auth.get_setting", return_value=None)
@patch("use_cases.bootstrap.session_manager.init_session_state")
def test_bootstrap_contract(_, __, mock_get_controller) -> None:
    assert hasattr(bootstrap, "run_startup")
    mock_get_controller.return_value = _anonymous_controller()
    result = bootstrap.run_startup()
    assert isinstance(result, bootstrap.StartupResult)
    assert result.status in {"CONTINUE", "STOP"}
    assert isinstance(result.planned_steps, tuple)
