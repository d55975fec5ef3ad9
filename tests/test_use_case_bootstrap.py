from unittest.mock import MagicMock, patch

from use_cases import bootstrap
from use_cases.auth_controller import AuthSnapshot, AuthState


def _controller(state=AuthState.ANONYMOUS):
    ctrl = MagicMock()
    ctrl.bootstrap.return_value = AuthSnapshot(state=state, user=None, loading=False, auth_loading=False)
    return ctrl


@patch("use_cases.bootstrap.session_manager.get_auth_controller")
@patch("use_cases.bootstrap.session_manager.init_session_state")
@patch("use_cases.bootstrap.auth.get_setting", return_value="client-id")
def test_run_startup_bootstraps_controller(_mock_setting, mock_init, mock_get_controller) -> None:
    ctrl = _controller(AuthState.AUTHENTICATED)
    mock_get_controller.return_value = ctrl

    result = bootstrap.run_startup()

    assert result.status == "CONTINUE"
    assert result.planned_steps == ("init_session_state", "get_auth_controller", "bootstrap_authenticated")
    mock_init.assert_called_once()
    ctrl.bootstrap.assert_called_once()


@patch("use_cases.bootstrap.session_manager.get_auth_controller")
@patch("use_cases.bootstrap.session_manager.init_session_state")
@patch("use_cases.bootstrap.auth.get_setting", return_value=None)
def test_run_startup_flags_missing_client_id(_mock_setting, _mock_init, mock_get_controller) -> None:
    mock_get_controller.return_value = _controller()

    result = bootstrap.run_startup()

    assert result.status == "CONTINUE"
    assert "google_client_id_missing" in result.planned_steps
    assert result.planned_steps[-1] == "bootstrap_anonymous"


@patch("use_cases.bootstrap.auth.get_setting", return_value="client-id")
def test_run_startup_init_happens_before_bootstrap(_mock_setting) -> None:
    order = []
    ctrl = _controller()
    ctrl.bootstrap.side_effect = lambda: order.append("bootstrap") or AuthSnapshot(
        state=AuthState.ANONYMOUS, user=None, loading=False, auth_loading=False
    )

    with patch(
        "use_cases.bootstrap.session_manager.init_session_state",
        side_effect=lambda: order.append("init_session_state"),
    ), patch(
        "use_cases.bootstrap.session_manager.get_auth_controller",
        side_effect=lambda: order.append("get_auth_controller") or ctrl,
    ):
        bootstrap.run_startup()

    assert order == ["init_session_state", "get_auth_controller", "bootstrap"]
