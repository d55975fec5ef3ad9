"""Startup orchestration for application bootstrap."""

from dataclasses import dataclass
from typing import Literal, Tuple

import logging

import auth
from utils import session_manager

StartupStatus = Literal["CONTINUE", "STOP"]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


def run_startup() -> StartupResult:
    """Prepare session state and validate any persisted session once per browser session."""
    executed_steps = []

    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    if not auth.get_setting("GOOGLE_CLIENT_ID"):
        log.warning("GOOGLE_CLIENT_ID is not configured; sign-in is unavailable")
        executed_steps.append("google_client_id_missing")

    controller = session_manager.get_auth_controller()
    executed_steps.append("get_auth_controller")

    # Only the first run of a browser session actually hits the backend.
    snapshot = controller.bootstrap()
    executed_steps.append(f"bootstrap_{snapshot.state.value.lower()}")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
