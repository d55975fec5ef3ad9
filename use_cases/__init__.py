"""Application layer contracts for orchestrating high-level flows."""

from .auth_controller import AuthController, AuthSnapshot, AuthState, OperationResult, SignInResult
from .auth_flow import AuthFlowResult, AuthFlowStatus, ensure_authenticated_session
from .bootstrap import StartupResult, StartupStatus, run_startup
from .session_models import CODING_TRACKS, Role, User, UserProfile, is_admin

__all__ = [
    "AuthController",
    "AuthFlowResult",
    "AuthFlowStatus",
    "AuthSnapshot",
    "AuthState",
    "CODING_TRACKS",
    "OperationResult",
    "Role",
    "SignInResult",
    "StartupResult",
    "StartupStatus",
    "User",
    "UserProfile",
    "ensure_authenticated_session",
    "is_admin",
    "run_startup",
]
