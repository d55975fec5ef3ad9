"""Centralized Role-Based Access Control logic."""

import logging
from typing import Optional

from use_cases.session_models import User

log = logging.getLogger(__name__)

USER_ACTIONS = frozenset({"VIEW_PROFILE", "EDIT_PROFILE", "DELETE_ACCOUNT"})


def enforce(user: Optional[User], action: str) -> bool:
    """
    Evaluates if the user is authorized to perform the action.
    Returns True if authorized, False otherwise.
    """
    authorized = False

    if user is not None:
        # Admins get overarching rights to everything
        if user.role == "admin":
            authorized = True
        elif user.role == "user" and action in USER_ACTIONS:
            authorized = True

    if not authorized:
        log.warning(
            f"RBAC denied action={action} user={user.id if user else None} "
            f"role={user.role if user else None}"
        )

    return authorized
