import pytest

from use_cases import rbac_policy
from use_cases.session_models import User

ADMIN = User(id="1", email="admin@x.com", role="admin")
MEMBER = User(id="2", email="user@x.com", role="user")


@pytest.mark.parametrize("action", ["VIEW_PROFILE", "EDIT_PROFILE", "DELETE_ACCOUNT"])
def test_members_manage_their_own_profile(action):
    assert rbac_policy.enforce(MEMBER, action) is True


def test_members_cannot_view_admin():
    assert rbac_policy.enforce(MEMBER, "VIEW_ADMIN") is False


def test_admin_can_do_everything():
    assert rbac_policy.enforce(ADMIN, "VIEW_ADMIN") is True
    assert rbac_policy.enforce(ADMIN, "EDIT_PROFILE") is True


def test_anonymous_is_denied_and_logged(caplog):
    with caplog.at_level("WARNING"):
        assert rbac_policy.enforce(None, "VIEW_PROFILE") is False
    assert "RBAC denied action=VIEW_PROFILE" in caplog.text
