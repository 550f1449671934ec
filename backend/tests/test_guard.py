"""
Authorization guard decision table.
"""
from types import SimpleNamespace

import pytest

from aas_portal.api.guard import AccessDecision, evaluate_access

MEMBER = SimpleNamespace(is_admin=False, is_verified=True)
ADMIN = SimpleNamespace(is_admin=True, is_verified=True)
UNVERIFIED = SimpleNamespace(is_admin=False, is_verified=False)


@pytest.mark.parametrize("user", [None, MEMBER, ADMIN, UNVERIFIED])
@pytest.mark.parametrize("admin_only", [False, True])
@pytest.mark.parametrize("require_verification", [False, True])
def test_loading_wins_over_everything(user, admin_only, require_verification):
    assert evaluate_access(True, user, admin_only, require_verification) is AccessDecision.LOADING


@pytest.mark.parametrize(
    "user, admin_only, require_verification, expected",
    [
        (None, False, False, AccessDecision.REDIRECT_LOGIN),
        (None, True, False, AccessDecision.REDIRECT_LOGIN),
        (None, False, True, AccessDecision.REDIRECT_LOGIN),
        (None, True, True, AccessDecision.REDIRECT_LOGIN),
        (MEMBER, False, False, AccessDecision.ALLOW),
        (MEMBER, True, False, AccessDecision.REDIRECT_DASHBOARD),
        (MEMBER, False, True, AccessDecision.ALLOW),
        (MEMBER, True, True, AccessDecision.REDIRECT_DASHBOARD),
        (ADMIN, False, False, AccessDecision.ALLOW),
        (ADMIN, True, False, AccessDecision.ALLOW),
        (ADMIN, False, True, AccessDecision.ALLOW),
        (ADMIN, True, True, AccessDecision.ALLOW),
        (UNVERIFIED, False, False, AccessDecision.ALLOW),
        (UNVERIFIED, True, False, AccessDecision.REDIRECT_DASHBOARD),
        (UNVERIFIED, False, True, AccessDecision.VERIFICATION_REQUIRED),
        (UNVERIFIED, True, True, AccessDecision.REDIRECT_DASHBOARD),
    ],
)
def test_decision_table(user, admin_only, require_verification, expected):
    assert evaluate_access(False, user, admin_only, require_verification) is expected


def test_unverified_admin_sees_verification_notice():
    admin = SimpleNamespace(is_admin=True, is_verified=False)
    assert evaluate_access(False, admin, True, True) is AccessDecision.VERIFICATION_REQUIRED
