"""Unit tests for role access levels."""

import pytest

from portal.features.auth.jwt_utils import TokenData
from portal.features.auth.permissions import SecurityAccessLevel, access_level_for, is_host


@pytest.mark.parametrize(
    "role, level",
    [
        ("registered", SecurityAccessLevel.VIEW),
        ("editor", SecurityAccessLevel.EDIT),
        ("admin", SecurityAccessLevel.ADMIN),
        ("host", SecurityAccessLevel.HOST),
        ("something-else", SecurityAccessLevel.VIEW),
    ],
)
def test_access_level_for_role(role, level):
    user = TokenData(user_id="u", portal_id=0, role=role, email="u@example.com")
    assert access_level_for(user) is level


def test_anonymous_access_level():
    assert access_level_for(None) is SecurityAccessLevel.ANONYMOUS
    assert not is_host(None)


def test_is_host():
    assert is_host(TokenData(user_id="h", portal_id=None, role="host", email="h@example.com"))
