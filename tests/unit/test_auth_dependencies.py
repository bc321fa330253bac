from datetime import timedelta

from portal.features.auth.dependencies import get_optional_current_user
from portal.features.auth.jwt_utils import JWTUtils, TokenData


def test_token_round_trip_keeps_portal_and_role():
    token = JWTUtils.create_access_token(user_id="u1", portal_id=3, role="editor", email="u1@portal.example")

    data = JWTUtils.verify_token(token)

    assert data.user_id == "u1"
    assert data.portal_id == 3
    assert data.role == "editor"


def test_host_token_has_no_portal():
    token = JWTUtils.create_access_token(user_id="h", portal_id=None, role="host", email="h@portal.example")
    assert JWTUtils.verify_token(token).portal_id is None


def test_expired_or_garbage_tokens_are_rejected():
    expired = JWTUtils.create_access_token(
        user_id="u1", portal_id=0, role="editor", email="u1@portal.example", expires_delta=timedelta(seconds=-5)
    )
    assert JWTUtils.verify_token(expired) is None
    assert JWTUtils.verify_token("not-a-token") is None


async def test_optional_user_passes_through():
    user = TokenData(user_id="u1", portal_id=0, role="editor", email="u1@portal.example")
    assert await get_optional_current_user(token_data=user) is user
    assert await get_optional_current_user(token_data=None) is None
