import pytest
from fastapi import HTTPException
from jose import jwt

from staydesk.config import settings
from staydesk.dependencies import get_session, require_session


async def test_anonymous_session_uses_defaults():
    session = await get_session(authorization=None, x_currency=None, accept_language=None)
    assert session.user_id is None
    assert session.currency == settings.default_currency
    assert session.language == "en"
    assert session.auth_headers() == {}


async def test_token_and_headers_are_read():
    token = jwt.encode({"sub": "u-7"}, settings.secret_key, algorithm=settings.algorithm)
    session = await get_session(
        authorization=f"Bearer {token}", x_currency="egp", accept_language="ar-EG,ar;q=0.9"
    )
    assert session.user_id == "u-7"
    assert session.currency == "EGP"
    assert session.language == "ar"
    assert session.auth_headers() == {"Authorization": f"Bearer {token}"}


async def test_non_bearer_scheme_rejected():
    with pytest.raises(HTTPException) as exc:
        await get_session(authorization="Basic abc", x_currency=None, accept_language=None)
    assert exc.value.status_code == 401


async def test_require_session_rejects_anonymous():
    anonymous = await get_session(authorization=None, x_currency=None, accept_language=None)
    with pytest.raises(HTTPException):
        await require_session(anonymous)
