from fastapi import Depends, Header, HTTPException, status
from jose import JWTError, jwt

from staydesk.config import settings
from staydesk.data.currency import normalize_currency
from staydesk.session import BookingSession


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authorization header")
    return token.strip()


async def get_session(
    authorization: str | None = Header(None),
    x_currency: str | None = Header(None),
    accept_language: str | None = Header(None),
) -> BookingSession:
    """Session for the current request; anonymous when no token is sent."""
    token = _bearer_token(authorization)
    user_id = None
    if token:
        try:
            payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        except JWTError:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
        user_id = payload.get("id") or payload.get("sub")

    language = settings.default_language
    if accept_language:
        language = accept_language.split(",")[0].split("-")[0].strip().lower() or language

    return BookingSession(
        user_id=user_id,
        token=token,
        currency=normalize_currency(x_currency, settings.default_currency),
        language=language,
    )


async def require_session(session: BookingSession = Depends(get_session)) -> BookingSession:
    if not session.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in to continue")
    return session
