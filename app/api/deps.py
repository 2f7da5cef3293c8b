from uuid import UUID

from fastapi import Depends, Header
from jose import JWTError, jwt

from app.config import settings
from app.db import SessionLocal
from app.errors import Unauthorized
from app.services.common import coerce_uuid


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip()
    return None


def get_current_subscriber_id(
    authorization: str | None = Header(default=None),
) -> UUID | None:
    """Subject of the caller's access token, or None when no token was sent.

    A token that is present but fails verification is rejected outright.
    """
    token = _extract_bearer_token(authorization)
    if not token:
        return None
    if not settings.jwt_secret:
        raise Unauthorized("Authentication is not configured")
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_aud": False},
        )
    except JWTError as exc:
        raise Unauthorized("Invalid token") from exc
    try:
        return coerce_uuid(payload.get("sub"))
    except ValueError as exc:
        raise Unauthorized("Invalid token subject") from exc


def require_subscriber(
    subscriber_id: UUID | None = Depends(get_current_subscriber_id),
) -> UUID:
    if subscriber_id is None:
        raise Unauthorized()
    return subscriber_id
