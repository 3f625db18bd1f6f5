from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config


class InvalidTokenError(Exception):
    pass


def create_access_token(user_id: str, role: str, expires_minutes: int | None = None) -> str:
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + timedelta(minutes=expires_minutes or config.JWT_EXPIRES_MINUTES)
    payload = {"sub": user_id, "role": role, "exp": expire, "iat": issued_at}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    return jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])


def user_id_from_token(token: str) -> str:
    """Return the user id a bearer token was issued for."""
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise InvalidTokenError("Invalid token") from exc

    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError("Invalid token subject")
    return user_id
