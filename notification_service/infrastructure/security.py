"""Security helpers for access token handling."""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from notification_service.config import get_settings

# ---- JWT ----
# Tokens are issued by the user service; this service only needs the shared
# secret to verify them. ``create_access_token`` exists for operator scripts
# and tests.
settings = get_settings()


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(tz=timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    return jwt.encode(
        {**data, "exp": expire}, settings.secret_key, algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def extract_user_id(payload: dict) -> int:
    """Return the user identifier claim carried by a decoded token."""

    raw_user_id = payload.get(settings.jwt_user_id_claim)
    if isinstance(raw_user_id, bool):
        raise ValueError("Token does not identify a user")
    if isinstance(raw_user_id, str) and raw_user_id.isdigit():
        raw_user_id = int(raw_user_id)
    if not isinstance(raw_user_id, int) or raw_user_id <= 0:
        raise ValueError("Token does not identify a user")
    return raw_user_id
