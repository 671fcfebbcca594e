"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from notification_service.domain.entities import AuthenticatedUser
from notification_service.infrastructure.security import decode_access_token, extract_user_id

# Tokens are issued by the user service login endpoint.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def resolve_current_user(token: str | None) -> AuthenticatedUser:
    """Resolve the authenticated user for the provided token."""

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No autenticado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_access_token(token)
        user_id = extract_user_id(payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales inválidas",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    role = payload.get("role")
    return AuthenticatedUser(id=user_id, role=role if isinstance(role, str) else None)


def get_current_user(token: str = Depends(oauth2_scheme)) -> AuthenticatedUser:
    """Return the authenticated user from the provided token."""

    return resolve_current_user(token)
