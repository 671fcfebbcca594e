"""Domain entity representing the caller identified by a bearer token."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity extracted from a verified access token."""

    id: int
    role: str | None = None
