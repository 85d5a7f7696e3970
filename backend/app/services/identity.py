from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel

from app.exceptions import NotFoundError, UnauthenticatedError
from app.models.enums import UserRole


class IdentityUser(BaseModel):
    """User record and custom claims held by the identity provider."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    authorized: bool = False
    role: UserRole | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.email or self.uid


@runtime_checkable
class IdentityService(Protocol):
    """Interface for the identity provider."""

    async def verify_token(self, token: str) -> IdentityUser:
        """Resolve a bearer credential. Raises UnauthenticatedError if invalid."""
        ...

    async def get_user(self, uid: str) -> IdentityUser | None:
        """Fetch a user by subject id. Returns None if not found."""
        ...

    async def get_user_by_email(self, email: str) -> IdentityUser | None:
        """Fetch a user by email. Returns None if not found."""
        ...

    async def list_users(self) -> list[IdentityUser]:
        """List every user known to the provider."""
        ...

    async def set_claims(self, uid: str, *, authorized: bool, role: UserRole | None) -> None:
        """Replace the authorization claims of a user."""
        ...


class InMemoryIdentityService:
    """In-memory stub implementation for development."""

    def __init__(self) -> None:
        self._users: dict[str, IdentityUser] = {}
        self._tokens: dict[str, str] = {}

    def seed(self, user: IdentityUser, token: str | None = None) -> None:
        """Seed a user, optionally reachable through a bearer token."""
        self._users[user.uid] = user
        if token is not None:
            self._tokens[token] = user.uid

    async def verify_token(self, token: str) -> IdentityUser:
        uid = self._tokens.get(token)
        if uid is None or uid not in self._users:
            raise UnauthenticatedError("Invalid or expired credential")
        return self._users[uid]

    async def get_user(self, uid: str) -> IdentityUser | None:
        return self._users.get(uid)

    async def get_user_by_email(self, email: str) -> IdentityUser | None:
        needle = email.lower()
        for user in self._users.values():
            if user.email is not None and user.email.lower() == needle:
                return user
        return None

    async def list_users(self) -> list[IdentityUser]:
        return list(self._users.values())

    async def set_claims(self, uid: str, *, authorized: bool, role: UserRole | None) -> None:
        user = self._users.get(uid)
        if user is None:
            raise NotFoundError(f"User {uid} not found")
        self._users[uid] = user.model_copy(update={"authorized": authorized, "role": role})


_identity_service: IdentityService = InMemoryIdentityService()


def get_identity_service() -> IdentityService:
    """FastAPI dependency for the identity provider."""
    return _identity_service


def set_identity_service(service: IdentityService) -> None:
    """Override the service (for testing or production wiring)."""
    global _identity_service
    _identity_service = service
