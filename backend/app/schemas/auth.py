from __future__ import annotations

from pydantic import BaseModel

from app.models.enums import UserRole


class AuthenticatedPrincipal(BaseModel):
    """Verified caller identity passed explicitly into every service call."""

    subject_id: str
    email: str | None = None
    role: UserRole = UserRole.COLLABORATOR

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_access(self, user_id: str) -> bool:
        """Admins may act on anyone; collaborators only on themselves."""
        return self.is_admin or self.subject_id == user_id


class AuthCheckResponse(BaseModel):
    """Outcome of resolving a verified token against the authorization rules."""

    authorized: bool
    uid: str
    email: str | None = None
    role: UserRole | None = None
    first_user: bool = False
    auto_authorized: bool = False
