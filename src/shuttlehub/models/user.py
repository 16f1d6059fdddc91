"""Club user identity."""

from enum import StrEnum

from pydantic import BaseModel


class UserRole(StrEnum):
    """Roles recognised by the club login.

    admin  -> publishes, edits and deletes sessions, approves leave requests
    member -> joins sessions, requests to leave
    """

    ADMIN = "admin"
    MEMBER = "member"


class ClubUser(BaseModel):
    """The user behind a request."""

    username: str
    role: UserRole = UserRole.MEMBER

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN
