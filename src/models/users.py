"""
Acting user identity, passed explicitly to every service call.
"""

from dataclasses import dataclass

from core.config import ROLE_STUDENT, ROLE_TEACHER


@dataclass(frozen=True)
class UserContext:
    """Identity supplied by the identity provider for the current request."""
    user_id: str
    role: str = ROLE_STUDENT

    @property
    def is_teacher(self) -> bool:
        return self.role == ROLE_TEACHER
