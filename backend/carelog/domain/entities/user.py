"""The acting user, as handed to us by the authentication layer."""

from dataclasses import dataclass
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    CANDIDATE = "candidate"


@dataclass(frozen=True)
class ActingUser:
    id: str
    role: UserRole = UserRole.CANDIDATE

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
