"""
Authenticated context passed explicitly to every mutation.
"""

from dataclasses import dataclass
from typing import Optional

SYSTEM_USER_ID = 'system'


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    name: str = ''
    role: Optional[str] = None

    @classmethod
    def from_user(cls, user) -> 'AuthContext':
        return cls(user_id=user.id, name=user.name, role=user.role)

    @classmethod
    def system(cls) -> 'AuthContext':
        """Context for build scripts and other non-interactive callers."""
        return cls(user_id=SYSTEM_USER_ID, name='Sistema')

    @property
    def is_system(self) -> bool:
        return self.user_id == SYSTEM_USER_ID

    def __str__(self):
        return f'{self.name or self.user_id} ({self.user_id})'
