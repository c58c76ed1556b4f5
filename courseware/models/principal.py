from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

ADMIN = "admin"
TEACHER = "teacher"


@dataclass(frozen=True, slots=True)
class Principal:
    """Verified caller identity plus the roles held in the role store.

    user_id comes from the validated bearer token.  roles is filled in from
    the privileged role store, never from token claims, so a role change
    takes effect on the caller's next request.
    """

    user_id: UUID
    roles: frozenset[str] = frozenset()

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def is_admin(self) -> bool:
        return self.has_role(ADMIN)

    def is_teacher(self) -> bool:
        return self.has_role(TEACHER)
