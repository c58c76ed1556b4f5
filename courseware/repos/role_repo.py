from __future__ import annotations

from typing import Protocol
from uuid import UUID


class RoleRepo(Protocol):
    async def roles_for(self, user_id: UUID) -> frozenset[str]: ...
    async def grant(self, user_id: UUID, role: str) -> None: ...
    async def role_exists(self, role: str) -> bool: ...


class InMemoryRoleRepo:
    def __init__(self) -> None:
        self._roles: dict[UUID, set[str]] = {}

    def clear(self) -> None:
        self._roles.clear()

    async def roles_for(self, user_id: UUID) -> frozenset[str]:
        return frozenset(self._roles.get(user_id, ()))

    async def grant(self, user_id: UUID, role: str) -> None:
        self._roles.setdefault(user_id, set()).add(role)

    async def role_exists(self, role: str) -> bool:
        return any(role in held for held in self._roles.values())
