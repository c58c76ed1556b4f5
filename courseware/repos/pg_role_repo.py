"""PostgreSQL implementation of RoleRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from courseware.db.tables import UserRoleRow
from courseware.repos.content_repo import RepoError


class PgRoleRepo:
    """Reads user_roles directly, bypassing any per-caller row filtering."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def roles_for(self, user_id: UUID) -> frozenset[str]:
        stmt = select(UserRoleRow.role).where(UserRoleRow.user_id == user_id)
        try:
            async with self._session_factory() as session:
                return frozenset((await session.execute(stmt)).scalars().all())
        except SQLAlchemyError as e:
            raise RepoError(str(e)) from e

    async def role_exists(self, role: str) -> bool:
        stmt = select(UserRoleRow.user_id).where(UserRoleRow.role == role).limit(1)
        try:
            async with self._session_factory() as session:
                return (await session.execute(stmt)).first() is not None
        except SQLAlchemyError as e:
            raise RepoError(str(e)) from e

    async def grant(self, user_id: UUID, role: str) -> None:
        stmt = (
            insert(UserRoleRow)
            .values(user_id=user_id, role=role)
            .on_conflict_do_nothing(index_elements=["user_id", "role"])
        )
        try:
            async with self._session_factory.begin() as session:
                await session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepoError(str(e)) from e
