"""One-time promotion of the first admin.

Every delete gate depends on the admin role, and nothing else in the
service can grant it.  A fresh deployment sets ADMIN_BOOTSTRAP_TOKEN; the
first signed-in caller who presents it becomes admin.  Once any admin
exists the endpoint only answers 409, so a leaked token is useless after
setup.  Further admins are granted directly in the role store.
"""

from __future__ import annotations

import hmac
import logging
from uuid import UUID

from courseware.models.principal import ADMIN
from courseware.repos.content_repo import RepoError
from courseware.repos.role_repo import RoleRepo
from courseware.services.errors import (
    AuthorizationError,
    ConflictError,
    DependencyFailure,
    ServiceMisconfigured,
)

logger = logging.getLogger(__name__)


class AdminBootstrap:
    def __init__(self, roles: RoleRepo, bootstrap_token: str | None) -> None:
        self._roles = roles
        self._token = bootstrap_token

    async def bootstrap(self, caller_id: UUID, presented: str) -> None:
        if not self._token:
            logger.error("Admin bootstrap called but ADMIN_BOOTSTRAP_TOKEN is unset")
            raise ServiceMisconfigured()

        if not hmac.compare_digest(presented.encode(), self._token.encode()):
            logger.warning("Admin bootstrap rejected: wrong token user=%s", caller_id)
            raise AuthorizationError("Invalid bootstrap token")

        try:
            if await self._roles.role_exists(ADMIN):
                raise ConflictError("Admin already initialized")
            # Two racing callers may both get here; grant is an upsert, so
            # the loser's insert is a no-op rather than a failure.
            await self._roles.grant(caller_id, ADMIN)
        except RepoError as e:
            raise DependencyFailure("grant_admin", e) from e

        logger.info("First admin bootstrapped user=%s", caller_id)
