"""Shared FastAPI dependencies: caller identity and the service objects.

Backends are picked once at import from SETTINGS, the same way the rate
limiter picks Redis or memory: PostgreSQL repositories when DATABASE_URL is
set, the hosted storage API when STORAGE_URL and STORAGE_SERVICE_KEY are
set, in-memory stand-ins otherwise.  Tests use the in-memory ones and reset
them between cases.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from courseware.core.config import SETTINGS
from courseware.db.engine import async_session_factory
from courseware.repos.content_repo import ContentRepo, InMemoryContentRepo
from courseware.repos.pg_content_repo import PgContentRepo
from courseware.repos.pg_role_repo import PgRoleRepo
from courseware.repos.role_repo import InMemoryRoleRepo, RoleRepo
from courseware.services import token_service
from courseware.services.admin_bootstrap import AdminBootstrap
from courseware.services.checkpoint_service import CheckpointService
from courseware.services.content_admin import ContentAdmin
from courseware.services.errors import AuthenticationError
from courseware.services.object_storage import (
    HttpObjectStorage,
    InMemoryObjectStorage,
    ObjectStorage,
)

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# ---------------------------------------------------------------------------
# Module-level singletons
# ---------------------------------------------------------------------------

content_repo: ContentRepo
role_repo: RoleRepo
if async_session_factory is not None:
    content_repo = PgContentRepo(async_session_factory)
    role_repo = PgRoleRepo(async_session_factory)
else:
    content_repo = InMemoryContentRepo()
    role_repo = InMemoryRoleRepo()

object_storage: ObjectStorage
if SETTINGS.storage_configured:
    object_storage = HttpObjectStorage(
        SETTINGS.storage_url,  # type: ignore[arg-type]
        SETTINGS.storage_service_key,  # type: ignore[arg-type]
    )
else:
    object_storage = InMemoryObjectStorage()


def get_content_admin() -> ContentAdmin:
    return ContentAdmin(
        content_repo,
        role_repo,
        object_storage,
        videos_bucket=SETTINGS.videos_bucket,
        thumbnails_bucket=SETTINGS.thumbnails_bucket,
    )


def get_checkpoint_service() -> CheckpointService:
    return CheckpointService(content_repo, role_repo)


def get_admin_bootstrap() -> AdminBootstrap:
    return AdminBootstrap(role_repo, SETTINGS.admin_bootstrap_token)


# ---------------------------------------------------------------------------
# Caller identity
# ---------------------------------------------------------------------------


def _verify(credentials: HTTPAuthorizationCredentials) -> UUID:
    try:
        claims = token_service.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise AuthenticationError("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise AuthenticationError("Invalid token") from None

    try:
        user_id = UUID(str(claims["sub"]))
    except ValueError:
        logger.warning("Token rejected: sub is not a user id")
        raise AuthenticationError("Invalid token") from None

    logger.debug("Token validated for user=%s", user_id)
    return user_id


def require_caller(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> UUID:
    """Verified caller id from the bearer token, or 401.

    Only identity is taken from the token.  Roles are looked up in the role
    store by whoever needs them.
    """
    if credentials is None:
        raise AuthenticationError("Missing bearer token")
    return _verify(credentials)


def optional_caller(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> UUID | None:
    """Like require_caller, but anonymous requests yield None.

    A token that is present but invalid is still a 401.
    """
    if credentials is None:
        return None
    return _verify(credentials)
