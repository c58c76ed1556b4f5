"""POST /v1/bootstrap-admin  {"token": str}

Promotes the signed-in caller to admin when the token matches
ADMIN_BOOTSTRAP_TOKEN and no admin exists yet.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from courseware.api.content_admin import OkOut
from courseware.api.dependencies import get_admin_bootstrap, require_caller
from courseware.api.ratelimit import DELETE_LIMIT, require_rate_limit
from courseware.services.admin_bootstrap import AdminBootstrap

router = APIRouter(prefix="/v1", tags=["admin"])


class BootstrapAdminIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    token: str = Field(min_length=1, max_length=256)


@router.post(
    "/bootstrap-admin",
    response_model=OkOut,
    dependencies=[Depends(require_rate_limit(DELETE_LIMIT))],
)
async def bootstrap_admin(
    body: BootstrapAdminIn,
    caller_id: Annotated[UUID, Depends(require_caller)],
    bootstrap: Annotated[AdminBootstrap, Depends(get_admin_bootstrap)],
) -> OkOut:
    await bootstrap.bootstrap(caller_id, body.token)
    return OkOut()
