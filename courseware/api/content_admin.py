"""Privileged deletion endpoints.

  POST /v1/delete-video           {"videoId": uuid}
  POST /v1/delete-course          {"courseId": uuid}
  POST /v1/delete-storage-object  {"bucket": str, "path": str}

Handlers only parse the body, resolve the caller and hand off to
ContentAdmin; every status other than 200 comes from an exception mapped
in main.py.  Body validation happens before ContentAdmin is called, so a
malformed id never reaches the data layer.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from courseware.api.dependencies import get_content_admin, require_caller
from courseware.api.ratelimit import DELETE_LIMIT, require_rate_limit
from courseware.services.content_admin import ContentAdmin

router = APIRouter(prefix="/v1", tags=["content-admin"])


class DeleteVideoIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    video_id: UUID = Field(alias="videoId")


class DeleteCourseIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    course_id: UUID = Field(alias="courseId")


class DeleteStorageObjectIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    bucket: str = Field(min_length=1)
    path: str = Field(min_length=1)


class OkOut(BaseModel):
    ok: bool = True


@router.post(
    "/delete-video",
    response_model=OkOut,
    dependencies=[Depends(require_rate_limit(DELETE_LIMIT))],
)
async def delete_video(
    body: DeleteVideoIn,
    caller_id: Annotated[UUID, Depends(require_caller)],
    admin: Annotated[ContentAdmin, Depends(get_content_admin)],
) -> OkOut:
    await admin.delete_video(caller_id, body.video_id)
    return OkOut()


@router.post(
    "/delete-course",
    response_model=OkOut,
    dependencies=[Depends(require_rate_limit(DELETE_LIMIT))],
)
async def delete_course(
    body: DeleteCourseIn,
    caller_id: Annotated[UUID, Depends(require_caller)],
    admin: Annotated[ContentAdmin, Depends(get_content_admin)],
) -> OkOut:
    await admin.delete_course(caller_id, body.course_id)
    return OkOut()


@router.post(
    "/delete-storage-object",
    response_model=OkOut,
    dependencies=[Depends(require_rate_limit(DELETE_LIMIT))],
)
async def delete_storage_object(
    body: DeleteStorageObjectIn,
    caller_id: Annotated[UUID, Depends(require_caller)],
    admin: Annotated[ContentAdmin, Depends(get_content_admin)],
) -> OkOut:
    """Discard one of the caller's own uploads (path "<user_id>/...")."""
    await admin.delete_storage_object(caller_id, body.bucket, body.path)
    return OkOut()
