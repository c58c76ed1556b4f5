"""Authorized entry point for privileged deletions.

ContentAdmin is the only object handlers receive for deleting content.
It owns the CascadeDeleter privately, so the privileged mutations are
reachable only after this class has fetched the resource, fetched the
caller's roles and obtained an ALLOW decision.

Existence is checked before authorization: a missing resource is a 404
for everyone, and a 403 always means "it exists, but not for you".
"""

from __future__ import annotations

import logging
from uuid import UUID

from courseware.models.course import Course, Video
from courseware.models.principal import Principal
from courseware.repos.content_repo import ContentRepo, RepoError
from courseware.repos.role_repo import RoleRepo
from courseware.services.authorization import Decision, authorize_delete
from courseware.services.cascade_service import (
    CascadeDeleter,
    CourseCascadeReport,
    VideoCascadeReport,
)
from courseware.services.errors import (
    AuthorizationError,
    DependencyFailure,
    NotFoundError,
    ValidationError,
)
from courseware.services.object_storage import (
    ObjectStorage,
    StorageError,
    StorageObjectNotFound,
)

logger = logging.getLogger(__name__)


class ContentAdmin:
    def __init__(
        self,
        content: ContentRepo,
        roles: RoleRepo,
        storage: ObjectStorage,
        *,
        videos_bucket: str,
        thumbnails_bucket: str,
    ) -> None:
        self._content = content
        self._roles = roles
        self._storage = storage
        self._videos_bucket = videos_bucket
        self._cascade = CascadeDeleter(
            content,
            storage,
            videos_bucket=videos_bucket,
            thumbnails_bucket=thumbnails_bucket,
        )

    async def delete_video(self, caller_id: UUID, video_id: UUID) -> VideoCascadeReport:
        video = await self._fetch_video(video_id)
        await self._authorize(caller_id, video.owner_id, resource="video")
        logger.info("Deleting video=%s requested by user=%s", video_id, caller_id)
        return await self._cascade.delete_video(video.id, video.video_url)

    async def delete_course(
        self, caller_id: UUID, course_id: UUID
    ) -> CourseCascadeReport:
        course = await self._fetch_course(course_id)
        await self._authorize(caller_id, course.owner_id, resource="course")
        logger.info("Deleting course=%s requested by user=%s", course_id, caller_id)
        return await self._cascade.delete_course(course)

    async def delete_storage_object(self, caller_id: UUID, bucket: str, path: str) -> None:
        """Remove one of the caller's own uploads from the videos bucket.

        Uploads are stored under "<user_id>/...", which is what makes them
        the caller's.  Used by the upload form to discard a file that was
        never attached to a video.
        """
        if bucket != self._videos_bucket:
            raise ValidationError("Unsupported bucket")
        if not path.startswith(f"{caller_id}/") or ".." in path.split("/"):
            logger.warning("Storage delete outside own folder by user=%s", caller_id)
            raise AuthorizationError()

        try:
            await self._storage.remove(bucket, path)
        except StorageObjectNotFound:
            logger.debug("Upload already absent for user=%s", caller_id)
        except StorageError as e:
            logger.error("Upload removal failed for user=%s: %s", caller_id, e)
            raise DependencyFailure("remove_upload", e) from e

    # --- helpers ---

    async def _fetch_video(self, video_id: UUID) -> Video:
        try:
            video = await self._content.get_video(video_id)
        except RepoError as e:
            raise DependencyFailure("fetch_video", e) from e
        if video is None:
            raise NotFoundError("Video not found")
        return video

    async def _fetch_course(self, course_id: UUID) -> Course:
        try:
            course = await self._content.get_course(course_id)
        except RepoError as e:
            raise DependencyFailure("fetch_course", e) from e
        if course is None:
            raise NotFoundError("Course not found")
        return course

    async def _authorize(self, caller_id: UUID, owner_id: UUID, *, resource: str) -> None:
        try:
            roles = await self._roles.roles_for(caller_id)
        except RepoError as e:
            raise DependencyFailure("fetch_roles", e) from e

        caller = Principal(caller_id, roles)
        if authorize_delete(caller, owner_id) is Decision.DENY:
            logger.warning(
                "Delete denied: user=%s roles=%s %s owner=%s",
                caller.user_id,
                sorted(caller.roles),
                resource,
                owner_id,
            )
            raise AuthorizationError()
