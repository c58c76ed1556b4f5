"""Children-first deletion of videos and courses.

Ownership tree (deletion order is bottom-up):

    Course
      └── Video ──────────────┬── VideoProgress
            └── TimelineEvent ├── Quiz
                              ├── QuizAttempt
                              ├── ExamLaunch
                              └── VideoEventCompletion

The database has no ON DELETE CASCADE for this tree because stored media
must be removed alongside the rows, and a database cascade cannot do that.

Rows are deleted before objects.  The data layer and object storage cannot
share a transaction, so the only choice is which one may be left dangling:
an orphaned object is acceptable, a row pointing at nothing is not.

There is no rollback.  Each step deletes "whatever still matches", so a
repeated run (a client retry, or two concurrent requests) re-executes the
finished steps as no-ops and continues from the first unfinished one.

CascadeDeleter assumes the caller has already authorized the operation.
It is constructed only inside ContentAdmin, which does that.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import TypeVar
from uuid import UUID

from courseware.core.metrics import CASCADE_DELETIONS, STORAGE_REMOVALS
from courseware.models.course import Course
from courseware.repos.content_repo import ContentRepo, RepoError
from courseware.services.errors import DependencyFailure
from courseware.services.object_storage import (
    ObjectStorage,
    StorageError,
    StorageObjectNotFound,
)
from courseware.services.path_resolver import resolve_object_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class VideoCascadeReport:
    video_id: UUID
    events_deleted: int
    object_removed: bool


@dataclass(frozen=True, slots=True)
class CourseCascadeReport:
    course_id: UUID
    videos: list[VideoCascadeReport] = field(default_factory=list)
    thumbnail_removed: bool = False


class CascadeDeleter:
    def __init__(
        self,
        content: ContentRepo,
        storage: ObjectStorage,
        *,
        videos_bucket: str,
        thumbnails_bucket: str,
    ) -> None:
        self._content = content
        self._storage = storage
        self._videos_bucket = videos_bucket
        self._thumbnails_bucket = thumbnails_bucket

    async def delete_video(
        self, video_id: UUID, video_url: str | None
    ) -> VideoCascadeReport:
        """Delete one video and everything under it, then its stored file.

        video_url is the URL read from the video row before deletion; once
        the row is gone it is the only record of which object to remove.
        """
        try:
            report = await self._delete_video(video_id, video_url)
        except DependencyFailure:
            CASCADE_DELETIONS.labels(resource="video", outcome="failed").inc()
            raise
        CASCADE_DELETIONS.labels(resource="video", outcome="ok").inc()
        return report

    async def _delete_video(
        self, video_id: UUID, video_url: str | None
    ) -> VideoCascadeReport:
        event_ids = await self._step(
            "list_events", self._content.list_event_ids_for_video(video_id)
        )

        if event_ids:
            # One IN (...) delete per table, regardless of event count.
            await self._step(
                "delete_quizzes", self._content.delete_quizzes_for_events(event_ids)
            )
            await self._step(
                "delete_quiz_attempts",
                self._content.delete_quiz_attempts_for_events(event_ids),
            )
            await self._step(
                "delete_exam_launches",
                self._content.delete_exam_launches_for_events(event_ids),
            )
            await self._step(
                "delete_completions",
                self._content.delete_completions_for_events(event_ids),
            )
            await self._step(
                "delete_events", self._content.delete_events_for_video(video_id)
            )

        await self._step(
            "delete_progress", self._content.delete_progress_for_video(video_id)
        )
        await self._step("delete_video", self._content.delete_video(video_id))

        removed = await self._remove_stored_object(
            video_url, self._videos_bucket, step="remove_video_object"
        )
        logger.info(
            "Video cascade complete video=%s events=%d object_removed=%s",
            video_id,
            len(event_ids),
            removed,
        )
        return VideoCascadeReport(
            video_id=video_id, events_deleted=len(event_ids), object_removed=removed
        )

    async def delete_course(self, course: Course) -> CourseCascadeReport:
        """Delete every video of the course, its thumbnail, then the course row.

        Stops at the first failing video and leaves the course row in place,
        so the course stays visible to its owner and a retry can finish it.
        """
        try:
            report = await self._delete_course(course)
        except DependencyFailure:
            CASCADE_DELETIONS.labels(resource="course", outcome="failed").inc()
            raise
        CASCADE_DELETIONS.labels(resource="course", outcome="ok").inc()
        return report

    async def _delete_course(self, course: Course) -> CourseCascadeReport:
        videos = await self._step(
            "list_videos", self._content.list_videos_for_course(course.id)
        )

        reports = []
        for video in videos:
            reports.append(await self.delete_video(video.id, video.video_url))

        thumbnail_removed = await self._remove_stored_object(
            course.thumbnail_url, self._thumbnails_bucket, step="remove_thumbnail"
        )
        await self._step("delete_course", self._content.delete_course(course.id))

        logger.info(
            "Course cascade complete course=%s videos=%d thumbnail_removed=%s",
            course.id,
            len(reports),
            thumbnail_removed,
        )
        return CourseCascadeReport(
            course_id=course.id, videos=reports, thumbnail_removed=thumbnail_removed
        )

    async def _step(self, step: str, op: Awaitable[T]) -> T:
        try:
            result = await op
        except RepoError as e:
            logger.error("Cascade step failed step=%s: %s", step, e, extra={"step": step})
            raise DependencyFailure(step, e) from e
        logger.debug("Cascade step done step=%s result=%s", step, result)
        return result

    async def _remove_stored_object(
        self, public_url: str | None, bucket: str, *, step: str
    ) -> bool:
        path = resolve_object_path(public_url, bucket)
        if path is None:
            return False

        try:
            await self._storage.remove(bucket, path)
        except StorageObjectNotFound:
            STORAGE_REMOVALS.labels(bucket=bucket, result="absent").inc()
            logger.debug("Stored object already absent bucket=%s", bucket)
            return False
        except StorageError as e:
            STORAGE_REMOVALS.labels(bucket=bucket, result="failed").inc()
            # The rows referencing this object may already be gone, in which
            # case nothing will ever point at it again.  Log the path so it
            # can be cleaned up by hand.
            logger.error(
                "Storage removal failed, object may be orphaned bucket=%s path=%s: %s",
                bucket,
                path,
                e,
                extra={"step": step},
            )
            raise DependencyFailure(step, e) from e

        STORAGE_REMOVALS.labels(bucket=bucket, result="removed").inc()
        return True
