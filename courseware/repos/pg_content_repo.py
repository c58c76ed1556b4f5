"""PostgreSQL implementation of ContentRepo.

Every method runs in its own transaction (session_factory.begin()), so a
completed cascade step is committed before the next one starts.  Driver
errors surface as RepoError; nothing SQLAlchemy-specific leaks upward.
"""

from __future__ import annotations

from collections.abc import Collection
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from courseware.db.tables import (
    CourseRow,
    ExamLaunchRow,
    QuizAttemptRow,
    QuizRow,
    TimelineEventRow,
    VideoEventCompletionRow,
    VideoProgressRow,
    VideoRow,
)
from courseware.models.course import Course, Video
from courseware.models.progress import VideoProgress
from courseware.models.timeline import (
    ExamLaunch,
    Quiz,
    QuizAttempt,
    TimelineEvent,
    VideoEventCompletion,
)
from courseware.repos.content_repo import RepoError


class PgContentRepo:
    """Satisfies the ContentRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # --- plumbing ---

    async def _scalar(self, stmt: Any) -> Any:
        try:
            async with self._session_factory() as session:
                return (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepoError(str(e)) from e

    async def _scalars(self, stmt: Any) -> list[Any]:
        try:
            async with self._session_factory() as session:
                return list((await session.execute(stmt)).scalars().all())
        except SQLAlchemyError as e:
            raise RepoError(str(e)) from e

    async def _execute(self, stmt: Any) -> Any:
        try:
            async with self._session_factory.begin() as session:
                return await session.execute(stmt)
        except SQLAlchemyError as e:
            raise RepoError(str(e)) from e

    async def _add(self, row: Any) -> None:
        try:
            async with self._session_factory.begin() as session:
                session.add(row)
        except SQLAlchemyError as e:
            raise RepoError(str(e)) from e

    async def _delete(self, stmt: Any) -> int:
        result = await self._execute(stmt)
        return result.rowcount or 0

    # --- reads ---

    async def get_course(self, course_id: UUID) -> Course | None:
        row = await self._scalar(select(CourseRow).where(CourseRow.id == course_id))
        return None if row is None else _row_to_course(row)

    async def get_video(self, video_id: UUID) -> Video | None:
        row = await self._scalar(select(VideoRow).where(VideoRow.id == video_id))
        return None if row is None else _row_to_video(row)

    async def list_videos_for_course(self, course_id: UUID) -> list[Video]:
        rows = await self._scalars(
            select(VideoRow).where(VideoRow.course_id == course_id)
        )
        return [_row_to_video(r) for r in rows]

    async def get_event(self, event_id: UUID) -> TimelineEvent | None:
        row = await self._scalar(
            select(TimelineEventRow).where(TimelineEventRow.id == event_id)
        )
        return None if row is None else _row_to_event(row)

    async def list_event_ids_for_video(self, video_id: UUID) -> list[UUID]:
        return await self._scalars(
            select(TimelineEventRow.id).where(TimelineEventRow.video_id == video_id)
        )

    async def get_quiz_for_event(self, event_id: UUID) -> Quiz | None:
        row = await self._scalar(select(QuizRow).where(QuizRow.event_id == event_id))
        return None if row is None else _row_to_quiz(row)

    async def get_progress(self, user_id: UUID, video_id: UUID) -> VideoProgress | None:
        row = await self._scalar(
            select(VideoProgressRow).where(
                VideoProgressRow.user_id == user_id,
                VideoProgressRow.video_id == video_id,
            )
        )
        if row is None:
            return None
        return VideoProgress(
            id=row.id,
            user_id=row.user_id,
            video_id=row.video_id,
            unlocked_until_seconds=row.unlocked_until_seconds,
        )

    # --- writes ---

    async def add_course(self, course: Course) -> None:
        await self._add(
            CourseRow(
                id=course.id,
                owner_id=course.owner_id,
                title=course.title,
                description=course.description,
                published=course.published,
                tags=list(course.tags),
                thumbnail_url=course.thumbnail_url,
            )
        )

    async def add_video(self, video: Video) -> None:
        await self._add(
            VideoRow(
                id=video.id,
                course_id=video.course_id,
                owner_id=video.owner_id,
                title=video.title,
                video_url=video.video_url,
                published=video.published,
            )
        )

    async def add_event(self, event: TimelineEvent) -> None:
        await self._add(
            TimelineEventRow(
                id=event.id,
                video_id=event.video_id,
                type=event.type,
                at_seconds=event.at_seconds,
                required=event.required,
                title=event.title,
                payload=dict(event.payload),
            )
        )

    async def add_quiz(self, quiz: Quiz) -> None:
        await self._add(
            QuizRow(
                id=quiz.id,
                event_id=quiz.event_id,
                question=quiz.question,
                options=list(quiz.options),
                correct_index=quiz.correct_index,
            )
        )

    async def add_quiz_attempt(self, attempt: QuizAttempt) -> None:
        await self._add(
            QuizAttemptRow(
                id=attempt.id,
                user_id=attempt.user_id,
                event_id=attempt.event_id,
                selected_index=attempt.selected_index,
                is_correct=attempt.is_correct,
                attempted_at=attempt.attempted_at,
            )
        )

    async def add_exam_launch(self, launch: ExamLaunch) -> None:
        await self._add(
            ExamLaunchRow(
                id=launch.id,
                user_id=launch.user_id,
                event_id=launch.event_id,
                launched_at=launch.launched_at,
            )
        )

    async def add_completion(self, completion: VideoEventCompletion) -> bool:
        stmt = (
            insert(VideoEventCompletionRow)
            .values(
                id=completion.id,
                user_id=completion.user_id,
                event_id=completion.event_id,
                completed_at=completion.completed_at,
            )
            .on_conflict_do_nothing(index_elements=["user_id", "event_id"])
        )
        result = await self._execute(stmt)
        return bool(result.rowcount)

    async def unlock_progress(
        self, user_id: UUID, video_id: UUID, at_seconds: int
    ) -> int:
        # Single upsert so concurrent unlocks can only move the mark forward.
        stmt = insert(VideoProgressRow).values(
            user_id=user_id, video_id=video_id, unlocked_until_seconds=at_seconds
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "video_id"],
            set_={
                "unlocked_until_seconds": func.greatest(
                    VideoProgressRow.unlocked_until_seconds,
                    stmt.excluded.unlocked_until_seconds,
                )
            },
        ).returning(VideoProgressRow.unlocked_until_seconds)
        result = await self._execute(stmt)
        return int(result.scalar_one())

    # --- cascade deletes ---

    async def delete_quizzes_for_events(self, event_ids: Collection[UUID]) -> int:
        return await self._delete(
            delete(QuizRow).where(QuizRow.event_id.in_(list(event_ids)))
        )

    async def delete_quiz_attempts_for_events(self, event_ids: Collection[UUID]) -> int:
        return await self._delete(
            delete(QuizAttemptRow).where(QuizAttemptRow.event_id.in_(list(event_ids)))
        )

    async def delete_exam_launches_for_events(self, event_ids: Collection[UUID]) -> int:
        return await self._delete(
            delete(ExamLaunchRow).where(ExamLaunchRow.event_id.in_(list(event_ids)))
        )

    async def delete_completions_for_events(self, event_ids: Collection[UUID]) -> int:
        return await self._delete(
            delete(VideoEventCompletionRow).where(
                VideoEventCompletionRow.event_id.in_(list(event_ids))
            )
        )

    async def delete_events_for_video(self, video_id: UUID) -> int:
        return await self._delete(
            delete(TimelineEventRow).where(TimelineEventRow.video_id == video_id)
        )

    async def delete_progress_for_video(self, video_id: UUID) -> int:
        return await self._delete(
            delete(VideoProgressRow).where(VideoProgressRow.video_id == video_id)
        )

    async def delete_video(self, video_id: UUID) -> int:
        return await self._delete(delete(VideoRow).where(VideoRow.id == video_id))

    async def delete_course(self, course_id: UUID) -> int:
        return await self._delete(delete(CourseRow).where(CourseRow.id == course_id))


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        owner_id=row.owner_id,
        title=row.title,
        description=row.description,
        published=row.published,
        tags=tuple(row.tags) if row.tags else (),
        thumbnail_url=row.thumbnail_url,
    )


def _row_to_video(row: VideoRow) -> Video:
    return Video(
        id=row.id,
        course_id=row.course_id,
        owner_id=row.owner_id,
        title=row.title,
        video_url=row.video_url,
        published=row.published,
    )


def _row_to_event(row: TimelineEventRow) -> TimelineEvent:
    return TimelineEvent(
        id=row.id,
        video_id=row.video_id,
        type=row.type,  # type: ignore[arg-type]
        at_seconds=row.at_seconds,
        required=row.required,
        title=row.title,
        payload=dict(row.payload or {}),
    )


def _row_to_quiz(row: QuizRow) -> Quiz:
    return Quiz(
        id=row.id,
        event_id=row.event_id,
        question=row.question,
        options=tuple(row.options),
        correct_index=row.correct_index,
    )
