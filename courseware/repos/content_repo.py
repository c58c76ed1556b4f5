"""Privileged content repository.

"Privileged" means no per-caller filtering happens here: every method sees
and mutates every row.  Callers must authorize first; in this codebase the
only callers are ContentAdmin and CheckpointService, which do.

Delete methods return the number of rows removed and succeed with 0 when
nothing matches, which is what makes a repeated cascade a no-op.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from courseware.models.course import Course, Video
from courseware.models.progress import VideoProgress
from courseware.models.timeline import (
    ExamLaunch,
    Quiz,
    QuizAttempt,
    TimelineEvent,
    VideoEventCompletion,
)


class RepoError(Exception):
    """A data-layer call failed (connection, constraint, timeout...)."""


class ContentRepo(Protocol):
    # --- reads ---
    async def get_course(self, course_id: UUID) -> Course | None: ...
    async def get_video(self, video_id: UUID) -> Video | None: ...
    async def list_videos_for_course(self, course_id: UUID) -> list[Video]: ...
    async def get_event(self, event_id: UUID) -> TimelineEvent | None: ...
    async def list_event_ids_for_video(self, video_id: UUID) -> list[UUID]: ...
    async def get_quiz_for_event(self, event_id: UUID) -> Quiz | None: ...
    async def get_progress(
        self, user_id: UUID, video_id: UUID
    ) -> VideoProgress | None: ...

    # --- writes ---
    async def add_course(self, course: Course) -> None: ...
    async def add_video(self, video: Video) -> None: ...
    async def add_event(self, event: TimelineEvent) -> None: ...
    async def add_quiz(self, quiz: Quiz) -> None: ...
    async def add_quiz_attempt(self, attempt: QuizAttempt) -> None: ...
    async def add_exam_launch(self, launch: ExamLaunch) -> None: ...
    async def add_completion(self, completion: VideoEventCompletion) -> bool: ...
    async def unlock_progress(
        self, user_id: UUID, video_id: UUID, at_seconds: int
    ) -> int: ...

    # --- cascade deletes ---
    async def delete_quizzes_for_events(self, event_ids: Collection[UUID]) -> int: ...
    async def delete_quiz_attempts_for_events(
        self, event_ids: Collection[UUID]
    ) -> int: ...
    async def delete_exam_launches_for_events(
        self, event_ids: Collection[UUID]
    ) -> int: ...
    async def delete_completions_for_events(
        self, event_ids: Collection[UUID]
    ) -> int: ...
    async def delete_events_for_video(self, video_id: UUID) -> int: ...
    async def delete_progress_for_video(self, video_id: UUID) -> int: ...
    async def delete_video(self, video_id: UUID) -> int: ...
    async def delete_course(self, course_id: UUID) -> int: ...


class InMemoryContentRepo:
    """Dict-backed repo for dev and tests.

    Enforces the same uniqueness and foreign-key rules as the schema so
    tests catch out-of-order deletes: removing a parent that still has
    children raises RepoError.
    """

    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._videos: dict[UUID, Video] = {}
        self._events: dict[UUID, TimelineEvent] = {}
        self._quizzes: dict[UUID, Quiz] = {}  # key: event_id
        self._attempts: list[QuizAttempt] = []
        self._launches: list[ExamLaunch] = []
        self._completions: dict[tuple[UUID, UUID], VideoEventCompletion] = {}
        self._progress: dict[tuple[UUID, UUID], VideoProgress] = {}

    def clear(self) -> None:
        for store in (
            self._courses,
            self._videos,
            self._events,
            self._quizzes,
            self._completions,
            self._progress,
        ):
            store.clear()
        self._attempts.clear()
        self._launches.clear()

    # --- reads ---

    async def get_course(self, course_id: UUID) -> Course | None:
        return self._courses.get(course_id)

    async def get_video(self, video_id: UUID) -> Video | None:
        return self._videos.get(video_id)

    async def list_videos_for_course(self, course_id: UUID) -> list[Video]:
        return [v for v in self._videos.values() if v.course_id == course_id]

    async def get_event(self, event_id: UUID) -> TimelineEvent | None:
        return self._events.get(event_id)

    async def list_event_ids_for_video(self, video_id: UUID) -> list[UUID]:
        return [e.id for e in self._events.values() if e.video_id == video_id]

    async def get_quiz_for_event(self, event_id: UUID) -> Quiz | None:
        return self._quizzes.get(event_id)

    async def get_progress(self, user_id: UUID, video_id: UUID) -> VideoProgress | None:
        return self._progress.get((user_id, video_id))

    # Snapshot helpers for tests: every row that still points at an event.
    def rows_referencing_events(self, event_ids: Collection[UUID]) -> int:
        ids = set(event_ids)
        return (
            sum(1 for e in self._events.values() if e.id in ids)
            + sum(1 for q in self._quizzes.values() if q.event_id in ids)
            + sum(1 for a in self._attempts if a.event_id in ids)
            + sum(1 for la in self._launches if la.event_id in ids)
            + sum(1 for c in self._completions.values() if c.event_id in ids)
        )

    def progress_rows_for_video(self, video_id: UUID) -> int:
        return sum(1 for p in self._progress.values() if p.video_id == video_id)

    # --- writes ---

    async def add_course(self, course: Course) -> None:
        if course.id in self._courses:
            raise RepoError("course already exists")
        self._courses[course.id] = course

    async def add_video(self, video: Video) -> None:
        if video.course_id not in self._courses:
            raise RepoError("video references a missing course")
        self._videos[video.id] = video

    async def add_event(self, event: TimelineEvent) -> None:
        if event.video_id not in self._videos:
            raise RepoError("event references a missing video")
        self._events[event.id] = event

    async def add_quiz(self, quiz: Quiz) -> None:
        self._require_event(quiz.event_id)
        if quiz.event_id in self._quizzes:
            raise RepoError("event already has a quiz")
        self._quizzes[quiz.event_id] = quiz

    async def add_quiz_attempt(self, attempt: QuizAttempt) -> None:
        self._require_event(attempt.event_id)
        self._attempts.append(attempt)

    async def add_exam_launch(self, launch: ExamLaunch) -> None:
        self._require_event(launch.event_id)
        self._launches.append(launch)

    async def add_completion(self, completion: VideoEventCompletion) -> bool:
        self._require_event(completion.event_id)
        key = (completion.user_id, completion.event_id)
        if key in self._completions:
            return False
        self._completions[key] = completion
        return True

    async def unlock_progress(
        self, user_id: UUID, video_id: UUID, at_seconds: int
    ) -> int:
        if video_id not in self._videos:
            raise RepoError("progress references a missing video")
        key = (user_id, video_id)
        existing = self._progress.get(key)
        if existing is None:
            self._progress[key] = VideoProgress.new(
                user_id=user_id, video_id=video_id, unlocked_until_seconds=at_seconds
            )
            return at_seconds
        unlocked = max(existing.unlocked_until_seconds, at_seconds)
        self._progress[key] = replace(existing, unlocked_until_seconds=unlocked)
        return unlocked

    def _require_event(self, event_id: UUID) -> None:
        if event_id not in self._events:
            raise RepoError("row references a missing timeline event")

    # --- cascade deletes ---

    async def delete_quizzes_for_events(self, event_ids: Collection[UUID]) -> int:
        ids = set(event_ids)
        doomed = [k for k in self._quizzes if k in ids]
        for k in doomed:
            del self._quizzes[k]
        return len(doomed)

    async def delete_quiz_attempts_for_events(self, event_ids: Collection[UUID]) -> int:
        ids = set(event_ids)
        before = len(self._attempts)
        self._attempts[:] = [a for a in self._attempts if a.event_id not in ids]
        return before - len(self._attempts)

    async def delete_exam_launches_for_events(self, event_ids: Collection[UUID]) -> int:
        ids = set(event_ids)
        before = len(self._launches)
        self._launches[:] = [la for la in self._launches if la.event_id not in ids]
        return before - len(self._launches)

    async def delete_completions_for_events(self, event_ids: Collection[UUID]) -> int:
        ids = set(event_ids)
        doomed = [k for k, c in self._completions.items() if c.event_id in ids]
        for k in doomed:
            del self._completions[k]
        return len(doomed)

    async def delete_events_for_video(self, video_id: UUID) -> int:
        doomed = [e.id for e in self._events.values() if e.video_id == video_id]
        if self.rows_referencing_events(doomed) > len(doomed):
            raise RepoError("timeline events are still referenced")
        for event_id in doomed:
            del self._events[event_id]
        return len(doomed)

    async def delete_progress_for_video(self, video_id: UUID) -> int:
        doomed = [k for k, p in self._progress.items() if p.video_id == video_id]
        for k in doomed:
            del self._progress[k]
        return len(doomed)

    async def delete_video(self, video_id: UUID) -> int:
        if video_id not in self._videos:
            return 0
        if any(e.video_id == video_id for e in self._events.values()):
            raise RepoError("video still has timeline events")
        if self.progress_rows_for_video(video_id):
            raise RepoError("video still has progress rows")
        del self._videos[video_id]
        return 1

    async def delete_course(self, course_id: UUID) -> int:
        if course_id not in self._courses:
            return 0
        if any(v.course_id == course_id for v in self._videos.values()):
            raise RepoError("course still has videos")
        del self._courses[course_id]
        return 1
