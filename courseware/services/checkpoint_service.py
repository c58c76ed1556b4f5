"""Learner-side checkpoint operations.

These write the rows that video deletion later cascades through: quiz
attempts, event completions, exam launches and the per-video progress
mark that unlocks forward seeking.  They run against the privileged
repository too (learners cannot write progress directly), so each one
re-checks that the caller may see the video.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Awaitable
from typing import TypeVar
from uuid import UUID

from courseware.models.course import Video
from courseware.models.principal import Principal
from courseware.models.timeline import (
    ExamLaunch,
    Quiz,
    QuizAttempt,
    TimelineEvent,
    VideoEventCompletion,
)
from courseware.repos.content_repo import ContentRepo, RepoError
from courseware.repos.role_repo import RoleRepo
from courseware.services.authorization import can_view_video
from courseware.services.errors import (
    AuthorizationError,
    DependencyFailure,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> int:
    return int(datetime.datetime.now(datetime.UTC).timestamp())


class CheckpointService:
    def __init__(self, content: ContentRepo, roles: RoleRepo) -> None:
        self._content = content
        self._roles = roles

    async def submit_quiz_attempt(
        self, caller_id: UUID, event_id: UUID, selected_index: int
    ) -> bool:
        """Grade an answer, log it, and unlock progress when correct."""
        event = await self._fetch_event(event_id)
        quiz = await self._fetch_quiz(event.id)
        await self._check_access(caller_id, event)

        is_correct = selected_index == quiz.correct_index
        await self._run(
            "record_attempt",
            self._content.add_quiz_attempt(
                QuizAttempt.new(
                    user_id=caller_id,
                    event_id=event.id,
                    selected_index=selected_index,
                    is_correct=is_correct,
                    attempted_at=_now(),
                )
            ),
        )
        if is_correct:
            await self._pass_checkpoint(caller_id, event)

        logger.info(
            "Quiz attempt user=%s event=%s correct=%s", caller_id, event.id, is_correct
        )
        return is_correct

    async def complete_event(self, caller_id: UUID | None, event_id: UUID) -> None:
        """Mark a simulation or exam checkpoint as passed.

        Anonymous viewers of published videos may pass checkpoints too, but
        there is nothing to persist for them.
        """
        event = await self._fetch_event(event_id)
        if event.type == "quiz":
            raise ValidationError("Use quiz-attempt for quiz events")
        await self._check_access(caller_id, event)

        if caller_id is None:
            return
        await self._pass_checkpoint(caller_id, event)
        logger.info("Event completed user=%s event=%s", caller_id, event.id)

    async def record_exam_launch(self, caller_id: UUID, event_id: UUID) -> None:
        event = await self._fetch_event(event_id)
        if event.type != "exam":
            raise ValidationError("Event is not an exam")
        await self._check_access(caller_id, event)

        await self._run(
            "record_exam_launch",
            self._content.add_exam_launch(
                ExamLaunch.new(user_id=caller_id, event_id=event.id, launched_at=_now())
            ),
        )
        logger.info("Exam launched user=%s event=%s", caller_id, event.id)

    # --- helpers ---

    async def _pass_checkpoint(self, caller_id: UUID, event: TimelineEvent) -> None:
        inserted = await self._run(
            "record_completion",
            self._content.add_completion(
                VideoEventCompletion.new(
                    user_id=caller_id, event_id=event.id, completed_at=_now()
                )
            ),
        )
        unlocked = await self._run(
            "unlock_progress",
            self._content.unlock_progress(caller_id, event.video_id, event.at_seconds),
        )
        logger.debug(
            "Checkpoint passed user=%s event=%s new_completion=%s unlocked_until=%d",
            caller_id,
            event.id,
            inserted,
            unlocked,
        )

    async def _fetch_event(self, event_id: UUID) -> TimelineEvent:
        event = await self._run("fetch_event", self._content.get_event(event_id))
        if event is None:
            raise NotFoundError("Event not found")
        return event

    async def _fetch_quiz(self, event_id: UUID) -> Quiz:
        quiz = await self._run("fetch_quiz", self._content.get_quiz_for_event(event_id))
        if quiz is None:
            raise NotFoundError("Quiz not found")
        return quiz

    async def _check_access(self, caller_id: UUID | None, event: TimelineEvent) -> None:
        video: Video | None = await self._run(
            "fetch_video", self._content.get_video(event.video_id)
        )
        if video is None:
            raise NotFoundError("Video not found")
        caller: Principal | None = None
        if caller_id is not None:
            roles: frozenset[str] = frozenset()
            if not video.published:
                roles = await self._run("fetch_roles", self._roles.roles_for(caller_id))
            caller = Principal(caller_id, roles)
        if not can_view_video(caller, video):
            logger.warning("Checkpoint access denied user=%s video=%s", caller_id, video.id)
            raise AuthorizationError()

    @staticmethod
    async def _run(step: str, op: Awaitable[T]) -> T:
        try:
            return await op
        except RepoError as e:
            logger.error("Checkpoint step failed step=%s: %s", step, e)
            raise DependencyFailure(step, e) from e
