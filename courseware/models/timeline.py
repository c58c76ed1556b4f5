from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal
from uuid import UUID, uuid4

EventType = Literal["quiz", "simulation", "exam"]
EVENT_TYPES: tuple[str, ...] = ("quiz", "simulation", "exam")


@dataclass(frozen=True, slots=True)
class TimelineEvent:
    """A checkpoint at a fixed offset in a video.

    payload is type-specific: the exam URL for exam events, the asset URL
    for simulations.  Quiz content lives in its own Quiz row.
    """

    id: UUID
    video_id: UUID
    type: EventType
    at_seconds: int
    required: bool = True
    title: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def new(
        *,
        video_id: UUID,
        type: EventType,
        at_seconds: int,
        required: bool = True,
        title: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> TimelineEvent:
        if type not in EVENT_TYPES:
            raise ValueError(f"unknown event type {type!r}")
        return TimelineEvent(
            id=uuid4(),
            video_id=video_id,
            type=type,
            at_seconds=at_seconds,
            required=required,
            title=title,
            payload=dict(payload or {}),
        )


@dataclass(frozen=True, slots=True)
class Quiz:
    id: UUID
    event_id: UUID
    question: str
    options: tuple[str, ...]
    correct_index: int

    @staticmethod
    def new(
        *, event_id: UUID, question: str, options: tuple[str, ...], correct_index: int
    ) -> Quiz:
        return Quiz(
            id=uuid4(),
            event_id=event_id,
            question=question,
            options=options,
            correct_index=correct_index,
        )


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    """Append-only log entry; one per submitted answer."""

    id: UUID
    user_id: UUID
    event_id: UUID
    selected_index: int
    is_correct: bool
    attempted_at: int

    @staticmethod
    def new(
        *,
        user_id: UUID,
        event_id: UUID,
        selected_index: int,
        is_correct: bool,
        attempted_at: int,
    ) -> QuizAttempt:
        return QuizAttempt(
            id=uuid4(),
            user_id=user_id,
            event_id=event_id,
            selected_index=selected_index,
            is_correct=is_correct,
            attempted_at=attempted_at,
        )


@dataclass(frozen=True, slots=True)
class ExamLaunch:
    id: UUID
    user_id: UUID
    event_id: UUID
    launched_at: int

    @staticmethod
    def new(*, user_id: UUID, event_id: UUID, launched_at: int) -> ExamLaunch:
        return ExamLaunch(
            id=uuid4(), user_id=user_id, event_id=event_id, launched_at=launched_at
        )


@dataclass(frozen=True, slots=True)
class VideoEventCompletion:
    """Unique per (user_id, event_id)."""

    id: UUID
    user_id: UUID
    event_id: UUID
    completed_at: int

    @staticmethod
    def new(*, user_id: UUID, event_id: UUID, completed_at: int) -> VideoEventCompletion:
        return VideoEventCompletion(
            id=uuid4(), user_id=user_id, event_id=event_id, completed_at=completed_at
        )
