"""Learner checkpoint endpoints.

  POST /v1/quiz-attempt    {"eventId": uuid, "selectedIndex": int}
  POST /v1/event-complete  {"eventId": uuid}   (token optional)
  POST /v1/exam-launch     {"eventId": uuid}
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from courseware.api.content_admin import OkOut
from courseware.api.dependencies import (
    get_checkpoint_service,
    optional_caller,
    require_caller,
)
from courseware.api.ratelimit import require_rate_limit
from courseware.services.checkpoint_service import CheckpointService

router = APIRouter(
    prefix="/v1",
    tags=["checkpoints"],
    dependencies=[Depends(require_rate_limit())],
)


class EventIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: UUID = Field(alias="eventId")


class QuizAttemptIn(EventIn):
    selected_index: int = Field(alias="selectedIndex", ge=0)


class QuizAttemptOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    is_correct: bool = Field(alias="isCorrect")


@router.post("/quiz-attempt", response_model=QuizAttemptOut)
async def quiz_attempt(
    body: QuizAttemptIn,
    caller_id: Annotated[UUID, Depends(require_caller)],
    service: Annotated[CheckpointService, Depends(get_checkpoint_service)],
) -> QuizAttemptOut:
    is_correct = await service.submit_quiz_attempt(
        caller_id, body.event_id, body.selected_index
    )
    return QuizAttemptOut(is_correct=is_correct)


@router.post("/event-complete", response_model=OkOut)
async def event_complete(
    body: EventIn,
    caller_id: Annotated[UUID | None, Depends(optional_caller)],
    service: Annotated[CheckpointService, Depends(get_checkpoint_service)],
) -> OkOut:
    await service.complete_event(caller_id, body.event_id)
    return OkOut()


@router.post("/exam-launch", response_model=OkOut)
async def exam_launch(
    body: EventIn,
    caller_id: Annotated[UUID, Depends(require_caller)],
    service: Annotated[CheckpointService, Depends(get_checkpoint_service)],
) -> OkOut:
    await service.record_exam_launch(caller_id, body.event_id)
    return OkOut()
