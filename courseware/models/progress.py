from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class VideoProgress:
    """How far a learner may seek in a video.

    Unique per (user_id, video_id).  unlocked_until_seconds only ever grows:
    passing a checkpoint raises it to at least that checkpoint's offset.
    """

    id: UUID
    user_id: UUID
    video_id: UUID
    unlocked_until_seconds: int = 0

    @staticmethod
    def new(
        *, user_id: UUID, video_id: UUID, unlocked_until_seconds: int = 0
    ) -> VideoProgress:
        return VideoProgress(
            id=uuid4(),
            user_id=user_id,
            video_id=video_id,
            unlocked_until_seconds=unlocked_until_seconds,
        )
