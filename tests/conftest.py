from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import courseware` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from courseware.api.dependencies import content_repo, object_storage, role_repo  # noqa: E402
from courseware.api.ratelimit import _rate_limiter  # noqa: E402
from courseware.main import app  # noqa: E402
from courseware.models.course import Course, Video  # noqa: E402
from courseware.models.timeline import (  # noqa: E402
    EventType,
    ExamLaunch,
    Quiz,
    QuizAttempt,
    TimelineEvent,
    VideoEventCompletion,
)
from courseware.repos.content_repo import InMemoryContentRepo  # noqa: E402
from courseware.services import token_service  # noqa: E402
from courseware.services.path_resolver import public_object_url  # noqa: E402

STORAGE_BASE = "https://project.storage.example"
VIDEOS_BUCKET = "videos"
THUMBNAILS_BUCKET = "course-thumbnails"


@pytest.fixture(autouse=True)
def reset_content_state() -> None:
    """Clear the in-memory repos and object store between tests."""
    for store in (content_repo, role_repo, object_storage):
        if hasattr(store, "clear"):
            store.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_rate_limiter() -> None:
    """Clear rate limit buckets so limits don't bleed between tests."""
    if hasattr(_rate_limiter, "clear"):
        _rate_limiter.clear()  # type: ignore[union-attr]


@pytest.fixture(autouse=True)
def reset_dependency_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(user_id: UUID | str | None = None, **kwargs) -> str:
    """Create a token the verifier accepts for the given user id."""
    return token_service.mint_access_token(sub=str(user_id or uuid4()), **kwargs)


def auth(user_id: UUID | str) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(user_id)}"}


def run(coro):
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Seeding helpers (in-memory repos behind the app)
# ---------------------------------------------------------------------------


def make_user(*roles: str) -> UUID:
    user_id = uuid4()
    for role in roles:
        run(role_repo.grant(user_id, role))
    return user_id


def stored_object_url(bucket: str, path: str) -> str:
    """Public URL for an object, registering it in the in-memory store."""
    object_storage.put(bucket, path)  # type: ignore[union-attr]
    return public_object_url(STORAGE_BASE, bucket, path)


def create_course(
    owner_id: UUID,
    *,
    thumbnail_url: str | None = None,
    repo: InMemoryContentRepo | None = None,
) -> Course:
    course = Course.new(owner_id=owner_id, title="Intro", thumbnail_url=thumbnail_url)
    run((repo or content_repo).add_course(course))
    return course


def create_video(
    course: Course,
    *,
    video_url: str | None = None,
    published: bool = False,
    repo: InMemoryContentRepo | None = None,
) -> Video:
    video = Video.new(
        course_id=course.id,
        owner_id=course.owner_id,
        title="Lesson",
        video_url=video_url,
        published=published,
    )
    run((repo or content_repo).add_video(video))
    return video


def create_event(
    video: Video,
    type: EventType,
    *,
    at_seconds: int = 30,
    correct_index: int = 1,
    repo: InMemoryContentRepo | None = None,
) -> TimelineEvent:
    """Add a timeline event; quiz events get their Quiz row too."""
    repo = repo or content_repo
    event = TimelineEvent.new(video_id=video.id, type=type, at_seconds=at_seconds)
    run(repo.add_event(event))
    if type == "quiz":
        run(
            repo.add_quiz(
                Quiz.new(
                    event_id=event.id,
                    question="Which one?",
                    options=("a", "b", "c"),
                    correct_index=correct_index,
                )
            )
        )
    return event


def add_learner_activity(
    video: Video, learner_id: UUID, *, repo: InMemoryContentRepo | None = None
) -> list[UUID]:
    """One quiz event (quiz, two attempts, one completion) and one exam event
    (one launch), plus the learner's progress row.  Returns the event ids."""
    repo = repo or content_repo
    quiz_event = create_event(video, "quiz", at_seconds=60, repo=repo)
    exam_event = create_event(video, "exam", at_seconds=120, repo=repo)

    for selected, correct in ((0, False), (1, True)):
        run(
            repo.add_quiz_attempt(
                QuizAttempt.new(
                    user_id=learner_id,
                    event_id=quiz_event.id,
                    selected_index=selected,
                    is_correct=correct,
                    attempted_at=1_700_000_000,
                )
            )
        )
    run(
        repo.add_completion(
            VideoEventCompletion.new(
                user_id=learner_id, event_id=quiz_event.id, completed_at=1_700_000_000
            )
        )
    )
    run(
        repo.add_exam_launch(
            ExamLaunch.new(
                user_id=learner_id, event_id=exam_event.id, launched_at=1_700_000_100
            )
        )
    )
    run(repo.unlock_progress(learner_id, video.id, 60))
    return [quiz_event.id, exam_event.id]
