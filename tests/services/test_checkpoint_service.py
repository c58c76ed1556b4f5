from __future__ import annotations

from uuid import uuid4

import pytest

from courseware.repos.content_repo import InMemoryContentRepo, RepoError
from courseware.repos.role_repo import InMemoryRoleRepo
from courseware.services.checkpoint_service import CheckpointService
from courseware.services.errors import (
    AuthorizationError,
    DependencyFailure,
    NotFoundError,
    ValidationError,
)
from tests.conftest import create_course, create_event, create_video, run


@pytest.fixture
def repo() -> InMemoryContentRepo:
    return InMemoryContentRepo()


@pytest.fixture
def roles() -> InMemoryRoleRepo:
    return InMemoryRoleRepo()


@pytest.fixture
def service(repo, roles) -> CheckpointService:
    return CheckpointService(repo, roles)


def _published_video(repo):
    course = create_course(uuid4(), repo=repo)
    return create_video(course, published=True, repo=repo)


def test_correct_answer_unlocks_progress(repo, service) -> None:
    video = _published_video(repo)
    event = create_event(video, "quiz", at_seconds=90, correct_index=2, repo=repo)
    learner = uuid4()

    assert run(service.submit_quiz_attempt(learner, event.id, 2)) is True

    progress = run(repo.get_progress(learner, video.id))
    assert progress is not None
    assert progress.unlocked_until_seconds == 90
    assert repo.rows_referencing_events([event.id]) == 4  # event, quiz, attempt, completion


def test_wrong_answer_is_logged_but_unlocks_nothing(repo, service) -> None:
    video = _published_video(repo)
    event = create_event(video, "quiz", correct_index=2, repo=repo)
    learner = uuid4()

    assert run(service.submit_quiz_attempt(learner, event.id, 0)) is False

    assert run(repo.get_progress(learner, video.id)) is None
    assert repo.rows_referencing_events([event.id]) == 3  # event, quiz, attempt


def test_progress_never_moves_backwards(repo, service) -> None:
    video = _published_video(repo)
    late = create_event(video, "simulation", at_seconds=300, repo=repo)
    early = create_event(video, "simulation", at_seconds=60, repo=repo)
    learner = uuid4()

    run(service.complete_event(learner, late.id))
    run(service.complete_event(learner, early.id))

    assert run(repo.get_progress(learner, video.id)).unlocked_until_seconds == 300


def test_completing_twice_keeps_one_completion(repo, service) -> None:
    video = _published_video(repo)
    event = create_event(video, "simulation", repo=repo)
    learner = uuid4()

    run(service.complete_event(learner, event.id))
    run(service.complete_event(learner, event.id))

    assert repo.rows_referencing_events([event.id]) == 2  # event, completion


def test_anonymous_completion_persists_nothing(repo, service) -> None:
    video = _published_video(repo)
    event = create_event(video, "simulation", repo=repo)

    run(service.complete_event(None, event.id))

    assert repo.rows_referencing_events([event.id]) == 1
    assert repo.progress_rows_for_video(video.id) == 0


def test_quiz_events_cannot_be_completed_directly(repo, service) -> None:
    video = _published_video(repo)
    event = create_event(video, "quiz", repo=repo)

    with pytest.raises(ValidationError):
        run(service.complete_event(uuid4(), event.id))


def test_exam_launch_is_recorded(repo, service) -> None:
    video = _published_video(repo)
    exam = create_event(video, "exam", repo=repo)

    run(service.record_exam_launch(uuid4(), exam.id))
    run(service.record_exam_launch(uuid4(), exam.id))

    assert repo.rows_referencing_events([exam.id]) == 3


def test_exam_launch_rejects_other_event_types(repo, service) -> None:
    video = _published_video(repo)
    sim = create_event(video, "simulation", repo=repo)

    with pytest.raises(ValidationError):
        run(service.record_exam_launch(uuid4(), sim.id))


def test_unknown_event_is_not_found(service) -> None:
    with pytest.raises(NotFoundError):
        run(service.submit_quiz_attempt(uuid4(), uuid4(), 0))
    with pytest.raises(NotFoundError):
        run(service.complete_event(None, uuid4()))


def test_event_without_quiz_row_is_not_found(repo, service) -> None:
    video = _published_video(repo)
    sim = create_event(video, "simulation", repo=repo)

    with pytest.raises(NotFoundError):
        run(service.submit_quiz_attempt(uuid4(), sim.id, 0))


def test_draft_video_checkpoints(repo, roles, service) -> None:
    owner = uuid4()
    course = create_course(owner, repo=repo)
    draft = create_video(course, published=False, repo=repo)
    event = create_event(draft, "simulation", repo=repo)
    admin = uuid4()
    run(roles.grant(admin, "admin"))

    with pytest.raises(AuthorizationError):
        run(service.complete_event(uuid4(), event.id))
    with pytest.raises(AuthorizationError):
        run(service.complete_event(None, event.id))

    run(service.complete_event(owner, event.id))
    run(service.complete_event(admin, event.id))
    assert repo.rows_referencing_events([event.id]) == 3


class _NoWritesRepo(InMemoryContentRepo):
    async def add_quiz_attempt(self, attempt) -> None:
        raise RepoError("read-only replica")


def test_repo_failure_names_the_step(roles) -> None:
    repo = _NoWritesRepo()
    video = _published_video(repo)
    event = create_event(video, "quiz", repo=repo)

    with pytest.raises(DependencyFailure) as exc_info:
        run(CheckpointService(repo, roles).submit_quiz_attempt(uuid4(), event.id, 1))

    assert exc_info.value.step == "record_attempt"
