"""Learner checkpoint endpoints, and how their rows disappear with the video."""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from courseware.api.dependencies import content_repo
from tests.conftest import (
    auth,
    create_course,
    create_event,
    create_video,
    make_user,
    run,
)


@pytest.fixture
def video():
    return create_video(create_course(make_user("teacher")), published=True)


def test_quiz_attempt_correct(client: TestClient, video) -> None:
    event = create_event(video, "quiz", at_seconds=45, correct_index=1)
    learner = make_user("student")

    resp = client.post(
        "/v1/quiz-attempt",
        json={"eventId": str(event.id), "selectedIndex": 1},
        headers=auth(learner),
    )

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "isCorrect": True}
    progress = run(content_repo.get_progress(learner, video.id))
    assert progress.unlocked_until_seconds == 45


def test_quiz_attempt_wrong(client: TestClient, video) -> None:
    event = create_event(video, "quiz", correct_index=1)

    resp = client.post(
        "/v1/quiz-attempt",
        json={"eventId": str(event.id), "selectedIndex": 2},
        headers=auth(make_user("student")),
    )

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "isCorrect": False}


@pytest.mark.parametrize(
    "body",
    [{"selectedIndex": 0}, {"eventId": "nope", "selectedIndex": 0}],
    ids=["missing-event", "bad-uuid"],
)
def test_quiz_attempt_bad_body(client: TestClient, body: dict) -> None:
    resp = client.post("/v1/quiz-attempt", json=body, headers=auth(make_user()))
    assert resp.status_code == 400


def test_quiz_attempt_negative_index(client: TestClient, video) -> None:
    event = create_event(video, "quiz")
    resp = client.post(
        "/v1/quiz-attempt",
        json={"eventId": str(event.id), "selectedIndex": -1},
        headers=auth(make_user()),
    )
    assert resp.status_code == 400


def test_quiz_attempt_requires_token(client: TestClient, video) -> None:
    event = create_event(video, "quiz")
    resp = client.post(
        "/v1/quiz-attempt", json={"eventId": str(event.id), "selectedIndex": 0}
    )
    assert resp.status_code == 401


def test_event_complete_anonymous(client: TestClient, video) -> None:
    event = create_event(video, "simulation")

    resp = client.post("/v1/event-complete", json={"eventId": str(event.id)})

    assert resp.status_code == 200
    assert content_repo.rows_referencing_events([event.id]) == 1


def test_event_complete_with_invalid_token_is_401(client: TestClient, video) -> None:
    event = create_event(video, "simulation")
    resp = client.post(
        "/v1/event-complete",
        json={"eventId": str(event.id)},
        headers={"Authorization": "Bearer nope"},
    )
    assert resp.status_code == 401


def test_event_complete_quiz_is_400(client: TestClient, video) -> None:
    event = create_event(video, "quiz")
    resp = client.post(
        "/v1/event-complete", json={"eventId": str(event.id)}, headers=auth(make_user())
    )
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Use quiz-attempt for quiz events"}


def test_event_complete_unknown_is_404(client: TestClient) -> None:
    resp = client.post("/v1/event-complete", json={"eventId": str(uuid4())})
    assert resp.status_code == 404


def test_draft_video_event_is_403_for_strangers(client: TestClient) -> None:
    draft = create_video(create_course(make_user("teacher")), published=False)
    event = create_event(draft, "exam")

    resp = client.post(
        "/v1/exam-launch", json={"eventId": str(event.id)}, headers=auth(make_user())
    )

    assert resp.status_code == 403


def test_learner_rows_are_removed_with_the_video(client: TestClient) -> None:
    teacher = make_user("teacher")
    video = create_video(create_course(teacher), published=True)
    quiz = create_event(video, "quiz", correct_index=0)
    exam = create_event(video, "exam", at_seconds=90)
    learner = make_user("student")
    headers = auth(learner)

    client.post(
        "/v1/quiz-attempt",
        json={"eventId": str(quiz.id), "selectedIndex": 0},
        headers=headers,
    )
    client.post("/v1/exam-launch", json={"eventId": str(exam.id)}, headers=headers)
    client.post("/v1/event-complete", json={"eventId": str(exam.id)}, headers=headers)
    # events, quiz, attempt, two completions, launch
    assert content_repo.rows_referencing_events([quiz.id, exam.id]) == 7
    assert content_repo.progress_rows_for_video(video.id) == 1

    resp = client.post(
        "/v1/delete-video", json={"videoId": str(video.id)}, headers=auth(teacher)
    )

    assert resp.status_code == 200
    assert content_repo.rows_referencing_events([quiz.id, exam.id]) == 0
    assert content_repo.progress_rows_for_video(video.id) == 0
