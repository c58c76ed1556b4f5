"""Demo: seed a course and walk the delete endpoints using FastAPI TestClient.

Runs against the in-memory backends, so leave DATABASE_URL and STORAGE_URL
unset.

Run with:
    python scripts/demo_delete_flow.py
"""

from __future__ import annotations

import asyncio
from uuid import uuid4

from fastapi.testclient import TestClient

from courseware.api.dependencies import content_repo, object_storage, role_repo
from courseware.core.config import SETTINGS
from courseware.main import app
from courseware.models.course import Course, Video
from courseware.models.timeline import Quiz, TimelineEvent
from courseware.services import token_service
from courseware.services.path_resolver import public_object_url

STORAGE_BASE = "https://demo.storage.example"


def _auth(user_id) -> dict[str, str]:
    token = token_service.mint_access_token(sub=str(user_id))
    return {"Authorization": f"Bearer {token}"}


def _seed(teacher_id) -> tuple[Course, list[Video]]:
    object_storage.put(SETTINGS.thumbnails_bucket, f"{teacher_id}/cover.png")
    course = Course.new(
        owner_id=teacher_id,
        title="Demo course",
        thumbnail_url=public_object_url(
            STORAGE_BASE, SETTINGS.thumbnails_bucket, f"{teacher_id}/cover.png"
        ),
    )
    asyncio.run(content_repo.add_course(course))

    videos = []
    for n in (1, 2):
        path = f"{teacher_id}/lesson-{n}.mp4"
        object_storage.put(SETTINGS.videos_bucket, path)
        video = Video.new(
            course_id=course.id,
            owner_id=teacher_id,
            title=f"Lesson {n}",
            video_url=public_object_url(STORAGE_BASE, SETTINGS.videos_bucket, path),
            published=True,
        )
        asyncio.run(content_repo.add_video(video))
        event = TimelineEvent.new(video_id=video.id, type="quiz", at_seconds=45)
        asyncio.run(content_repo.add_event(event))
        asyncio.run(
            content_repo.add_quiz(
                Quiz.new(
                    event_id=event.id,
                    question="Ready?",
                    options=("yes", "no"),
                    correct_index=0,
                )
            )
        )
        videos.append(video)
    return course, videos


def main() -> None:
    client = TestClient(app)

    # ── Seed data ───────────────────────────────────────────────────
    teacher = uuid4()
    student = uuid4()
    asyncio.run(role_repo.grant(teacher, "teacher"))
    asyncio.run(role_repo.grant(student, "student"))
    course, (first, second) = _seed(teacher)

    # ── Step 1: no token ────────────────────────────────────────────
    r = client.post("/v1/delete-video", json={"videoId": str(first.id)})
    print(f"1. delete-video (anonymous)   → {r.status_code}  {r.json()}")

    # ── Step 2: a student tries ─────────────────────────────────────
    r = client.post(
        "/v1/delete-video", json={"videoId": str(first.id)}, headers=_auth(student)
    )
    print(f"2. delete-video (student)     → {r.status_code}  {r.json()}")

    # ── Step 3: the owner deletes one lesson ────────────────────────
    r = client.post(
        "/v1/delete-video", json={"videoId": str(first.id)}, headers=_auth(teacher)
    )
    print(f"3. delete-video (owner)       → {r.status_code}  {r.json()}")
    print(
        "   lesson-1.mp4 still stored?  "
        f"{object_storage.exists(SETTINGS.videos_bucket, f'{teacher}/lesson-1.mp4')}"
    )

    # ── Step 4: deleting it again ───────────────────────────────────
    r = client.post(
        "/v1/delete-video", json={"videoId": str(first.id)}, headers=_auth(teacher)
    )
    print(f"4. delete-video (again)       → {r.status_code}  {r.json()}")

    # ── Step 5: the owner deletes the course ────────────────────────
    r = client.post(
        "/v1/delete-course", json={"courseId": str(course.id)}, headers=_auth(teacher)
    )
    print(f"5. delete-course (owner)      → {r.status_code}  {r.json()}")
    print(
        "   lesson-2 row gone?          "
        f"{asyncio.run(content_repo.get_video(second.id)) is None}"
    )
    print(
        "   cover.png still stored?     "
        f"{object_storage.exists(SETTINGS.thumbnails_bucket, f'{teacher}/cover.png')}"
    )

    # ── Step 6: abandoned upload outside the caller's folder ────────
    r = client.post(
        "/v1/delete-storage-object",
        json={"bucket": SETTINGS.videos_bucket, "path": f"{student}/draft.mp4"},
        headers=_auth(teacher),
    )
    print(f"6. delete-storage-object      → {r.status_code}  {r.json()}")


if __name__ == "__main__":
    main()
