from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    owner_id: UUID
    title: str
    description: str | None = None
    published: bool = False
    tags: tuple[str, ...] = ()
    thumbnail_url: str | None = None

    @staticmethod
    def new(
        *,
        owner_id: UUID,
        title: str,
        description: str | None = None,
        published: bool = False,
        tags: tuple[str, ...] = (),
        thumbnail_url: str | None = None,
    ) -> Course:
        return Course(
            id=uuid4(),
            owner_id=owner_id,
            title=title,
            description=description,
            published=published,
            tags=tags,
            thumbnail_url=thumbnail_url,
        )


@dataclass(frozen=True, slots=True)
class Video:
    id: UUID
    course_id: UUID
    owner_id: UUID
    title: str
    video_url: str | None = None  # storage public URL or external host
    published: bool = False

    @staticmethod
    def new(
        *,
        course_id: UUID,
        owner_id: UUID,
        title: str,
        video_url: str | None = None,
        published: bool = False,
    ) -> Video:
        return Video(
            id=uuid4(),
            course_id=course_id,
            owner_id=owner_id,
            title=title,
            video_url=video_url,
            published=published,
        )
