"""Delete decision table and draft visibility."""

from __future__ import annotations

from uuid import uuid4

import pytest

from courseware.models.course import Video
from courseware.models.principal import Principal
from courseware.services.authorization import Decision, authorize_delete, can_view_video

OWNER = uuid4()
OTHER = uuid4()

_DELETE_CASES = [
    # (caller, roles, expected)
    (OWNER, {"teacher"}, Decision.ALLOW),
    (OTHER, {"teacher"}, Decision.DENY),
    (OTHER, {"admin"}, Decision.ALLOW),
    (OWNER, {"admin"}, Decision.ALLOW),
    (OTHER, {"admin", "student"}, Decision.ALLOW),
    (OWNER, {"student"}, Decision.DENY),
    (OWNER, set(), Decision.DENY),
    (OTHER, {"student"}, Decision.DENY),
    (OTHER, {"Admin"}, Decision.DENY),
]


@pytest.mark.parametrize(
    "caller,roles,expected",
    _DELETE_CASES,
    ids=[
        f"{'owner' if c == OWNER else 'other'}-{'+'.join(sorted(r)) or 'none'}"
        for c, r, _ in _DELETE_CASES
    ],
)
def test_authorize_delete(caller, roles, expected) -> None:
    assert authorize_delete(Principal(caller, frozenset(roles)), OWNER) is expected


def test_authorize_delete_is_exact_on_owner_id() -> None:
    caller = Principal(uuid4(), frozenset({"teacher"}))
    assert authorize_delete(caller, uuid4()) is Decision.DENY


def test_principal_role_helpers() -> None:
    p = Principal(OWNER, frozenset({"teacher"}))
    assert p.is_teacher()
    assert not p.is_admin()
    assert p.has_role("teacher")
    assert not Principal(OWNER).has_role("teacher")


def _video(*, published: bool) -> Video:
    return Video.new(course_id=uuid4(), owner_id=OWNER, title="v", published=published)


def test_published_video_visible_to_anyone() -> None:
    video = _video(published=True)
    assert can_view_video(None, video)
    assert can_view_video(Principal(OTHER), video)


def test_draft_video_visible_to_owner_and_admin_only() -> None:
    video = _video(published=False)
    assert can_view_video(Principal(OWNER, frozenset({"teacher"})), video)
    assert can_view_video(Principal(OTHER, frozenset({"admin"})), video)
    assert not can_view_video(Principal(OTHER, frozenset({"teacher"})), video)
    assert not can_view_video(None, video)
