"""Owner/role decisions.

These functions are pure: the caller fetches the resource and the role set
through the privileged repositories and passes the facts in.  Because
those reads bypass per-caller row filtering, these checks are the only
thing standing between a caller and someone else's content.
"""

from __future__ import annotations

import enum
from uuid import UUID

from courseware.models.course import Video
from courseware.models.principal import Principal


class Decision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


def authorize_delete(caller: Principal, resource_owner_id: UUID) -> Decision:
    """Admins may delete anything; teachers may delete what they own."""
    if caller.is_admin():
        return Decision.ALLOW
    if caller.is_teacher() and caller.user_id == resource_owner_id:
        return Decision.ALLOW
    return Decision.DENY


def can_view_video(caller: Principal | None, video: Video) -> bool:
    # Published videos are open to everyone, drafts to their owner
    # (teacher preview) and admins.
    if video.published:
        return True
    if caller is None:
        return False
    return video.owner_id == caller.user_id or caller.is_admin()
