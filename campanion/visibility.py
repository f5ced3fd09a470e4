"""
Camp visibility policy.

Every function takes the viewer explicitly instead of reading the logged-in
user from global state. Two rules coexist on purpose:

- list views show hidden (draft/archive) camps only to the administrator
  who created them;
- the detail page admits any administrator unless
  STRICT_DETAIL_VISIBILITY is enabled, in which case it uses the list rule.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from flask_login import current_user

from campanion.errors import NotFound
from campanion.models import CampStatus


@dataclass(frozen=True)
class Viewer:
    """The identity facts the policy consumes."""

    uid: Optional[int] = None
    email: Optional[str] = None
    is_admin: bool = False

    @property
    def is_anonymous(self):
        return self.uid is None

    @classmethod
    def anonymous(cls):
        return cls()

    @classmethod
    def from_user(cls, user):
        """
        Build a viewer from a Flask-Login user (or AnonymousUserMixin).

        Args:
            user: current_user or a User model instance.

        Returns:
            Viewer: anonymous viewer when the user is not authenticated.
        """
        if user is None or not getattr(user, 'is_authenticated', False):
            return cls.anonymous()
        return cls(uid=user.id, email=user.email, is_admin=bool(user.is_admin))


ANONYMOUS = Viewer.anonymous()


def is_owner(camp, viewer):
    """True when the viewer is the camp's creator."""
    return viewer.uid is not None and camp.creator_id == viewer.uid


def can_manage(camp, viewer):
    """
    Whether the viewer may edit, delete, copy or archive the camp.

    Only the administrator who created the camp qualifies; being an
    administrator is not enough on its own.
    """
    return viewer.is_admin and is_owner(camp, viewer)


def is_visible(camp, viewer):
    """
    List-level visibility.

    Active camps are visible to everyone. Draft and archived camps are
    visible only to the administrator who created them.
    """
    if camp.status == CampStatus.ACTIVE.value:
        return True
    return can_manage(camp, viewer)


def can_view_detail(camp, viewer, strict=False):
    """
    Detail-page visibility.

    Args:
        camp: Camp being opened.
        viewer (Viewer): Requesting viewer.
        strict (bool): Apply the list-level creator rule instead of the
            broader any-administrator rule.
    """
    if strict:
        return is_visible(camp, viewer)
    if camp.status == CampStatus.ACTIVE.value:
        return True
    return viewer.is_admin


def visible_camps(camps: Iterable, viewer) -> List:
    """Filter a collection down to the camps the viewer may see in listings."""
    return [camp for camp in camps if is_visible(camp, viewer)]


def require_detail_access(camp, viewer, strict=False):
    """
    Return the camp if the viewer may open it, else raise NotFound.

    Hidden camps raise the same NotFound as missing ones.
    """
    if camp is None or not can_view_detail(camp, viewer, strict):
        raise NotFound('camp', getattr(camp, 'id', None))
    return camp


def is_started_active(camp, today: date) -> bool:
    """
    Active camp whose start date is today or earlier.

    Compares calendar dates only. Camps without a start date never qualify.
    """
    if camp.status != CampStatus.ACTIVE.value or camp.start_date is None:
        return False
    start = camp.start_date
    if hasattr(start, 'date') and callable(start.date):
        start = start.date()
    return start <= today


def started_active(camps: Iterable, today: date, creator_id=None) -> List:
    """
    Camps needing administrative attention, earliest start first.

    Args:
        camps: Candidate camps.
        today (date): Reference date.
        creator_id: When given, only camps created by this user are kept.
    """
    flagged = [
        camp for camp in camps
        if is_started_active(camp, today)
        and (creator_id is None or camp.creator_id == creator_id)
    ]
    return sorted(flagged, key=lambda camp: camp.start_date)


def current_viewer():
    """Viewer for the user of the current request."""
    return Viewer.from_user(current_user)
