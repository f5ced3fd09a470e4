"""
Camp lifecycle status model.

Maps the stored status to the label shown to viewers and defines the
lifecycle sort order used by administrative listings:
Active first, then Draft, then Archived, newest first within a status.
"""

from datetime import datetime
from enum import Enum

from campanion.errors import UnknownStatus
from campanion.models import CampStatus


class DisplayStatus(str, Enum):
    """Status label shown to viewers."""
    ACTIVE = 'Active'
    DRAFT = 'Draft'
    ARCHIVED = 'Archived'

    @property
    def rank(self):
        """Position in the lifecycle sort order."""
        return _LIFECYCLE_RANK[self]


class StatusResolution(str, Enum):
    """
    Result of reading a stored status, with an explicit arm for bad data.

    UNKNOWN lets callers choose between the lenient default (show as Draft)
    and raising.
    """
    ACTIVE = 'active'
    DRAFT = 'draft'
    ARCHIVE = 'archive'
    UNKNOWN = 'unknown'


_LIFECYCLE_RANK = {
    DisplayStatus.ACTIVE: 1,
    DisplayStatus.DRAFT: 2,
    DisplayStatus.ARCHIVED: 3,
}

_DISPLAY_BY_RESOLUTION = {
    StatusResolution.ACTIVE: DisplayStatus.ACTIVE,
    StatusResolution.DRAFT: DisplayStatus.DRAFT,
    StatusResolution.ARCHIVE: DisplayStatus.ARCHIVED,
}

_EPOCH = datetime(1970, 1, 1)


def resolve_status(raw_status):
    """
    Classify a stored status value.

    Args:
        raw_status: Value of Camp.status (str, CampStatus, or anything else).

    Returns:
        StatusResolution: UNKNOWN for any unrecognized value.
    """
    if isinstance(raw_status, CampStatus):
        raw_status = raw_status.value
    if raw_status in CampStatus.values():
        return StatusResolution(raw_status)
    return StatusResolution.UNKNOWN


def display_status(camp, strict=False):
    """
    Derive the label shown for a camp.

    Args:
        camp: Any object with a ``status`` attribute.
        strict (bool): Raise UnknownStatus instead of falling back to Draft.

    Returns:
        DisplayStatus: Active, Draft or Archived.
    """
    resolution = resolve_status(getattr(camp, 'status', None))
    if resolution is StatusResolution.UNKNOWN:
        if strict:
            raise UnknownStatus(getattr(camp, 'status', None))
        return DisplayStatus.DRAFT
    return _DISPLAY_BY_RESOLUTION[resolution]


def created_at_key(camp):
    """Creation timestamp for sorting; missing timestamps sort as the epoch."""
    return camp.created_at or _EPOCH


def lifecycle_sort_key(camp, strict=False):
    """Sort key placing Active < Draft < Archived, newest first within a status."""
    created = created_at_key(camp)
    return (display_status(camp, strict).rank, -(created - _EPOCH).total_seconds())


def sort_by_lifecycle(camps, strict=False):
    """
    Return camps in lifecycle order.

    The sort is stable, so camps with the same status and creation time
    keep their input order.
    """
    return sorted(camps, key=lambda camp: lifecycle_sort_key(camp, strict))
