from datetime import datetime

import pytest

from campanion.errors import UnknownStatus
from campanion.status import (
    DisplayStatus, StatusResolution, display_status, resolve_status, sort_by_lifecycle,
)

from conftest import new_camp


@pytest.mark.parametrize('raw, expected', [
    ('draft', DisplayStatus.DRAFT),
    ('active', DisplayStatus.ACTIVE),
    ('archive', DisplayStatus.ARCHIVED),
])
def test_known_statuses_map_to_display_labels(raw, expected):
    assert display_status(new_camp(status=raw)) is expected


@pytest.mark.parametrize('raw', ['published', 'ARCHIVE', '', None, 3])
def test_unknown_status_falls_back_to_draft(raw):
    assert display_status(new_camp(status=raw)) is DisplayStatus.DRAFT
    assert resolve_status(raw) is StatusResolution.UNKNOWN


def test_strict_mode_raises_on_unknown_status():
    with pytest.raises(UnknownStatus) as excinfo:
        display_status(new_camp(status='published'), strict=True)
    assert excinfo.value.raw_status == 'published'
    assert 'status' in excinfo.value.errors


def test_lifecycle_order_keeps_ties_in_input_order():
    created = datetime(2024, 5, 1)
    camps = [
        new_camp(id=1, status='archive', created_at=created),
        new_camp(id=2, status='active', created_at=created),
        new_camp(id=3, status='draft', created_at=created),
        new_camp(id=4, status='active', created_at=created),
    ]

    ordered = sort_by_lifecycle(camps)

    assert [display_status(c) for c in ordered] == [
        DisplayStatus.ACTIVE, DisplayStatus.ACTIVE, DisplayStatus.DRAFT, DisplayStatus.ARCHIVED,
    ]
    assert [c.id for c in ordered] == [2, 4, 3, 1]


def test_lifecycle_order_puts_newest_first_within_status():
    camps = [
        new_camp(id=1, status='draft', created_at=datetime(2024, 1, 1)),
        new_camp(id=2, status='draft', created_at=datetime(2024, 3, 1)),
        new_camp(id=3, status='draft', created_at=None),
        new_camp(id=4, status='archive', created_at=datetime(2025, 1, 1)),
    ]

    assert [c.id for c in sort_by_lifecycle(camps)] == [2, 1, 3, 4]
