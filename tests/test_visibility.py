from datetime import date, timedelta

import pytest
from flask_login import AnonymousUserMixin

from campanion.errors import NotFound
from campanion.visibility import (
    ANONYMOUS, Viewer, can_manage, can_view_detail, is_started_active, is_visible,
    require_detail_access, started_active, visible_camps,
)

from conftest import new_camp

OWNER = Viewer(uid=1, email='owner@example.com', is_admin=True)
OTHER_ADMIN = Viewer(uid=2, email='other@example.com', is_admin=True)
MEMBER_CREATOR = Viewer(uid=1, email='owner@example.com', is_admin=False)
MEMBER = Viewer(uid=3, email='member@example.com')

TODAY = date(2024, 7, 10)


@pytest.mark.parametrize('viewer', [ANONYMOUS, MEMBER, OTHER_ADMIN, OWNER])
def test_active_camps_are_visible_to_everyone(viewer):
    assert is_visible(new_camp(status='active'), viewer)


@pytest.mark.parametrize('status', ['draft', 'archive'])
def test_hidden_camps_are_listed_only_for_their_creating_admin(status):
    camp = new_camp(status=status, creator_id=1)

    assert is_visible(camp, OWNER)
    assert not is_visible(camp, OTHER_ADMIN)
    assert not is_visible(camp, MEMBER_CREATOR)
    assert not is_visible(camp, ANONYMOUS)


def test_only_creating_admin_can_manage():
    camp = new_camp(creator_id=1)

    assert can_manage(camp, OWNER)
    assert not can_manage(camp, OTHER_ADMIN)
    assert not can_manage(camp, MEMBER_CREATOR)
    assert not can_manage(camp, ANONYMOUS)


def test_detail_page_admits_any_admin_unless_strict():
    camp = new_camp(status='draft', creator_id=1)

    assert can_view_detail(camp, OTHER_ADMIN)
    assert not can_view_detail(camp, OTHER_ADMIN, strict=True)
    assert can_view_detail(camp, OWNER, strict=True)
    assert not can_view_detail(camp, MEMBER)


def test_hidden_and_missing_camps_raise_the_same_not_found():
    hidden = new_camp(id=7, status='archive')

    with pytest.raises(NotFound) as hidden_error:
        require_detail_access(hidden, ANONYMOUS)
    with pytest.raises(NotFound) as missing_error:
        require_detail_access(None, ANONYMOUS)

    assert type(hidden_error.value) is type(missing_error.value)
    assert require_detail_access(new_camp(status='active'), ANONYMOUS) is not None


def test_visible_camps_filters_collection():
    camps = [new_camp(id=1, status='active'), new_camp(id=2, status='draft', creator_id=1)]

    assert [c.id for c in visible_camps(camps, ANONYMOUS)] == [1]
    assert [c.id for c in visible_camps(camps, OWNER)] == [1, 2]


@pytest.mark.parametrize('offset, expected', [(-1, True), (0, True), (1, False)])
def test_started_active_compares_dates_only(offset, expected):
    camp = new_camp(status='active', start_date=TODAY + timedelta(days=offset))
    assert is_started_active(camp, TODAY) is expected


def test_started_active_ignores_drafts_and_unscheduled_camps():
    assert not is_started_active(new_camp(status='draft', start_date=TODAY), TODAY)
    assert not is_started_active(new_camp(status='active', start_date=None), TODAY)


def test_started_active_sorted_earliest_first_and_filtered_by_creator():
    camps = [
        new_camp(id=1, start_date=TODAY - timedelta(days=1), creator_id=1),
        new_camp(id=2, start_date=TODAY - timedelta(days=10), creator_id=1),
        new_camp(id=3, start_date=TODAY - timedelta(days=20), creator_id=2),
        new_camp(id=4, start_date=TODAY + timedelta(days=3), creator_id=1),
    ]

    assert [c.id for c in started_active(camps, TODAY)] == [3, 2, 1]
    assert [c.id for c in started_active(camps, TODAY, creator_id=1)] == [2, 1]


def test_viewer_from_anonymous_user():
    viewer = Viewer.from_user(AnonymousUserMixin())

    assert viewer.is_anonymous
    assert not viewer.is_admin


def test_viewer_from_user(app, admin):
    viewer = Viewer.from_user(admin)

    assert viewer.uid == admin.id
    assert viewer.is_admin
