from datetime import date, timedelta

import pytest

from campanion import db, store
from campanion.errors import NotFound, PermissionDenied, ValidationFailed
from campanion.models import Camp, CampStatus, NO_DATES_LABEL
from campanion.transitions import (
    archive_camp, bulk_archive_started, copy_as_draft, create_camp, delete_camp, edit_camp,
    list_started_active, set_status,
)
from campanion.visibility import Viewer

TODAY = date(2024, 7, 10)


def viewer(user):
    return Viewer.from_user(user)


def reload(camp_id):
    db.session.expire_all()
    return db.session.get(Camp, camp_id)


def test_copy_creates_independent_draft(admin, make_camp):
    original = make_camp(admin, name='Forest Camp', start_date=date(2024, 7, 1),
                         end_date=date(2024, 7, 10), activities=['hiking', 'canoeing'])

    copy_id = copy_as_draft(original.id, viewer(admin))
    copy = reload(copy_id)

    assert copy.id != original.id
    assert copy.name == 'Forest Camp (Copy)'
    assert copy.status == CampStatus.DRAFT.value
    assert copy.creator_id == admin.id
    assert copy.created_at > original.created_at
    for field in ('location', 'price', 'description', 'activities', 'start_date', 'end_date'):
        assert getattr(copy, field) == getattr(original, field)
    assert reload(original.id).status == CampStatus.ACTIVE.value


def test_copy_requires_creating_admin(admin, other_admin, make_camp):
    camp = make_camp(admin)

    with pytest.raises(PermissionDenied):
        copy_as_draft(camp.id, viewer(other_admin))
    assert Camp.query.count() == 1


def test_delete_by_non_creator_is_denied_even_for_admins(admin, other_admin, member, make_camp):
    camp = make_camp(admin)

    for actor in (other_admin, member):
        with pytest.raises(PermissionDenied):
            delete_camp(camp.id, viewer(actor))

    assert reload(camp.id) is not None


def test_delete_by_creator_removes_camp(admin, make_camp):
    camp = make_camp(admin)

    delete_camp(camp.id, viewer(admin))

    with pytest.raises(NotFound):
        store.camps.get(camp.id)


def test_creator_without_admin_rights_cannot_mutate(member, make_camp):
    camp = make_camp(member)

    with pytest.raises(PermissionDenied):
        archive_camp(camp.id, viewer(member))


def test_edit_rejects_end_before_start_and_writes_nothing(admin, make_camp):
    camp = make_camp(admin, start_date=date(2024, 7, 1), end_date=date(2024, 7, 10))

    with pytest.raises(ValidationFailed) as excinfo:
        edit_camp(camp.id, viewer(admin), {'name': 'Renamed', 'end_date': date(2024, 6, 1)})

    assert 'end_date' in excinfo.value.errors
    unchanged = reload(camp.id)
    assert unchanged.name == 'Forest Camp'
    assert unchanged.end_date == date(2024, 7, 10)


def test_edit_rejects_immutable_fields(admin, other_admin, make_camp):
    camp = make_camp(admin)

    with pytest.raises(ValidationFailed) as excinfo:
        edit_camp(camp.id, viewer(admin), {'creator_id': other_admin.id})

    assert 'creator_id' in excinfo.value.errors
    assert reload(camp.id).creator_id == admin.id


def test_edit_allows_any_status_transition(admin, make_camp):
    camp = make_camp(admin, status=CampStatus.ARCHIVE.value)

    edit_camp(camp.id, viewer(admin), {'status': CampStatus.ACTIVE.value})

    assert reload(camp.id).status == CampStatus.ACTIVE.value


def test_edit_recomputes_dates_label(admin, make_camp):
    camp = make_camp(admin)

    edit_camp(camp.id, viewer(admin), {'start_date': date(2024, 7, 1), 'end_date': date(2024, 7, 10)})

    assert reload(camp.id).dates == 'Jul 1 - Jul 10, 2024'


def test_organizer_fields_are_a_snapshot(admin, organizer, make_camp):
    camp = make_camp(admin)

    edit_camp(camp.id, viewer(admin), {'organizer_id': organizer.id})
    store.organizers.update(organizer.id, {'name': 'Renamed Organizer'})

    snapshot = reload(camp.id)
    assert snapshot.organizer_name == 'Summer Adventures'
    assert snapshot.organizer_link == 'https://adventures.example.com'

    store.organizers.delete(organizer.id)
    orphan = reload(camp.id)
    assert orphan.organizer_id == organizer.id
    assert orphan.organizer_name == 'Summer Adventures'


def test_set_status_rejects_unknown_values(admin, make_camp):
    camp = make_camp(admin)

    with pytest.raises(ValidationFailed):
        set_status(camp.id, viewer(admin), 'published')


def test_create_fills_derived_fields(admin):
    camp_id = create_camp(viewer(admin), {
        'name': 'River Camp', 'description': 'Rafting week', 'location': 'Canyon',
        'price': 750, 'status': 'active', 'activities': ['rafting'],
    })
    camp = reload(camp_id)

    assert camp.creator_id == admin.id
    assert camp.creation_mode == 'admin'
    assert camp.dates == NO_DATES_LABEL
    assert camp.image_url == 'https://picsum.photos/seed/River-Camp/600/400'


def test_members_cannot_create_camps(member):
    for status in ('active', 'draft'):
        with pytest.raises(PermissionDenied):
            create_camp(viewer(member), {'name': 'Art Camp', 'price': 0, 'status': status})

    assert Camp.query.count() == 0


def test_create_rejects_archive_status_and_anonymous(admin):
    with pytest.raises(ValidationFailed):
        create_camp(viewer(admin), {'name': 'Old Camp', 'status': 'archive'})
    with pytest.raises(PermissionDenied):
        create_camp(Viewer.anonymous(), {'name': 'Ghost Camp'})


def test_stored_reversed_dates_do_not_block_unrelated_edits(admin, make_camp):
    camp = make_camp(admin, start_date=date(2024, 7, 10), end_date=date(2024, 7, 1))

    edit_camp(camp.id, viewer(admin), {'price': 1200})

    edited = reload(camp.id)
    assert edited.price == 1200
    assert edited.end_date == date(2024, 7, 1)


def test_changing_a_date_revalidates_stored_reversed_dates(admin, make_camp):
    camp = make_camp(admin, start_date=date(2024, 7, 10), end_date=date(2024, 7, 1))

    with pytest.raises(ValidationFailed) as excinfo:
        edit_camp(camp.id, viewer(admin), {'end_date': date(2024, 7, 5)})

    assert 'end_date' in excinfo.value.errors
    edit_camp(camp.id, viewer(admin), {'end_date': date(2024, 7, 20)})
    assert reload(camp.id).dates == 'Jul 10 - Jul 20, 2024'


def test_unrecognized_stored_status_only_checked_when_edited(admin, make_camp):
    camp = make_camp(admin, status='published')

    edit_camp(camp.id, viewer(admin), {'name': 'Fixed Name'})
    assert reload(camp.id).name == 'Fixed Name'

    with pytest.raises(ValidationFailed):
        edit_camp(camp.id, viewer(admin), {'status': 'published'})
    edit_camp(camp.id, viewer(admin), {'status': CampStatus.DRAFT.value})
    assert reload(camp.id).status == CampStatus.DRAFT.value


def test_bulk_archive_archives_started_camps_only(admin, other_admin, make_camp):
    yesterday = make_camp(admin, name='Yesterday', start_date=TODAY - timedelta(days=1))
    today = make_camp(admin, name='Today', start_date=TODAY)
    tomorrow = make_camp(admin, name='Tomorrow', start_date=TODAY + timedelta(days=1))
    someone_else = make_camp(other_admin, name='Not mine', start_date=TODAY - timedelta(days=5))

    report = bulk_archive_started(viewer(admin), today=TODAY)

    assert report.attempted == 2
    assert report.succeeded == 2
    assert report.is_complete
    assert reload(yesterday.id).status == CampStatus.ARCHIVE.value
    assert reload(today.id).status == CampStatus.ARCHIVE.value
    assert reload(tomorrow.id).status == CampStatus.ACTIVE.value
    assert reload(someone_else.id).status == CampStatus.ACTIVE.value


def test_started_review_list_is_admin_only_and_sorted(admin, member, make_camp):
    later = make_camp(admin, name='Later', start_date=TODAY - timedelta(days=1))
    earlier = make_camp(admin, name='Earlier', start_date=TODAY - timedelta(days=9))
    make_camp(admin, name='Draft', status='draft', start_date=TODAY - timedelta(days=30))

    assert [c.id for c in list_started_active(viewer(admin), TODAY)] == [earlier.id, later.id]
    with pytest.raises(PermissionDenied):
        bulk_archive_started(viewer(member), today=TODAY)
