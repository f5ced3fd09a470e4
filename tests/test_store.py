import pytest
from sqlalchemy.exc import OperationalError

from campanion import db, store
from campanion.errors import CollaboratorFailure, NotFound
from campanion.models import Camp, CampStatus


def test_get_missing_record_raises_not_found(app):
    with pytest.raises(NotFound) as excinfo:
        store.camps.get(404)
    assert excinfo.value.kind == 'camp'


def test_create_list_update_delete(admin):
    camp_id = store.camps.create({'name': 'Meadow Camp', 'creator_id': admin.id, 'price': 10})

    store.camps.update(camp_id, {'status': CampStatus.ACTIVE.value})
    active = store.camps.list(Camp.status == CampStatus.ACTIVE.value)
    assert [camp.id for camp in active] == [camp_id]

    store.camps.delete(camp_id)
    assert store.camps.list() == []


def test_batch_update_reports_partial_failure(admin, make_camp):
    camp = make_camp(admin)

    report = store.camps.batch_update([
        (camp.id, {'status': CampStatus.ARCHIVE.value}),
        (9999, {'status': CampStatus.ARCHIVE.value}),
    ])

    assert report.attempted == 2
    assert report.succeeded == 1
    assert report.failed == 1
    assert not report.is_complete
    assert report.succeeded_ids == [camp.id]
    assert [outcome.record_id for outcome in report.failures] == [9999]
    db.session.expire_all()
    assert db.session.get(Camp, camp.id).status == CampStatus.ARCHIVE.value


def test_database_errors_become_collaborator_failures(admin, monkeypatch):
    def broken_commit():
        raise OperationalError('COMMIT', {}, Exception('database is locked'))

    monkeypatch.setattr(db.session, 'commit', broken_commit)

    with pytest.raises(CollaboratorFailure) as excinfo:
        store.camps.create({'name': 'Doomed Camp', 'creator_id': admin.id})
    assert 'create camp' in str(excinfo.value)


def test_batch_update_reports_commit_failure_instead_of_raising(admin, make_camp, monkeypatch):
    first = make_camp(admin)
    second = make_camp(admin, name='Second Camp')

    def broken_commit():
        raise OperationalError('COMMIT', {}, Exception('disk I/O error'))

    monkeypatch.setattr(db.session, 'commit', broken_commit)

    report = store.camps.batch_update([
        (first.id, {'status': CampStatus.ARCHIVE.value}),
        (second.id, {'status': CampStatus.ARCHIVE.value}),
    ])

    assert report.attempted == 2
    assert report.failed == 2
    assert report.succeeded_ids == []
    assert all('disk I/O error' in outcome.error for outcome in report.failures)
