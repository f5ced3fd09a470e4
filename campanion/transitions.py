"""
Camp lifecycle transitions.

Every mutation reloads the camp from the store and re-checks ownership
immediately before writing, so a stale page cannot act on a camp whose
owner or existence has changed. Authorization and validation failures
raise; bulk archiving reports per-item outcomes instead.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from flask import current_app

from campanion import store
from campanion.errors import NotFound, PermissionDenied, ValidationFailed
from campanion.models import (
    Camp, CampStatus, CreationMode, UNKNOWN_ORGANIZER_NAME,
    default_image_url, format_dates_label,
)
from campanion.visibility import can_manage, started_active

# Fields a create or edit may set
MUTABLE_FIELDS = frozenset({
    'name', 'description', 'location', 'start_date', 'end_date', 'price',
    'image_url', 'activities', 'original_link', 'organizer_id', 'status',
})


def _copy_suffix():
    return current_app.config.get('COPY_NAME_SUFFIX', ' (Copy)')


def validate_camp_fields(fields, changed=None):
    """
    Check camp invariants before a write.

    Args:
        fields (dict): Field values after the pending change is applied.
        changed: Names of the fields being written. Only invariants that
            involve a changed field are checked, so a stored record that
            already breaks one can still be edited elsewhere. None checks
            everything.

    Raises:
        ValidationFailed: Listing every field at fault.
    """
    def touched(*names):
        return changed is None or any(name in changed for name in names)

    errors = {}
    start_date = fields.get('start_date')
    end_date = fields.get('end_date')
    if touched('start_date', 'end_date'):
        if start_date is not None and end_date is not None and end_date < start_date:
            errors['end_date'] = 'End date must be on or after start date.'

    price = fields.get('price')
    if touched('price') and price is not None and price < 0:
        errors['price'] = 'Price must be a positive number.'

    status = fields.get('status')
    if touched('status') and status is not None and status not in CampStatus.values():
        errors['status'] = f'Status must be one of: {", ".join(CampStatus.values())}.'

    if touched('name') and not (fields.get('name') or '').strip():
        errors['name'] = 'Camp name is required.'

    if errors:
        raise ValidationFailed(errors)


def organizer_snapshot(organizer_id):
    """
    Organizer name and link to store on a camp.

    The snapshot is taken at write time and not kept in sync afterwards.
    """
    if organizer_id is None:
        return {'organizer_name': None, 'organizer_link': None}
    try:
        organizer = store.organizers.get(organizer_id)
    except NotFound:
        return {'organizer_name': UNKNOWN_ORGANIZER_NAME, 'organizer_link': ''}
    return {'organizer_name': organizer.name, 'organizer_link': organizer.link or ''}


def _derived_fields(record, changed):
    """
    Fields recomputed from the record when their sources change.

    Args:
        record (dict): Field values after the change.
        changed: Names of the fields being written.
    """
    derived = {}
    if 'start_date' in changed or 'end_date' in changed:
        derived['dates'] = format_dates_label(record.get('start_date'), record.get('end_date'))
    if 'image_url' in changed and not record.get('image_url'):
        derived['image_url'] = default_image_url(record.get('name'))
    if 'organizer_id' in changed:
        derived.update(organizer_snapshot(record.get('organizer_id')))
    if 'activities' in changed:
        derived['activities'] = list(record.get('activities') or [])
    return derived


def _check_fields(fields):
    unknown = set(fields) - MUTABLE_FIELDS
    if unknown:
        raise ValidationFailed({name: 'Field cannot be changed.' for name in sorted(unknown)})


def _load_managed(camp_id, viewer, action):
    """Reload a camp and require the viewer to be its creating administrator."""
    camp = store.camps.get(camp_id)
    if not can_manage(camp, viewer):
        current_app.logger.warning("User %s denied %s on camp %s", viewer.uid, action, camp_id)
        raise PermissionDenied(f'You do not have permission to {action} this camp.')
    return camp


def create_camp(viewer, fields) -> int:
    """
    Create a camp owned by the viewing administrator.

    The initial status may be draft or active. Only administrators create
    camps, so new camps are tagged 'admin'; 'user' only appears on
    imported records.

    Raises:
        PermissionDenied: If the viewer is not an administrator.
        ValidationFailed: On an invalid initial status or field values.

    Returns:
        int: New camp id.
    """
    if not viewer.is_admin:
        current_app.logger.warning("User %s denied camp creation", viewer.uid)
        raise PermissionDenied('Only administrators can create camps.')
    _check_fields(fields)
    data = {'status': CampStatus.DRAFT.value, 'image_url': None, **fields}
    if data['status'] not in (CampStatus.DRAFT.value, CampStatus.ACTIVE.value):
        raise ValidationFailed({'status': 'A new camp must be draft or active.'})
    validate_camp_fields(data)
    data.update(_derived_fields(data, set(data)))
    data.update(
        creator_id=viewer.uid,
        creation_mode=CreationMode.ADMIN.value,
        created_at=datetime.utcnow(),
    )
    camp_id = store.camps.create(data)
    current_app.logger.info("User %s created camp %s (%s)", viewer.uid, camp_id, data['status'])
    return camp_id


def edit_camp(camp_id, viewer, new_fields) -> Camp:
    """
    Overwrite the mutable fields of a camp.

    The merged record is validated before anything is written; on failure
    nothing changes. Only invariants involving the supplied fields are
    checked, so dates are re-validated only when a date is being changed.
    Status may move freely between draft, active and archive.

    Raises:
        NotFound, PermissionDenied, ValidationFailed
    """
    camp = _load_managed(camp_id, viewer, 'edit')
    _check_fields(new_fields)
    merged = {name: getattr(camp, name) for name in MUTABLE_FIELDS}
    merged.update(new_fields)
    validate_camp_fields(merged, set(new_fields))
    changes = dict(new_fields)
    changes.update(_derived_fields(merged, set(new_fields)))
    store.camps.update(camp_id, changes)
    current_app.logger.info("User %s edited camp %s", viewer.uid, camp_id)
    return store.camps.get(camp_id)


def set_status(camp_id, viewer, status) -> None:
    """Field-only status change (e.g. archive) by the creating administrator."""
    status = status.value if isinstance(status, CampStatus) else status
    if status not in CampStatus.values():
        raise ValidationFailed({'status': f'Unrecognized status {status!r}.'})
    _load_managed(camp_id, viewer, 'change the status of')
    store.camps.update(camp_id, {'status': status})
    current_app.logger.info("User %s set camp %s to %s", viewer.uid, camp_id, status)


def archive_camp(camp_id, viewer) -> None:
    set_status(camp_id, viewer, CampStatus.ARCHIVE)


def copy_as_draft(camp_id, viewer) -> int:
    """
    Duplicate a camp as a new draft owned by the viewer.

    The copy gets a fresh id, the name suffix, status draft and a new
    creation time; the original is left untouched.

    Returns:
        int: Id of the copy.
    """
    camp = _load_managed(camp_id, viewer, 'copy')
    data = camp.to_dict()
    data.update(
        name=f'{camp.name}{_copy_suffix()}',
        status=CampStatus.DRAFT.value,
        created_at=datetime.utcnow(),
        creator_id=viewer.uid,
    )
    new_id = store.camps.create(data)
    current_app.logger.info("User %s copied camp %s to draft %s", viewer.uid, camp_id, new_id)
    return new_id


def delete_camp(camp_id, viewer) -> None:
    """
    Delete a camp permanently.

    Confirmation is the caller's job; this performs none.
    """
    _load_managed(camp_id, viewer, 'delete')
    store.camps.delete(camp_id)
    current_app.logger.info("User %s deleted camp %s", viewer.uid, camp_id)


def list_started_active(viewer, today: Optional[date] = None):
    """The viewer's active camps that have already started, earliest first."""
    if not viewer.is_admin:
        raise PermissionDenied('Only administrators can review started camps.')
    owned = store.camps.list(Camp.creator_id == viewer.uid, Camp.status == CampStatus.ACTIVE.value)
    return started_active(owned, today or date.today(), creator_id=viewer.uid)


def bulk_archive_started(viewer, today: Optional[date] = None) -> store.BatchReport:
    """
    Archive every started active camp created by the viewer.

    The updates are independent: some may fail while others succeed. The
    returned report carries the aggregate counts.
    """
    due = list_started_active(viewer, today)
    report = store.camps.batch_update(
        (camp.id, {'status': CampStatus.ARCHIVE.value}) for camp in due
    )
    current_app.logger.info(
        "User %s archived %d of %d started camps", viewer.uid, report.succeeded, report.attempted
    )
    return report
