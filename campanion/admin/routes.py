"""
Administration routes.

Administrators manage the camps they created (dashboard, full lifecycle
list, started-camp review with bulk archive) and the organizer profiles
camps refer to.
"""

from datetime import date

from flask import render_template, redirect, url_for, flash, request, current_app
from flask_login import login_required

from campanion import store
from campanion.admin import admin_bp
from campanion.admin.forms import OrganizerForm
from campanion.decorators import admin_required
from campanion.filters import (
    ListingState, SortOrder, StatusFilter, filter_by_status, paginate, sort_camps, split_by_end_date,
)
from campanion.models import Camp, Organizer
from campanion.status import display_status
from campanion.transitions import bulk_archive_started, list_started_active
from campanion.visibility import current_viewer


def _own_camps(viewer):
    return store.camps.list(Camp.creator_id == viewer.uid)


@admin_bp.route('/')
@login_required
@admin_required
def dashboard():
    """
    Administrator dashboard.

    Splits the administrator's camps into current ones (ending today or
    later) and past ones, newest first.
    """
    viewer = current_viewer()
    camps = sort_camps(_own_camps(viewer), SortOrder.NEWEST)
    current, past = split_by_end_date(camps, date.today())
    return render_template('admin/dashboard.html', current_camps=current, past_camps=past,
                           started_count=len(list_started_active(viewer)))


@admin_bp.route('/my-camps')
@login_required
@admin_required
def my_camps():
    """
    Every camp the administrator created, in lifecycle order.

    Active camps come first, then drafts, then archived camps, newest first
    within each group. The status selector links drop the page number so a
    new selection starts at page 1.
    """
    viewer = current_viewer()
    state = ListingState().with_status_filter(
        StatusFilter.parse(request.args.get('status', StatusFilter.ALL.value))
    ).with_page(request.args.get('page', 1, type=int))

    camps = filter_by_status(sort_camps(_own_camps(viewer), SortOrder.LIFECYCLE), state.status_filter)
    page = paginate(camps, state.page, current_app.config['CAMPS_PER_PAGE'])
    strict = current_app.config['STRICT_STATUS']
    statuses = {camp.id: display_status(camp, strict) for camp in page.items}

    return render_template('admin/my_camps.html', page=page, statuses=statuses,
                           status_filter=state.status_filter, status_filters=list(StatusFilter))


@admin_bp.route('/started')
@login_required
@admin_required
def started_camps():
    """
    Review list of active camps that have already started.

    Sorted by start date, earliest first, so the most overdue camp leads.
    """
    camps = list_started_active(current_viewer())
    return render_template('admin/started.html', camps=camps)


@admin_bp.route('/started/archive', methods=['POST'])
@login_required
@admin_required
def archive_started():
    """
    Archive every started active camp the administrator created.

    Reports the aggregate outcome; some camps may fail while others succeed.
    """
    report = bulk_archive_started(current_viewer())
    if report.attempted == 0:
        flash('No started camps to archive.', 'info')
    elif report.is_complete:
        flash(f'Archived {report.succeeded} started camp(s).', 'success')
    else:
        flash(f'Archived {report.succeeded} of {report.attempted} started camps; '
              f'{report.failed} could not be archived.', 'warning')
    return redirect(url_for('admin.started_camps'))


@admin_bp.route('/organizers')
@login_required
@admin_required
def list_organizers():
    """List organizer profiles alphabetically."""
    organizers = store.organizers.list(order_by=Organizer.name)
    return render_template('admin/organizers.html', organizers=organizers)


@admin_bp.route('/organizers/create', methods=['GET', 'POST'])
@login_required
@admin_required
def create_organizer():
    """Create an organizer profile."""
    form = OrganizerForm()

    if form.validate_on_submit():
        organizer_id = store.organizers.create(form.to_fields())
        current_app.logger.info("User %s created organizer %s", current_viewer().uid, organizer_id)
        flash(f"Created organizer '{form.name.data}'.", 'success')
        return redirect(url_for('admin.list_organizers'))

    return render_template('admin/organizer_form.html', form=form, organizer=None)


@admin_bp.route('/organizers/<int:organizer_id>/edit', methods=['GET', 'POST'])
@login_required
@admin_required
def edit_organizer(organizer_id):
    """
    Edit an organizer profile.

    Camps keep the organizer name and link they were saved with; only camps
    saved afterwards pick up the change.
    """
    organizer = store.organizers.get(organizer_id)
    form = OrganizerForm(obj=organizer)

    if form.validate_on_submit():
        store.organizers.update(organizer_id, form.to_fields())
        current_app.logger.info("User %s edited organizer %s", current_viewer().uid, organizer_id)
        flash(f"Updated organizer '{form.name.data}'.", 'success')
        return redirect(url_for('admin.list_organizers'))

    return render_template('admin/organizer_form.html', form=form, organizer=organizer)


@admin_bp.route('/organizers/<int:organizer_id>/delete', methods=['POST'])
@login_required
@admin_required
def delete_organizer(organizer_id):
    """Delete an organizer. Camps referring to it are left as they are."""
    store.organizers.delete(organizer_id)
    current_app.logger.info("User %s deleted organizer %s", current_viewer().uid, organizer_id)
    flash('Organizer deleted.', 'success')
    return redirect(url_for('admin.list_organizers'))
