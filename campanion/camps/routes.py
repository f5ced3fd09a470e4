"""
Camp routes.

Public discovery listing with search and filters, camp detail pages, and
create/edit/copy/archive/delete for the administrator who created a camp.
All policy decisions are delegated to the visibility, filters and
transitions modules; these views only translate requests and responses.
"""

from flask import render_template, redirect, url_for, flash, request, current_app, abort
from flask_login import login_required

from campanion import store
from campanion.camps import camps_bp
from campanion.camps.forms import CampForm, CampFilterForm
from campanion.decorators import admin_required
from campanion.errors import ValidationFailed
from campanion.extraction import get_extractor, prefill_from_url
from campanion.filters import (
    ListingState, SortOrder, filter_and_sort, paginate, price_ceiling, unique_locations,
)
from campanion.models import Camp, CampStatus, Organizer
from campanion.status import display_status
from campanion.transitions import (
    archive_camp, copy_as_draft, create_camp as create_camp_record, delete_camp as delete_camp_record,
    edit_camp as edit_camp_record,
)
from campanion.visibility import can_manage, current_viewer, require_detail_access


def _organizers():
    return store.organizers.list(order_by=Organizer.name)


def _flash_errors(errors):
    for field, message in errors.items():
        flash(f'{field.replace("_", " ").title()}: {message}', 'error')


def _run_extraction(form):
    """Fill the form from its original link without saving anything."""
    try:
        result = prefill_from_url(get_extractor(), form.original_link.data, form.to_fields())
    except ValidationFailed as exc:
        _flash_errors(exc.errors)
        return
    if result.failed:
        flash('Could not extract data from the provided URL. Please fill manually.', 'error')
        return
    form.load(result.values)
    for warning in result.warnings:
        flash(warning, 'warning')
    flash('Form fields have been populated. Please review and adjust.', 'success')


@camps_bp.route('/')
def list_camps():
    """
    Public camp discovery.

    Only active camps are fetched; search, organizer, location, date and
    price filters are applied in memory and results are ordered by soonest
    start. The filter form submits without a page number, so new criteria
    always start on page 1; pagination links carry the current criteria.

    Returns:
        Rendered template with the current page of camps.
    """
    camps = store.camps.list(Camp.status == CampStatus.ACTIVE.value)
    ceiling = price_ceiling(camps)

    form = CampFilterForm(formdata=request.args)
    form.set_choices(_organizers(), unique_locations(camps))

    state = ListingState().with_criteria(form.to_criteria(ceiling)).with_page(
        request.args.get('page', 1, type=int)
    )
    results = filter_and_sort(camps, state.criteria, SortOrder.SOONEST)
    page = paginate(results, state.page, current_app.config['CAMPS_PER_PAGE'])

    filter_args = {key: value for key, value in request.args.items() if key != 'page' and value}

    return render_template('camps/list.html', form=form, page=page,
                           filter_args=filter_args, price_ceiling=ceiling,
                           any_filter=not state.criteria.is_empty)


@camps_bp.route('/<int:camp_id>')
def view_camp(camp_id):
    """
    View camp details.

    Active camps are public. Draft and archived camps answer 404, exactly
    like a missing camp, unless the viewer passes the detail-page rule.

    Args:
        camp_id: The ID of the camp to view.
    """
    viewer = current_viewer()
    camp = require_detail_access(
        store.camps.get(camp_id), viewer, current_app.config['STRICT_DETAIL_VISIBILITY']
    )
    return render_template('camps/detail.html', camp=camp,
                           status=display_status(camp, current_app.config['STRICT_STATUS']),
                           can_manage=can_manage(camp, viewer))


@camps_bp.route('/create', methods=['GET', 'POST'])
@login_required
@admin_required
def create_camp():
    """
    Create a new camp.

    Administrators only. The creator chooses draft or active as the
    initial status.

    Returns:
        On GET: Rendered form template.
        On POST: Redirect to camp detail with success message.
    """
    form = CampForm()
    form.set_organizer_choices(_organizers())
    form.status.choices = [(CampStatus.DRAFT.value, 'Draft'), (CampStatus.ACTIVE.value, 'Active')]

    if form.is_submitted() and form.extract.data:
        _run_extraction(form)
    elif form.validate_on_submit():
        try:
            camp_id = create_camp_record(current_viewer(), form.to_fields())
        except ValidationFailed as exc:
            _flash_errors(exc.errors)
        else:
            flash(f"Created camp '{form.name.data}' successfully!", 'success')
            return redirect(url_for('camps.view_camp', camp_id=camp_id))

    return render_template('camps/form.html', form=form, camp=None)


@camps_bp.route('/<int:camp_id>/edit', methods=['GET', 'POST'])
@login_required
def edit_camp(camp_id):
    """
    Edit an existing camp.

    Only the administrator who created the camp can edit it. Ownership is
    checked again by the edit operation when the form is saved.

    Args:
        camp_id: The ID of the camp to edit.

    Raises:
        403: If the user is not the creating administrator.
    """
    camp = store.camps.get(camp_id)
    viewer = current_viewer()
    if not can_manage(camp, viewer):
        flash('You can only edit your own camps.', 'error')
        abort(403)

    form = CampForm()
    form.set_organizer_choices(_organizers())

    if request.method == 'GET':
        form.load(camp.to_dict())

    if form.is_submitted() and form.extract.data:
        _run_extraction(form)
    elif form.validate_on_submit():
        try:
            edit_camp_record(camp_id, viewer, form.to_fields())
        except ValidationFailed as exc:
            _flash_errors(exc.errors)
        else:
            flash(f"Updated camp '{form.name.data}'.", 'success')
            return redirect(url_for('admin.my_camps'))

    return render_template('camps/form.html', form=form, camp=camp)


@camps_bp.route('/<int:camp_id>/copy', methods=['POST'])
@login_required
def copy_camp(camp_id):
    """Create a draft copy of a camp and open the copy's edit form."""
    camp = store.camps.get(camp_id)
    new_id = copy_as_draft(camp_id, current_viewer())
    flash(f'Draft copy of "{camp.name}" created.', 'success')
    return redirect(url_for('camps.edit_camp', camp_id=new_id))


@camps_bp.route('/<int:camp_id>/archive', methods=['POST'])
@login_required
def archive(camp_id):
    """Move a camp to the archive."""
    archive_camp(camp_id, current_viewer())
    flash('Camp archived.', 'success')
    return redirect(request.referrer or url_for('admin.my_camps'))


@camps_bp.route('/<int:camp_id>/delete', methods=['POST'])
@login_required
def delete_camp(camp_id):
    """
    Delete a camp permanently.

    The confirmation step happens in the page before this POST.
    """
    delete_camp_record(camp_id, current_viewer())
    flash('The camp has been successfully removed.', 'success')
    return redirect(url_for('admin.my_camps'))
