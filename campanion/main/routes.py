"""
Main application routes.

This module handles the home page and the user dashboard.
"""

from flask import render_template, redirect, url_for
from flask_login import login_required, current_user

from campanion import store
from campanion.filters import SortOrder, sort_camps
from campanion.main import main_bp
from campanion.models import Camp
from campanion.visibility import current_viewer, visible_camps


@main_bp.route('/')
def index():
    """
    Home page route.

    Sends everyone to camp discovery, the app's landing view.
    """
    return redirect(url_for('camps.list_camps'))


@main_bp.route('/dashboard')
@login_required
def dashboard():
    """
    User dashboard page.

    Shows the user's profile and the camps they created that they are
    allowed to see, newest first.
    """
    viewer = current_viewer()
    own = store.camps.list(Camp.creator_id == viewer.uid)
    camps = sort_camps(visible_camps(own, viewer), SortOrder.NEWEST)
    return render_template('main/dashboard.html', user=current_user, camps=camps)
