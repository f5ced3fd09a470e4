"""
View decorators shared by the blueprints.
"""

from functools import wraps

from flask import abort, flash

from campanion.visibility import current_viewer


def admin_required(view):
    """
    Restrict a view to administrators.

    Must be applied after @login_required so anonymous users are sent to
    the login page rather than getting a 403.
    """
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_viewer().is_admin:
            flash('You do not have permission to view this page.', 'error')
            abort(403)
        return view(*args, **kwargs)
    return wrapped
