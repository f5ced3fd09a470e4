"""Admin blueprint: the administrator's camps, started-camp review and organizers."""

from flask import Blueprint

admin_bp = Blueprint('admin', __name__)

from campanion.admin import routes  # noqa: E402,F401
