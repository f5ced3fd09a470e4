"""Main blueprint: home page and user dashboard."""

from flask import Blueprint

main_bp = Blueprint('main', __name__)

from campanion.main import routes  # noqa: E402,F401
