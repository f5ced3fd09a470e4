"""Camps blueprint: public listing, detail pages and camp management."""

from flask import Blueprint

camps_bp = Blueprint('camps', __name__)

from campanion.camps import routes  # noqa: E402,F401
