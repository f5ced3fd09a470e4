"""Authentication blueprint: email/password and Google sign-in."""

from flask import Blueprint

auth_bp = Blueprint('auth', __name__)

from campanion.auth import routes  # noqa: E402,F401
