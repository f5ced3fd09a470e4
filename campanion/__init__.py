"""
Application factory module.

This module implements the Flask application factory pattern.
It initializes and configures all Flask extensions (SQLAlchemy, Flask-Login,
Flask-Migrate, Authlib OAuth) and registers application blueprints.
"""

import click
from flask import Flask, render_template
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from authlib.integrations.flask_client import OAuth
from config import config

# Initialize Flask extensions
# These are initialized here but configured in create_app()
db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
oauth = OAuth()


def create_app(config_name='development'):
    """
    Application factory function.

    Creates and configures a Flask application instance based on the
    specified configuration name (development, production, or testing).

    Args:
        config_name (str): Configuration environment name. Defaults to 'development'.

    Returns:
        Flask: Configured Flask application instance.
    """

    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    oauth.init_app(app)

    # Configure Flask-Login
    login_manager.login_view = 'auth.login'  # Redirect to login page if not authenticated
    login_manager.login_message = 'Please log in to access this page.'
    login_manager.login_message_category = 'info'

    @login_manager.user_loader
    def load_user(user_id):
        """
        Load user by ID from database.

        Flask-Login calls this function to reload the user object from
        the user ID stored in the session.
        """
        from campanion.models import User
        return db.session.get(User, int(user_id))

    configure_oauth(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    @app.context_processor
    def inject_viewer():
        """Expose the explicit viewer context to every template."""
        from campanion.visibility import current_viewer
        return {'viewer': current_viewer()}

    return app


def configure_oauth(app):
    """
    Configure the Google OpenID Connect provider.

    Registers the OAuth client with Authlib using configuration values
    from the Flask app config.

    Args:
        app (Flask): Flask application instance.
    """

    oauth.register(
        name='google',
        client_id=app.config['GOOGLE_CLIENT_ID'],
        client_secret=app.config['GOOGLE_CLIENT_SECRET'],
        server_metadata_url=app.config['GOOGLE_DISCOVERY_URL'],
        client_kwargs={
            'scope': 'openid email profile'
        }
    )


def register_error_handlers(app):
    """
    Register error handlers for HTTP errors and the camp error taxonomy.

    Permission failures render the 403 page, hidden or missing records the
    404 page, store or extraction outages the 503 page, and camps with an
    unrecognized status (strict status mode only) the 422 page.

    Args:
        app (Flask): Flask application instance.
    """
    from campanion.errors import PermissionDenied, NotFound, CollaboratorFailure, UnknownStatus

    @app.errorhandler(403)
    @app.errorhandler(PermissionDenied)
    def forbidden(e):
        """Handle 403 Forbidden errors."""
        return render_template('errors/403.html'), 403

    @app.errorhandler(404)
    @app.errorhandler(NotFound)
    def not_found(e):
        """Handle 404 Not Found errors."""
        return render_template('errors/404.html'), 404

    @app.errorhandler(CollaboratorFailure)
    def unavailable(e):
        """Handle store or extraction service outages."""
        app.logger.warning("Collaborator failure: %s", e)
        return render_template('errors/503.html', error=e), 503

    @app.errorhandler(UnknownStatus)
    def invalid_status(e):
        """Handle a stored camp status that strict status mode refuses to display."""
        app.logger.error("Unrecognized camp status: %r", e.raw_status)
        return render_template('errors/422.html', error=e), 422


def register_blueprints(app):
    """
    Register application blueprints.

    Args:
        app (Flask): Flask application instance.
    """

    from campanion.auth import auth_bp
    from campanion.main import main_bp
    from campanion.admin import admin_bp
    from campanion.camps import camps_bp

    # All auth routes will be prefixed with /auth
    app.register_blueprint(auth_bp, url_prefix='/auth')

    # Main routes have no prefix (e.g., /, /dashboard)
    app.register_blueprint(main_bp)

    # All admin routes will be prefixed with /admin
    app.register_blueprint(admin_bp, url_prefix='/admin')

    # All camps routes will be prefixed with /camps
    app.register_blueprint(camps_bp, url_prefix='/camps')


def register_commands(app):
    """
    Register command line helpers.

    Args:
        app (Flask): Flask application instance.
    """

    @app.cli.command('promote-admin')
    @click.argument('email')
    def promote_admin(email):
        """Grant administrator rights to the user with EMAIL."""
        from campanion.models import User
        user = User.query.filter_by(email=email.lower()).first()
        if user is None:
            raise click.ClickException(f'No user with email {email}')
        user.is_admin = True
        db.session.commit()
        app.logger.info("Promoted %s to administrator", user.email)
        click.echo(f'{user.email} is now an administrator.')
