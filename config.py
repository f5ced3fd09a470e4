"""
Application configuration.

Configuration classes are selected by name in create_app(). Values are
read from environment variables, optionally loaded from a local .env file.
"""

import os

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


def _env_flag(name, default=False):
    """Read a boolean flag from the environment ('1', 'true', 'yes' are true)."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """
    Base configuration shared by every environment.
    """

    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL', 'sqlite:///' + os.path.join(basedir, 'campanion.db')
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Google OpenID Connect sign-in
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID')
    GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET')
    GOOGLE_DISCOVERY_URL = 'https://accounts.google.com/.well-known/openid-configuration'

    # Emails promoted to administrator on first sign-in (comma-separated)
    ADMIN_EMAILS = [
        email.strip().lower()
        for email in os.environ.get('ADMIN_EMAILS', '').split(',')
        if email.strip()
    ]

    # Camp data extraction from a web page
    OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
    EXTRACTION_MODEL = os.environ.get('EXTRACTION_MODEL', 'gpt-4o-mini')
    EXTRACTION_TIMEOUT = float(os.environ.get('EXTRACTION_TIMEOUT', '30'))

    # Listings
    CAMPS_PER_PAGE = 15
    COPY_NAME_SUFFIX = ' (Copy)'

    # Policy switches
    # STRICT_STATUS: raise on an unrecognized camp status instead of showing it as Draft
    STRICT_STATUS = _env_flag('STRICT_STATUS')
    # STRICT_DETAIL_VISIBILITY: only the creating admin may open hidden camp pages
    STRICT_DETAIL_VISIBILITY = _env_flag('STRICT_DETAIL_VISIBILITY')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration with debug enabled."""

    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing configuration using an in-memory database."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'testing-secret-key'
    GOOGLE_CLIENT_ID = 'test-client-id'
    GOOGLE_CLIENT_SECRET = 'test-client-secret'
    OPENAI_API_KEY = 'test-key'
    ADMIN_EMAILS = ['admin@example.com']
    STRICT_STATUS = False
    STRICT_DETAIL_VISIBILITY = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}
