"""
Database models for the application.

This module defines SQLAlchemy models for users, organizers and camps.
Camps carry a lifecycle status (draft, active, archive) and a snapshot of
their organizer's name and link taken when the camp is written.
"""

from datetime import datetime
from enum import Enum
from urllib.parse import quote_plus

from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

from campanion import db

CAMP_IMAGE_PLACEHOLDER = 'https://picsum.photos/seed/{seed}/600/400'
ORGANIZER_AVATAR_PLACEHOLDER = 'https://api.dicebear.com/7.x/initials/svg?seed={seed}'
UNKNOWN_ORGANIZER_NAME = 'Unknown Organizer'
NO_DATES_LABEL = 'Dates not specified'


class CampStatus(str, Enum):
    """
    Stored lifecycle status of a camp listing.

    - DRAFT: work in progress, visible only to its creating administrator
    - ACTIVE: published and bookable
    - ARCHIVE: retired from public listings
    """
    DRAFT = 'draft'
    ACTIVE = 'active'
    ARCHIVE = 'archive'

    @classmethod
    def values(cls):
        """Return the raw stored values."""
        return [status.value for status in cls]


class CreationMode(str, Enum):
    """Provenance tag recorded when a camp is created."""
    ADMIN = 'admin'
    USER = 'user'


class User(UserMixin, db.Model):
    """
    User model for storing user account information.

    Inherits from UserMixin to provide Flask-Login required properties.
    Only the id (ownership checks) and is_admin (elevated rights) feed the
    camp policy functions.
    """

    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    picture = db.Column(db.String(500), nullable=True)  # Profile picture URL from Google

    # Google subject identifier for accounts created through OpenID Connect
    google_id = db.Column(db.String(255), unique=True, nullable=True)

    # password_hash is nullable for Google-only users
    password_hash = db.Column(db.String(255), nullable=True)

    is_admin = db.Column(db.Boolean, default=False, nullable=False, server_default='false')

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    last_login = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        """String representation of User object."""
        return f'<User {self.email}>'

    def update_last_login(self):
        """Update the last_login timestamp to current time."""
        self.last_login = datetime.utcnow()
        db.session.commit()

    def set_password(self, password):
        """
        Hash and store a password via Werkzeug.

        Args:
            password (str): Plain text password to hash and store.
        """
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """
        Verify a password against the stored hash.

        Args:
            password (str): Plain text password to verify.

        Returns:
            bool: True if password matches, False otherwise.
        """
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)


class Organizer(db.Model):
    """
    Organizer profile referenced by camps.

    Camps copy the organizer's name and link when they are written, so
    editing or deleting an organizer never changes existing camps.
    """

    __tablename__ = 'organizers'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    link = db.Column(db.String(500), nullable=True)
    description = db.Column(db.Text, nullable=False, default='')
    avatar_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        """String representation of Organizer object."""
        return f'<Organizer {self.name}>'

    @property
    def display_avatar_url(self):
        """Avatar URL, falling back to a placeholder generated from the name."""
        return self.avatar_url or default_avatar_url(self.name)


class Camp(db.Model):
    """
    Camp listing.

    creator_id is the ownership anchor: it is set at creation and never
    changes. organizer_id is a plain column (no foreign key), and
    organizer_name/organizer_link are a snapshot of the organizer taken at
    write time.
    """

    __tablename__ = 'camps'

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    location = db.Column(db.String(255), nullable=False, default='')

    # Calendar dates; absence means the camp is unscheduled
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    dates = db.Column(db.String(100), nullable=False, default=NO_DATES_LABEL)

    price = db.Column(db.Float, nullable=False, default=0)
    image_url = db.Column(db.String(500), nullable=True)
    activities = db.Column(db.JSON, nullable=False, default=list)
    original_link = db.Column(db.String(500), nullable=True)

    organizer_id = db.Column(db.Integer, nullable=True, index=True)
    organizer_name = db.Column(db.String(255), nullable=True)
    organizer_link = db.Column(db.String(500), nullable=True)

    creator_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    creation_mode = db.Column(db.String(10), nullable=False, default=CreationMode.ADMIN.value)

    status = db.Column(db.String(20), nullable=False,
                       default=CampStatus.DRAFT.value,
                       server_default=CampStatus.DRAFT.value,
                       index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    creator = db.relationship('User', backref='created_camps', lazy=True)

    # Fields an edit may never touch
    IMMUTABLE_FIELDS = frozenset({'id', 'creator_id', 'creation_mode', 'created_at'})

    # Fields carried over verbatim by a copy
    COPIED_FIELDS = (
        'name', 'description', 'location', 'start_date', 'end_date', 'dates',
        'price', 'image_url', 'activities', 'original_link', 'organizer_id',
        'organizer_name', 'organizer_link', 'creation_mode',
    )

    def __repr__(self):
        """String representation of Camp object."""
        return f'<Camp {self.name} [{self.status}]>'

    @property
    def display_image_url(self):
        """Image URL, falling back to the placeholder keyed by name."""
        return self.image_url or default_image_url(self.name)

    @property
    def display_organizer_name(self):
        return self.organizer_name or UNKNOWN_ORGANIZER_NAME

    def to_dict(self):
        """Plain field mapping used for copies and form pre-population."""
        data = {field: getattr(self, field) for field in self.COPIED_FIELDS}
        data['activities'] = list(self.activities or [])
        data['status'] = self.status
        return data


def default_image_url(name):
    """Placeholder camp image keyed by the camp name."""
    seed = '-'.join((name or 'camp').split())
    return CAMP_IMAGE_PLACEHOLDER.format(seed=quote_plus(seed))


def default_avatar_url(name):
    """Placeholder organizer avatar keyed by the organizer name."""
    return ORGANIZER_AVATAR_PLACEHOLDER.format(seed=quote_plus(name or 'organizer'))


def format_dates_label(start_date, end_date):
    """
    Build the human readable date range shown on listings.

    Returns:
        str: e.g. 'Jul 1 - Jul 10, 2024', or NO_DATES_LABEL when either
        endpoint is missing.
    """
    if not start_date or not end_date:
        return NO_DATES_LABEL
    return f"{start_date.strftime('%b')} {start_date.day} - {end_date.strftime('%b')} {end_date.day}, {end_date.year}"


def split_activities(text):
    """Split comma-separated activities, trimming blanks."""
    if not text:
        return []
    return [activity.strip() for activity in text.split(',') if activity.strip()]
