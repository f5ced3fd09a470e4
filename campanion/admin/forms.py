"""
Forms for organizer administration.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField, SubmitField
from wtforms.validators import DataRequired, Length, Optional, URL


class OrganizerForm(FlaskForm):
    """
    Form for creating and editing organizer profiles.

    Leaving the avatar blank uses a placeholder generated from the name.
    """

    name = StringField(
        'Organizer Name',
        validators=[
            DataRequired(message='Organizer name is required'),
            Length(max=255, message='Name must be less than 255 characters')
        ],
        render_kw={'placeholder': 'e.g., Summer Adventures Ltd'}
    )

    link = StringField(
        'Website',
        validators=[Optional(), URL(message='Please enter a valid URL.')],
        render_kw={'placeholder': 'https://organizer.example.com'}
    )

    description = TextAreaField(
        'Description',
        validators=[Optional()],
        render_kw={'placeholder': 'About the organizer...', 'rows': 4}
    )

    avatar_url = StringField(
        'Avatar URL',
        validators=[Optional(), URL(message='Please enter a valid image URL.')],
        render_kw={'placeholder': 'https://example.com/avatar.png'}
    )

    submit = SubmitField('Save Organizer')

    def to_fields(self):
        return {
            'name': self.name.data,
            'link': self.link.data or None,
            'description': self.description.data or '',
            'avatar_url': self.avatar_url.data or None,
        }
