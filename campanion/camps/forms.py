"""
Forms for camp management and camp search.

CampForm backs both creation and editing; CampFilterForm reads the search
criteria of the public listing from the query string.
"""

from flask_wtf import FlaskForm
from wtforms import (
    StringField, TextAreaField, DateField, FloatField, SelectField, SubmitField,
)
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional, URL, ValidationError

from campanion.filters import CampCriteria
from campanion.models import CampStatus, split_activities


def _optional_int(value):
    """Coerce select values, mapping the blank choice to None."""
    if value in (None, '', 'None'):
        return None
    return int(value)


class CampForm(FlaskForm):
    """
    Form for creating and editing camps.

    The 'extract' button fills the form from the page at original_link
    instead of saving.
    """

    original_link = StringField(
        'Original Link',
        validators=[Optional(), URL(message='Please enter a valid URL.')],
        render_kw={'placeholder': 'https://original-source.com/camp'}
    )

    name = StringField(
        'Camp Name',
        validators=[
            DataRequired(message='Camp name is required'),
            Length(min=3, max=255, message='Camp name must be at least 3 characters.')
        ],
        render_kw={'placeholder': 'Enter camp name'}
    )

    organizer_id = SelectField('Organizer', coerce=_optional_int, validate_choice=False)

    description = TextAreaField(
        'Description',
        validators=[
            DataRequired(message='Description is required'),
            Length(min=10, message='Description must be at least 10 characters.')
        ],
        render_kw={'placeholder': 'Describe your camp', 'rows': 5}
    )

    start_date = DateField('Start Date', validators=[Optional()])
    end_date = DateField('End Date', validators=[Optional()])

    location = StringField(
        'Location',
        validators=[
            DataRequired(message='Location is required.'),
            Length(min=3, max=255, message='Location is required.')
        ],
        render_kw={'placeholder': 'e.g., Rocky Mountains, CO'}
    )

    price = FloatField(
        'Price',
        validators=[
            InputRequired(message='Price is required.'),
            NumberRange(min=0, message='Price must be a positive number.')
        ],
        render_kw={'placeholder': 'Enter price', 'min': 0, 'step': '0.01'}
    )

    image_url = StringField(
        'Image URL',
        validators=[Optional(), URL(message='Please enter a valid image URL.')],
        render_kw={'placeholder': 'https://example.com/image.jpg'}
    )

    activities = StringField(
        'Activities',
        validators=[Optional()],
        render_kw={'placeholder': 'Hiking, Swimming, Coding'}
    )

    status = SelectField(
        'Status',
        choices=[(status.value, status.value.title()) for status in CampStatus],
        default=CampStatus.DRAFT.value
    )

    extract = SubmitField('Extract Details')
    submit = SubmitField('Save Camp')

    def validate_end_date(self, field):
        """
        Validate that the end date is not before the start date.

        Raises:
            ValidationError: If end_date is earlier than start_date
        """
        if self.start_date.data and field.data:
            if field.data < self.start_date.data:
                raise ValidationError('End date must be on or after start date.')

    def set_organizer_choices(self, organizers):
        """Populate the organizer selector, with a blank first entry."""
        self.organizer_id.choices = [(None, 'No organizer')] + [
            (organizer.id, organizer.name) for organizer in organizers
        ]

    def to_fields(self):
        """Camp fields as accepted by the transition operations."""
        return {
            'name': self.name.data,
            'organizer_id': self.organizer_id.data,
            'description': self.description.data,
            'start_date': self.start_date.data,
            'end_date': self.end_date.data,
            'location': self.location.data,
            'price': self.price.data,
            'image_url': self.image_url.data or None,
            'activities': split_activities(self.activities.data),
            'status': self.status.data,
            'original_link': self.original_link.data or None,
        }

    def load(self, values):
        """Pre-populate the form from a camp field mapping."""
        for name in ('name', 'organizer_id', 'description', 'start_date', 'end_date',
                     'location', 'price', 'image_url', 'status', 'original_link'):
            if name in values:
                getattr(self, name).data = values[name]
        if 'activities' in values:
            self.activities.data = ', '.join(values['activities'] or [])


class CampFilterForm(FlaskForm):
    """
    Search and filter criteria for the public camp listing.

    Submitted with GET and no page number, so applying filters always
    starts again from page 1.
    """

    class Meta:
        csrf = False

    q = StringField('Search', validators=[Optional()],
                    render_kw={'placeholder': 'Search camps, activities...'})
    organizer = SelectField('Organizer', coerce=_optional_int, validate_choice=False)
    location = SelectField('Location', validate_choice=False)
    date_from = DateField('From', validators=[Optional()])
    date_to = DateField('To', validators=[Optional()])
    price_min = FloatField('Min Price', validators=[Optional(), NumberRange(min=0)])
    price_max = FloatField('Max Price', validators=[Optional(), NumberRange(min=0)])
    submit = SubmitField('Apply Filters')

    def set_choices(self, organizers, locations):
        self.organizer.choices = [(None, 'All organizers')] + [
            (organizer.id, organizer.name) for organizer in organizers
        ]
        self.location.choices = [('', 'All locations')] + [(loc, loc) for loc in locations]

    def to_criteria(self, ceiling):
        """
        Build criteria from the submitted values.

        A price range is only applied when at least one bound was given;
        the missing bound defaults to 0 or the price ceiling.
        """
        price_range = None
        if self.price_min.data is not None or self.price_max.data is not None:
            low = self.price_min.data if self.price_min.data is not None else 0
            high = self.price_max.data if self.price_max.data is not None else ceiling
            price_range = (low, high)
        return CampCriteria(
            search=(self.q.data or '').strip() or None,
            organizer_id=self.organizer.data,
            location=self.location.data or None,
            price_range=price_range,
            date_from=self.date_from.data,
            date_to=self.date_to.data,
        )
