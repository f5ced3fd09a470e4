"""
Sign-up and sign-in forms.

Email addresses are normalized (trimmed, lowercased) by the form itself so
the routes and the ADMIN_EMAILS check always compare the same spelling.
Google accounts sign in without a form.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, BooleanField, SubmitField
from wtforms.validators import DataRequired, Email, EqualTo, Length, ValidationError

from campanion.models import User

MIN_PASSWORD_LENGTH = 8


def normalize_email(value):
    """Trim and lowercase an email address; leaves None alone."""
    return value.strip().lower() if value else value


class RegistrationForm(FlaskForm):
    """
    Campanion account sign-up.

    New accounts are regular users; an address listed in ADMIN_EMAILS is
    made an administrator by the register view, not by this form.
    """

    email = StringField(
        'Email',
        filters=[normalize_email],
        validators=[DataRequired(), Email(), Length(max=255)],
        render_kw={'placeholder': 'you@example.com', 'autocomplete': 'email'}
    )
    name = StringField(
        'Your Name',
        validators=[DataRequired(), Length(max=255)],
        render_kw={'placeholder': 'Shown on the camps you list'}
    )
    password = PasswordField(
        'Password',
        validators=[
            DataRequired(),
            Length(min=MIN_PASSWORD_LENGTH,
                   message=f'Use at least {MIN_PASSWORD_LENGTH} characters.')
        ],
        render_kw={'autocomplete': 'new-password'}
    )
    confirm_password = PasswordField(
        'Repeat Password',
        validators=[DataRequired(), EqualTo('password', message='The passwords do not match.')],
        render_kw={'autocomplete': 'new-password'}
    )
    submit = SubmitField('Sign Up')

    def validate_email(self, field):
        # Google-only accounts have no password; point them at Google sign-in
        user = User.query.filter_by(email=field.data).first()
        if user is None:
            return
        if user.google_id and not user.password_hash:
            raise ValidationError('This email signs in with Google. Use "Sign in with Google" instead.')
        raise ValidationError('An account with this email already exists. Log in instead.')


class LoginForm(FlaskForm):
    """Email/password sign-in."""

    email = StringField(
        'Email',
        filters=[normalize_email],
        validators=[DataRequired(), Email()],
        render_kw={'autocomplete': 'email'}
    )
    password = PasswordField(
        'Password',
        validators=[DataRequired()],
        render_kw={'autocomplete': 'current-password'}
    )
    remember_me = BooleanField('Stay signed in')
    submit = SubmitField('Log In')
