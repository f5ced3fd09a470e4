"""
Authentication routes.

Email/password accounts and Google OpenID Connect sign-in. Google accounts
are matched to existing users by email. New users are regular users unless
their email is listed in ADMIN_EMAILS.
"""

from flask import render_template, redirect, url_for, flash, request, current_app
from flask_login import login_user, logout_user, login_required, current_user
from authlib.integrations.base_client.errors import OAuthError

from campanion import db, oauth
from campanion.auth import auth_bp
from campanion.auth.forms import RegistrationForm, LoginForm
from campanion.models import User


def _is_listed_admin(email):
    return email.lower() in current_app.config.get('ADMIN_EMAILS', [])


def _safe_next():
    """Only follow relative redirect targets."""
    target = request.args.get('next')
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('main.dashboard')


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    """
    Register a new email/password account and sign it in.

    Returns:
        On GET: Rendered registration form.
        On POST: Redirect to the dashboard.
    """
    if current_user.is_authenticated:
        return redirect(url_for('main.dashboard'))

    form = RegistrationForm()

    if form.validate_on_submit():
        email = form.email.data
        user = User(email=email, name=form.name.data, is_admin=_is_listed_admin(email))
        user.set_password(form.password.data)
        db.session.add(user)
        db.session.commit()
        current_app.logger.info("Registered user %s", user.id)

        login_user(user)
        flash('Account created. Welcome to Campanion!', 'success')
        return redirect(url_for('main.dashboard'))

    return render_template('auth/register.html', form=form)


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """
    Email/password login.

    Returns:
        On GET: Rendered login form.
        On POST: Redirect to the requested page or the dashboard.
    """
    if current_user.is_authenticated:
        return redirect(url_for('main.dashboard'))

    form = LoginForm()

    if form.validate_on_submit():
        user = User.query.filter_by(email=form.email.data).first()
        if user is None or not user.check_password(form.password.data):
            flash('Invalid email or password.', 'error')
            return render_template('auth/login.html', form=form)

        login_user(user, remember=form.remember_me.data)
        user.update_last_login()
        return redirect(_safe_next())

    return render_template('auth/login.html', form=form)


@auth_bp.route('/login/google')
def login_google():
    """Start the Google OpenID Connect flow."""
    redirect_uri = url_for('auth.google_callback', _external=True)
    return oauth.google.authorize_redirect(redirect_uri)


@auth_bp.route('/callback/google')
def google_callback():
    """
    Finish Google sign-in.

    Links the Google account to an existing user with the same email, or
    creates a new user.
    """
    try:
        token = oauth.google.authorize_access_token()
    except OAuthError as exc:
        current_app.logger.warning("Google sign-in failed: %s", exc)
        flash('Could not sign in with Google. Please try again.', 'error')
        return redirect(url_for('auth.login'))

    userinfo = token.get('userinfo') or {}
    email = (userinfo.get('email') or '').lower()
    if not email:
        flash('Google did not share an email address for this account.', 'error')
        return redirect(url_for('auth.login'))

    user = User.query.filter_by(google_id=userinfo.get('sub')).first() or \
        User.query.filter_by(email=email).first()
    if user is None:
        user = User(email=email, is_admin=_is_listed_admin(email))
        db.session.add(user)
        current_app.logger.info("Creating user for Google account %s", email)

    user.google_id = userinfo.get('sub')
    user.name = user.name or userinfo.get('name')
    user.picture = userinfo.get('picture')
    db.session.commit()

    login_user(user)
    user.update_last_login()
    flash('Signed in with Google.', 'success')
    return redirect(url_for('main.dashboard'))


@auth_bp.route('/logout')
@login_required
def logout():
    """Log the current user out."""
    logout_user()
    flash('You have been logged out.', 'info')
    return redirect(url_for('main.index'))
