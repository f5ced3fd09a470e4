from datetime import date, datetime, timedelta

import pytest

from campanion import create_app, db
from campanion.models import Camp, CampStatus, Organizer, User

PASSWORD = 'secret123'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(email, is_admin=False):
    user = User(email=email, name=email.split('@')[0], is_admin=is_admin)
    user.set_password(PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin(app):
    return _make_user('admin@example.com', is_admin=True)


@pytest.fixture
def other_admin(app):
    return _make_user('other-admin@example.com', is_admin=True)


@pytest.fixture
def member(app):
    return _make_user('member@example.com')


@pytest.fixture
def organizer(app):
    organizer = Organizer(name='Summer Adventures', link='https://adventures.example.com',
                          description='Outdoor camps')
    db.session.add(organizer)
    db.session.commit()
    return organizer


@pytest.fixture
def make_camp(app):
    """Persist a camp owned by ``creator`` with sensible defaults."""
    def factory(creator, **fields):
        data = {
            'name': 'Forest Camp',
            'description': 'Two weeks in the forest',
            'location': 'Pine Valley',
            'price': 1000,
            'status': CampStatus.ACTIVE.value,
            'activities': ['hiking'],
            'created_at': datetime(2024, 1, 1, 12, 0),
        }
        data.update(fields)
        camp = Camp(creator_id=creator.id, **data)
        db.session.add(camp)
        db.session.commit()
        return camp
    return factory


def new_camp(**fields):
    """Transient camp for pure policy and filter tests."""
    data = {
        'name': 'Lake Camp',
        'description': 'Sailing and swimming',
        'location': 'Blue Lake',
        'price': 500,
        'status': CampStatus.ACTIVE.value,
        'activities': [],
        'creator_id': 1,
        'created_at': datetime(2024, 1, 1),
    }
    data.update(fields)
    return Camp(**data)


def login(client, user):
    return client.post('/auth/login', data={'email': user.email, 'password': PASSWORD})


def days_from_today(days):
    return date.today() + timedelta(days=days)
