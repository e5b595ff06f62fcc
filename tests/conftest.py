import pytest

from createverse import create_app
from createverse.extensions import db
from createverse.models import StaffUser
from createverse.services.settings_service import SettingsService

STAFF_USERNAME = 'desk'
STAFF_PASSWORD = 'scan-all-the-things'


def make_members(prefix, count=4):
    """Valid member payloads, leader first."""
    return [
        {
            'full_name': f'member {prefix} {i}',
            'identifier': f'{prefix}{1000 + i}',
            'gender': 'Female' if i % 2 else 'Male',
            'department': 'CSE',
            'year': '2',
            'section': 'A',
            'email': f'{prefix.lower()}{i}@example.edu',
            'mobile': f'98765432{i:02d}',
        }
        for i in range(count)
    ]


@pytest.fixture()
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def ctx(app):
    """An application context for calling services directly."""
    with app.app_context():
        yield app


@pytest.fixture()
def open_registrations(ctx):
    SettingsService().set_registrations_open(True)
    return ctx


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def staff_client(app):
    with app.app_context():
        user = StaffUser(username=STAFF_USERNAME, email='desk@example.edu')
        user.set_password(STAFF_PASSWORD)
        db.session.add(user)
        db.session.commit()

    client = app.test_client()
    res = client.post('/auth/login', json={'username': STAFF_USERNAME, 'password': STAFF_PASSWORD})
    assert res.status_code == 200
    return client
