from datetime import datetime, timedelta
from io import BytesIO

import pandas as pd
import pytest

from createverse.extensions import db
from createverse.models import AttendanceRecord, Team
from createverse.services.settings_service import SettingsService
from tests.conftest import make_members


def _open(app, limit=None):
    with app.app_context():
        settings = SettingsService()
        settings.set_registrations_open(True)
        if limit is not None:
            settings.set_registration_limit(limit)


def _register(client, name, prefix):
    return client.post('/register', json={'team_name': name, 'members': make_members(prefix)})


@pytest.fixture()
def registered(app, client):
    _open(app)
    assert _register(client, 'Alpha', 'A').status_code == 201
    return app


# Health

def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'ok'


def test_database_health(client):
    res = client.get('/health/database')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'healthy'


# Registration

def test_status_closed_by_default(client):
    body = client.get('/register/status').get_json()
    assert body['registrations_open'] is False
    assert body['limit'] == 0
    assert body['remaining'] is None


def test_register_team(app, client):
    _open(app)

    res = _register(client, 'Alpha', 'A')

    assert res.status_code == 201
    team = res.get_json()['team']
    assert team['name'] == 'Alpha'
    assert team['member_count'] == 4
    assert [m['identifier'] for m in team['members']] == ['A1000', 'A1001', 'A1002', 'A1003']
    assert team['members'][0]['is_leader'] is True


def test_register_closed(client):
    res = _register(client, 'Alpha', 'A')
    assert res.status_code == 403
    assert res.get_json()['error_code'] == 'REGISTRATIONS_CLOSED'


def test_register_invalid_form(app, client):
    _open(app)
    members = make_members('A')
    members[1]['mobile'] = '12345'
    members[2]['year'] = '9'

    res = client.post('/register', json={'team_name': 'Alpha', 'members': members})

    assert res.status_code == 400
    body = res.get_json()
    assert body['error_code'] == 'INVALID_INPUT'
    assert any('Member 2 mobile' in error for error in body['errors'])
    assert any('Member 3 year' in error for error in body['errors'])


def test_register_wrong_member_count(app, client):
    _open(app)
    res = client.post('/register', json={'team_name': 'Alpha', 'members': make_members('A', count=3)})
    assert res.status_code == 400
    assert 'A team must have exactly 4 members' in res.get_json()['errors']


def test_register_duplicate_inside_team(app, client):
    _open(app)
    members = make_members('A')
    members[3]['identifier'] = 'A1000'

    res = client.post('/register', json={'team_name': 'Alpha', 'members': members})

    assert res.status_code == 400
    assert 'Each member needs a different registration number' in res.get_json()['errors']


def test_register_not_json(app, client):
    _open(app)
    res = client.post('/register', data='team_name=Alpha')
    assert res.status_code == 400


def test_register_duplicate_identifier_rolls_back(registered, client):
    members = make_members('B')
    members[2]['identifier'] = 'A1001'

    res = client.post('/register', json={'team_name': 'Bravo', 'members': members})

    assert res.status_code == 409
    assert res.get_json()['error_code'] == 'DUPLICATE_IDENTIFIER'
    with registered.app_context():
        assert [team.name for team in Team.query.all()] == ['Alpha']


def test_register_duplicate_email(registered, client):
    members = make_members('B')
    members[0]['email'] = 'A3@EXAMPLE.edu'

    res = client.post('/register', json={'team_name': 'Bravo', 'members': members})

    assert res.status_code == 409
    assert res.get_json()['error_code'] == 'DUPLICATE_EMAIL'


def test_register_capacity(app, client):
    _open(app, limit=1)
    assert _register(client, 'Alpha', 'A').status_code == 201

    res = _register(client, 'Bravo', 'B')

    assert res.status_code == 409
    assert res.get_json()['error_code'] == 'CAPACITY_EXCEEDED'
    status = client.get('/register/status').get_json()
    assert status['registered'] == 1
    assert status['is_full'] is True


# Auth

def test_login_rejects_bad_password(staff_client, client):
    res = client.post('/auth/login', json={'username': 'desk', 'password': 'nope'})
    assert res.status_code == 401
    assert res.get_json()['error_code'] == 'INVALID_CREDENTIALS'


def test_me_and_logout(staff_client):
    assert staff_client.get('/auth/me').get_json()['user']['username'] == 'desk'
    assert staff_client.post('/auth/logout').status_code == 200
    assert staff_client.get('/auth/me').status_code == 401


@pytest.mark.parametrize('method, url', [
    ('post', '/check-in/scan'),
    ('post', '/check-in/manual'),
    ('get', '/check-in/records'),
    ('get', '/admin/teams'),
    ('get', '/admin/settings'),
])
def test_staff_routes_need_login(client, method, url):
    res = getattr(client, method)(url, json={})
    assert res.status_code == 401
    assert res.get_json()['error_code'] == 'AUTH_REQUIRED'


# Check-in

def test_manual_check_in_then_duplicate(registered, staff_client):
    res = staff_client.post('/check-in/manual', json={'identifier': ' A1001 '})
    assert res.status_code == 201
    body = res.get_json()
    assert body['member']['full_name'] == 'Member A 1'
    assert body['member']['team'] == 'Alpha'
    assert body['record']['identifier'] == 'A1001'

    res = staff_client.post('/check-in/manual', json={'identifier': 'A1001'})
    assert res.status_code == 409
    assert res.get_json()['error_code'] == 'ALREADY_CHECKED_IN'


def test_manual_check_in_errors(registered, staff_client):
    res = staff_client.post('/check-in/manual', json={'identifier': 'Z9999'})
    assert res.status_code == 404
    assert res.get_json()['error_code'] == 'NOT_FOUND'

    res = staff_client.post('/check-in/manual', json={'identifier': '   '})
    assert res.status_code == 400
    assert res.get_json()['error_code'] == 'INVALID_INPUT'


def test_scan_repeat_is_ignored(registered, staff_client):
    first = staff_client.post('/check-in/scan', json={'value': 'A1002', 'station_id': 'gate'})
    second = staff_client.post('/check-in/scan', json={'value': 'A1002', 'station_id': 'gate'})

    assert first.status_code == 201
    assert first.get_json()['status'] == 'checked_in'
    assert second.status_code == 202
    assert second.get_json()['status'] == 'ignored'


def test_scan_from_second_station_is_already_checked_in(registered, staff_client):
    staff_client.post('/check-in/scan', json={'value': 'A1002', 'station_id': 'gate'})
    res = staff_client.post('/check-in/scan', json={'value': 'A1002', 'station_id': 'hall'})

    assert res.status_code == 409
    assert res.get_json()['status'] == 'already_checked_in'


def test_scan_requires_station_id(registered, staff_client):
    res = staff_client.post('/check-in/scan', json={'value': 'A1001'})

    assert res.status_code == 400
    assert res.get_json()['error_code'] == 'INVALID_INPUT'
    with registered.app_context():
        assert AttendanceRecord.query.count() == 0


def test_scan_station_id_from_header(registered, staff_client):
    first = staff_client.post('/check-in/scan', json={'value': 'A1001'}, headers={'X-Station-Id': 'gate'})
    second = staff_client.post('/check-in/scan', json={'value': 'A1001'}, headers={'X-Station-Id': 'hall'})

    assert first.status_code == 201
    assert first.get_json()['station_id'] == 'gate'
    # Another device is never debounced against the first one
    assert second.status_code == 409
    assert second.get_json()['status'] == 'already_checked_in'


def test_scan_invalid_and_unknown(registered, staff_client):
    res = staff_client.post('/check-in/scan', json={'value': 'x', 'station_id': 'gate'})
    assert res.status_code == 400
    assert res.get_json()['status'] == 'invalid'

    res = staff_client.post('/check-in/scan', json={'value': 'Z9999', 'station_id': 'gate'})
    assert res.status_code == 404
    assert res.get_json()['status'] == 'not_found'


def test_lookup(registered, staff_client):
    res = staff_client.get('/check-in/lookup/A1003')
    assert res.status_code == 200
    assert res.get_json()['member']['identifier'] == 'A1003'

    assert staff_client.get('/check-in/lookup/Z9999').status_code == 404


def test_remove_and_check_in_again(registered, staff_client):
    staff_client.post('/check-in/manual', json={'identifier': 'A1000'})

    res = staff_client.delete('/check-in/A1000')
    assert res.get_json()['removed'] == 1
    assert staff_client.delete('/check-in/A1000').get_json()['removed'] == 0

    assert staff_client.post('/check-in/manual', json={'identifier': 'A1000'}).status_code == 201


def test_records_summary_and_clear(registered, staff_client):
    for identifier in ('A1000', 'A1001'):
        staff_client.post('/check-in/manual', json={'identifier': identifier})

    records = staff_client.get('/check-in/records').get_json()['records']
    assert {record['identifier'] for record in records} == {'A1000', 'A1001'}

    summary = staff_client.get('/check-in/summary').get_json()
    assert summary['checked_in'] == 2
    assert summary['absent'] == 2

    res = staff_client.post('/check-in/clear')
    assert res.get_json()['removed'] == 2
    with registered.app_context():
        assert AttendanceRecord.query.count() == 0


def test_export_attendance(registered, staff_client):
    assert staff_client.get('/check-in/export').status_code == 404

    staff_client.post('/check-in/manual', json={'identifier': 'A1000'})
    staff_client.post('/check-in/manual', json={'identifier': 'A1003'})
    res = staff_client.get('/check-in/export')

    assert res.status_code == 200
    assert 'CREATEVERSE_Attendance_' in res.headers['Content-Disposition']
    df = pd.read_excel(BytesIO(res.data))
    assert list(df['Reg Number']) == ['A1000', 'A1003']
    assert list(df['S.No']) == [1, 2]


# Admin

def test_settings_round_trip(staff_client, client):
    res = staff_client.put('/admin/settings', json={'registrations_open': True, 'registration_limit': 2})
    assert res.status_code == 200
    assert res.get_json()['registration_limit'] == 2

    status = client.get('/register/status').get_json()
    assert status['registrations_open'] is True
    assert status['remaining'] == 2


@pytest.mark.parametrize('payload', [
    {'registrations_open': 'yes'},
    {'registration_limit': -3},
    {'registration_limit': 'lots'},
    {'registration_limit': 2.9},
])
def test_settings_rejects_bad_values(staff_client, payload):
    res = staff_client.put('/admin/settings', json=payload)
    assert res.status_code == 400
    assert res.get_json()['error_code'] == 'INVALID_INPUT'


def test_admin_teams_and_export(registered, staff_client):
    body = staff_client.get('/admin/teams').get_json()
    assert [team['name'] for team in body['teams']] == ['Alpha']
    assert body['capacity']['registered'] == 1

    res = staff_client.get('/admin/teams/export')
    assert res.status_code == 200
    df = pd.read_excel(BytesIO(res.data))
    assert len(df) == 4
    assert list(df['Role']) == ['Leader', 'Member', 'Member', 'Member']


def test_orphans_listed_and_reconciled(registered, staff_client):
    with registered.app_context():
        db.session.add(Team(name='Ghost', created_at=datetime.now() - timedelta(hours=1)))
        db.session.commit()

    orphans = staff_client.get('/admin/teams/orphans').get_json()['orphans']
    assert [team['name'] for team in orphans] == ['Ghost']

    res = staff_client.post('/admin/teams/orphans/reconcile')
    assert len(res.get_json()['removed']) == 1
    assert staff_client.get('/admin/teams/orphans').get_json()['orphans'] == []


def test_wipe_teams(registered, staff_client):
    staff_client.post('/check-in/manual', json={'identifier': 'A1000'})

    res = staff_client.delete('/admin/teams')

    assert res.get_json()['deleted'] == {'teams': 1, 'members': 4, 'attendance': 1}
    assert staff_client.get('/admin/teams').get_json()['teams'] == []
