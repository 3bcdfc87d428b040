import os
import sys
import pytest

# Ensure the backend root (containing the `hunt` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from flask import g

from hunt import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ADMIN_EMAIL = 'admin@hunt.test'
    ADMIN_PASSWORD = 'admin-pass'
    ADMIN_TOKEN_MAX_AGE_SEC = 3600
    CLIENT_URL = 'http://localhost:5173'
    BCRYPT_LOG_ROUNDS = 4
    HINT_REVIEWER_FALLBACK = 'admin'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    @application.teardown_request
    def _forget_login_user(exc):
        # Requests share the fixture app context, so drop the cached user
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import hunt.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def admin_headers(client):
    res = client.post('/api/auth/login', json={
        'email': TestConfig.ADMIN_EMAIL,
        'password': TestConfig.ADMIN_PASSWORD,
    })
    assert res.status_code == 200
    return {'Authorization': f"Bearer {res.get_json()['token']}"}


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_round(flask_app):
    """Insert a round directly, bypassing the admin API."""
    from hunt.models import Round, generate_qr_id

    def _make(number, unlock_code=None, clue_text=None):
        rnd = Round(
            round_number=number,
            clue_text=clue_text or f'Find the marker for round {number}',
            unlock_code=(unlock_code or f'CODE{number}').upper(),
            qr_id=generate_qr_id(number),
        )
        db.session.add(rnd)
        db.session.commit()
        return rnd

    return _make


@pytest.fixture()
def make_team(flask_app):
    from hunt.models import Team, generate_start_code

    def _make(name='Team X', round_number=1, **fields):
        team = Team(
            name=name,
            start_code=fields.pop('start_code', None) or generate_start_code(),
            current_round_number=round_number,
            **fields,
        )
        team.ensure_progress(round_number)
        db.session.add(team)
        db.session.commit()
        return team

    return _make


@pytest.fixture()
def make_assignment(flask_app):
    from hunt.models import ClueAssignment, generate_qr_id

    def _make(round_number, teams, unlock_code, time_limit_seconds=300, hint=None):
        assignment = ClueAssignment(
            round_number=round_number,
            clue_text=f'Assignment clue for round {round_number}',
            hint=hint,
            unlock_code=unlock_code.upper(),
            qr_id=generate_qr_id(round_number),
            time_limit_seconds=time_limit_seconds,
            teams=list(teams),
        )
        db.session.add(assignment)
        db.session.commit()
        return assignment

    return _make
