import os

import pytest

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['ENABLE_REMINDER_JOBS'] = '0'
os.environ.setdefault('SECRET_KEY', 'test-secret')

from app import app as flask_app, db  # noqa: E402


@pytest.fixture
def app():
    flask_app.config.update(TESTING=True)
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def register(client):
    """Register a user and return bearer auth headers for them."""

    def _register(email='ada@example.com', name='Ada', password='secret-pass'):
        resp = client.post('/api/register', json={'name': name, 'email': email, 'password': password})
        assert resp.status_code == 201, resp.get_json()
        return {'Authorization': f"Bearer {resp.get_json()['token']}"}

    return _register


@pytest.fixture
def auth_headers(register):
    return register()
