"""
Pytest configuration and fixtures for testing the Forum API.
"""

import os
import sys
import pytest
from faker import Faker

# Add the parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app import create_app, db
from app.models.user import User

fake = Faker()


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    os.environ['JWT_SECRET_KEY'] = 'test-secret-key-for-testing'

    app = create_app('testing')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client for each test function."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create a fresh database session for each test."""
    with app.app_context():
        for table in reversed(db.metadata.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        yield db.session
        db.session.rollback()


def _create_user(password='testpassword123', **overrides):
    """Helper to create a user with sensible defaults."""
    data = {
        'name': fake.name(),
        'email': fake.unique.email(),
        'phone': None,
    }
    data.update(overrides)
    user = User(**data)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'phone': user.phone,
        'password': password,
    }


@pytest.fixture
def test_user(app, db_session):
    """Create a test user registered by email."""
    with app.app_context():
        return _create_user()


@pytest.fixture
def phone_user(app, db_session):
    """Create a test user registered by phone only."""
    with app.app_context():
        return _create_user(email=None, phone='250781234567', password='testpassword456')


def _get_token(client, identifier, password):
    """Login and return JWT token."""
    resp = client.post('/api/auth/login', json={
        'identifier': identifier,
        'password': password,
    })
    data = resp.get_json()
    if data is None or 'token' not in data:
        raise RuntimeError(
            f"Login failed: status={resp.status_code}, body={resp.data[:200]}"
        )
    return data['token']


@pytest.fixture
def auth_headers(client, test_user):
    """Get authentication headers for test user."""
    token = _get_token(client, test_user['email'], test_user['password'])
    return {'Authorization': f'Bearer {token}'}
