"""
Smoke tests for application wiring and token issuing.
"""

import jwt
import pytest
from datetime import timedelta

from app import create_app
from app.utils.auth import issue_token, decode_token, parse_token_lifetime


def test_ping(client):
    response = client.get('/ping')

    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok'}


def test_routes_registered(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}

    assert {'/api/auth/register', '/api/auth/login', '/api/auth/me',
            '/api/auth/check', '/api/profile'} <= rules


def test_tokens_never_expire_by_default(app):
    with app.app_context():
        token = issue_token(42)
        payload = jwt.decode(token, app.config['JWT_SECRET_KEY'], algorithms=['HS256'])

    assert payload == {'user_id': 42}


def test_token_expiry_from_config(app, monkeypatch):
    monkeypatch.setitem(app.config, 'JWT_EXPIRES_IN', '3600')

    with app.app_context():
        token = issue_token(42)
        payload = jwt.decode(token, app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
        assert decode_token(token) == 42

    assert 'exp' in payload


@pytest.mark.parametrize('value,expected', [
    ('never', None),
    ('', None),
    (None, None),
    ('0', None),
    ('3600', timedelta(hours=1)),
    (3600, timedelta(hours=1)),
    ('45s', timedelta(seconds=45)),
    ('15m', timedelta(minutes=15)),
    ('12h', timedelta(hours=12)),
    ('30d', timedelta(days=30)),
    (' 7D ', timedelta(days=7)),
])
def test_parse_token_lifetime(value, expected):
    assert parse_token_lifetime(value) == expected


@pytest.mark.parametrize('value', ['soon', '30x', '-5', '1.5h', 'd30'])
def test_parse_token_lifetime_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_token_lifetime(value)


def test_create_app_rejects_bad_token_lifetime(monkeypatch):
    monkeypatch.setenv('JWT_EXPIRES_IN', 'soon')

    with pytest.raises(ValueError):
        create_app('testing')


def test_create_app_rejects_unknown_identifier_policy(monkeypatch):
    monkeypatch.setenv('IDENTIFIER_POLICY', 'sometimes')

    with pytest.raises(ValueError):
        create_app('testing')
