"""
Authentication: stored password formats, login endpoint and its error mapping
"""
import hashlib

import pytest

from maintenance_app.business.users import passwords
from maintenance_app.business.users.user_manager import UserManager
from maintenance_app.data.storage.base import StorageUnavailableError
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, login_user


def test_bcrypt_hash_round_trip():
    stored = passwords.hash_password('Segredo#2024')
    assert stored.startswith('$2')
    assert passwords.stored_format(stored) == 'bcrypt'
    assert passwords.verify_password(stored, 'Segredo#2024')
    assert not passwords.verify_password(stored, 'segredo#2024')
    assert not passwords.needs_rehash(stored)


def test_sha256_hex_digest_is_case_insensitive():
    digest = hashlib.sha256('Segredo#2024'.encode('utf-8')).hexdigest().upper()
    assert passwords.verify_password(digest, 'Segredo#2024')
    assert not passwords.verify_password(digest, 'Outro')
    assert passwords.needs_rehash(digest)


def test_plaintext_legacy_value():
    assert passwords.verify_password('Segredo#2024', 'Segredo#2024')
    assert not passwords.verify_password('Segredo#2024', 'segredo#2024')
    assert not passwords.verify_password('', '')


def test_malformed_bcrypt_value_is_rejected():
    assert not passwords.verify_password('$2b$not-a-hash', 'qualquer')


def test_authenticate_matches_email_ignoring_case(repository):
    repository.users.add({'id': 'user-ana-1', 'name': 'Ana', 'email': 'Ana@Empresa.com',
                          'password': hashlib.sha256(b'segredo').hexdigest()})
    manager = UserManager(repository)
    assert manager.authenticate('ana@empresa.com', 'segredo').id == 'user-ana-1'
    assert manager.authenticate('ana@empresa.com', 'errado') is None
    assert manager.authenticate('ninguem@empresa.com', 'segredo') is None


def test_login_success_starts_session(client):
    response = login_user(client)
    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['data']['email'] == ADMIN_EMAIL
    assert 'password' not in body['data']

    me = client.get('/api/me').get_json()
    assert me['data']['role'] == 'Administrador'
    assert me['data']['permissions']['modifyRoles'] is True


def test_login_rejects_bad_credentials(client):
    response = login_user(client, password='errada')
    assert response.status_code == 401
    assert response.get_json()['success'] is False
    assert client.get('/api/me').status_code == 401


def test_login_requires_both_fields(client):
    response = client.post('/api/login', json={'email': ADMIN_EMAIL})
    assert response.status_code == 400


@pytest.mark.parametrize('body', [
    {'email': 123, 'password': ADMIN_PASSWORD},
    {'email': [ADMIN_EMAIL], 'password': ADMIN_PASSWORD},
    {'email': ADMIN_EMAIL, 'password': 987654321},
    [ADMIN_EMAIL, ADMIN_PASSWORD],
])
def test_login_rejects_non_string_credentials(client, body):
    response = client.post('/api/login', json=body)
    assert response.status_code == 400
    assert response.get_json()['success'] is False


def test_login_maps_storage_failure_to_503(client, monkeypatch):
    def unavailable(self, email, password):
        raise StorageUnavailableError('users: database offline')

    monkeypatch.setattr(UserManager, 'authenticate', unavailable)
    response = login_user(client)
    assert response.status_code == 503
    assert response.get_json()['success'] is False


def test_login_maps_unexpected_failure_to_500(client, monkeypatch):
    def broken(self, email, password):
        raise RuntimeError('boom')

    monkeypatch.setattr(UserManager, 'authenticate', broken)
    response = login_user(client)
    assert response.status_code == 500
    assert response.get_json()['success'] is False


def test_logout_ends_session(authenticated_client):
    assert authenticated_client.post('/api/logout').get_json() == {'success': True}
    assert authenticated_client.get('/api/me').status_code == 401


@pytest.mark.parametrize('path', ['/api/equipment', '/api/dashboard', '/api/users'])
def test_api_requires_login(client, path):
    response = client.get(path)
    assert response.status_code == 401
    assert response.get_json()['success'] is False


def test_admin_password_is_stored_as_bcrypt(app):
    with app.app_context():
        from maintenance_app import get_repository
        user = UserManager(get_repository(app)).find_by_email(ADMIN_EMAIL)
        assert user.password.startswith('$2')
        assert passwords.verify_password(user.password, ADMIN_PASSWORD)
