"""
Pytest configuration and fixtures
Both storage backends are exercised: flat JSON files in a temporary directory
and an in-memory SQLite database.
"""
import os

# Console logging only; must be set before the application logger is created
os.environ['LOG_DIR'] = ''

from datetime import datetime, timezone

import pytest

from maintenance_app import create_app, get_repository
from maintenance_app import db as _db
from maintenance_app.build import build_database
from maintenance_app.business.core.auth_context import AuthContext
from maintenance_app.services.ai.text_generation import AIServiceError

ADMIN_EMAIL = 'admin@empresa.com'
ADMIN_PASSWORD = 'admin123456789'

BACKENDS = ['json', 'sql']


def make_config(backend, tmp_path):
    return {
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'STORAGE_BACKEND': backend,
        'DATA_DIR': str(tmp_path / 'data'),
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'RATELIMIT_ENABLED': False,
        'SESSION_COOKIE_SECURE': False,
        'ADMIN_EMAIL': ADMIN_EMAIL,
        'ADMIN_PASSWORD': ADMIN_PASSWORD,
        'ADMIN_NAME': 'Administrador',
        'AI_API_KEY': '',
    }


@pytest.fixture(params=BACKENDS)
def app(request, tmp_path):
    """Create Flask application for testing, seeded with roles and the administrator"""
    app = create_app(make_config(request.param, tmp_path))
    build_database(app)

    yield app

    if request.param == 'sql':
        with app.app_context():
            _db.session.remove()
            _db.drop_all()


@pytest.fixture(params=BACKENDS)
def repository(request, tmp_path):
    """Repository of a fresh application, used inside one app context"""
    app = create_app(make_config(request.param, tmp_path))
    with app.app_context():
        yield get_repository(app)
        if request.param == 'sql':
            _db.session.remove()
            _db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create Flask test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def authenticated_client(client):
    """Create test client logged in as the seeded administrator"""
    response = login_user(client)
    assert response.status_code == 200
    return client


def login_user(client, email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    """Helper function to login a user"""
    return client.post('/api/login', json={'email': email, 'password': password})


@pytest.fixture
def ctx():
    return AuthContext(user_id='user-tecnico-1', name='Técnico', role='Técnico de Manutenção')


class FixedClock:
    """Callable clock that tests can move forward"""

    def __init__(self, moment=None):
        self.moment = moment or datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.moment

    def set(self, moment):
        self.moment = moment


@pytest.fixture
def clock():
    return FixedClock()


class FakeTextGenerationClient:
    """Stand-in for the AI client; fails every call when `failing` is set"""

    def __init__(self, failing=False):
        self.failing = failing
        self.calls = []

    def _answer(self, operation, payload):
        self.calls.append(operation)
        if self.failing:
            raise AIServiceError(f"{operation}: backend unavailable")
        return payload

    def generate_maintenance_log(self, equipment_name, equipment_description, modifications):
        return self._answer('generate_maintenance_log', {'logEntry': f'Relatório: {modifications} em {equipment_name}'})

    def improve_name(self, current_name, description=''):
        return self._answer('improve_name', {'improvedName': current_name.title()})

    def improve_description(self, equipment_name, current_description):
        return self._answer('improve_description', {'improvedDescription': f'{current_description} (revisado)'})

    def find_components(self, equipment_name, model):
        return self._answer('find_components', {'components': [
            {'id': 'comp-1', 'name': 'Compressor', 'partNumber': 'CMP-100', 'description': 'Compressor principal'},
        ]})

    def find_insumos(self, equipment_name, model):
        return self._answer('find_insumos', {'insumos': [
            {'id': 'ins-1', 'name': 'Óleo POE', 'type': 'Óleo', 'description': 'Lubrificante'},
        ]})

    def find_models(self, equipment_name):
        return self._answer('find_models', {'models': ['Modelo A', 'Modelo B']})


@pytest.fixture
def ai_client():
    return FakeTextGenerationClient()


@pytest.fixture
def failing_ai_client():
    return FakeTextGenerationClient(failing=True)


def equipment_document(equipment_id='EQ-001', **overrides):
    document = {
        'id': equipment_id,
        'name': 'Balcão Refrigerado',
        'description': 'Balcão de frios da entrada',
        'model': 'BR-2000',
        'storeId': 'loja-1',
        'value': 15000,
        'components': [
            {'id': 'c-1', 'name': 'Compressor', 'partNumber': 'CMP-100', 'description': 'Compressor 1/2 HP'},
        ],
        'insumos': [
            {'id': 'i-1', 'name': 'Óleo POE', 'type': 'Óleo', 'description': 'Lubrificante do compressor'},
        ],
    }
    document.update(overrides)
    return document
