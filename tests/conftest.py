import base64
import os

import pytest
from cryptography.fernet import Fernet

os.environ.setdefault('AES_KEY', Fernet.generate_key().decode())
os.environ.setdefault('HMAC_KEY', base64.urlsafe_b64encode(os.urandom(32)).decode())

from medihub import create_app, db  # noqa: E402
from tests.helpers import SECURITY_CODES  # noqa: E402


def _settings(tmp_path, **extra):
    settings = {
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'medihub.db'}",
        'RATELIMIT_ENABLED': False,
        'ADMIN_SECURITY_CODE': SECURITY_CODES['admin'],
        'EMPLOYEE_SECURITY_CODE': SECURITY_CODES['employee'],
        'SUPPLIER_SECURITY_CODE': SECURITY_CODES['supplier'],
    }
    settings.update(extra)
    return settings


@pytest.fixture
def make_app(tmp_path):
    def factory(**extra):
        return create_app(_settings(tmp_path, **extra))
    return factory


@pytest.fixture
def app(make_app):
    app = make_app()
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def other_client(app):
    return app.test_client()
