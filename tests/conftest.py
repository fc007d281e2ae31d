import sys
import os
import pytest

# 1. Add the parent directory to Python's path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# 2. NOW import from app
from app import create_app
from extensions import db

TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "JWT_SECRET_KEY": "test-secret",
    "AUTH_TOKEN_SCHEME": "legacy",
    "SEED_DEMO_ACCOUNTS": True,
}

DEMO_PASSWORD = "password123"


@pytest.fixture
def app_config():
    """Override in a test module to tweak the app configuration."""
    return {}


@pytest.fixture
def app(app_config):
    """Create and configure a new app instance for each test."""
    app = create_app({**TEST_CONFIG, **app_config})

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, email, role, password=DEMO_PASSWORD):
    resp = client.post('/auth/login', json={"email": email, "password": password, "role": role})
    assert resp.status_code == 200, resp.get_json()
    return {'Authorization': f'Bearer {resp.get_json()["token"]}'}


@pytest.fixture
def donor_headers(client):
    return login(client, "donor@test.com", "donor")


@pytest.fixture
def ngo_headers(client):
    return login(client, "ngo@test.com", "ngo")


@pytest.fixture
def biogas_headers(client):
    return login(client, "biogas@test.com", "biogas")


@pytest.fixture
def donation_factory(client, donor_headers):
    """Submits a donation as the seeded donor and returns its JSON."""
    def _create(**kwargs):
        payload = {"type": "fresh", "peopleFed": 10, "location": "Main St"}
        payload.update(kwargs)
        resp = client.post('/donations', json=payload, headers=donor_headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()['donation']
    return _create
