import pytest
from models import User
from repositories import users
from tokens import get_token_codec
from conftest import login

# ==========================================
#  1. SIGNUP TESTS
# ==========================================

def signup_payload(**kwargs):
    payload = {
        "name": "Green Kitchen",
        "email": "kitchen@test.com",
        "password": "s3cret",
        "role": "donor",
    }
    payload.update(kwargs)
    return payload


def test_signup_success(client):
    """Happy Path: account created, no token handed out."""
    response = client.post('/auth/signup', json=signup_payload())

    assert response.status_code == 201
    data = response.get_json()
    assert data['message'] == 'User created successfully'
    assert 'token' not in data

    # DB Check
    user = User.query.filter_by(email="kitchen@test.com").first()
    assert user is not None
    assert user.role == "donor"
    assert user.password_hash != "s3cret"
    assert user.check_password("s3cret")


def test_signup_then_login_round_trip(client):
    """Token from login decodes back to the id of the new account."""
    client.post('/auth/signup', json=signup_payload(email="fresh@test.com", role="ngo"))

    response = client.post('/auth/login', json={
        "email": "fresh@test.com", "password": "s3cret", "role": "ngo"
    })
    assert response.status_code == 200
    data = response.get_json()

    user = users.find_by_email("fresh@test.com")
    assert data['user']['id'] == user.id
    assert get_token_codec().decode(data['token']) == user.id


@pytest.mark.parametrize("role", ["donor", "ngo", "biogas"])
def test_signup_duplicate_email(client, role):
    """Edge Case: email reuse is a conflict whatever the role or password."""
    response = client.post('/auth/signup', json=signup_payload(
        email="donor@test.com", role=role, password="other"
    ))

    assert response.status_code == 400
    assert response.get_json()['error'] == 'User already exists with this email'


def test_signup_email_is_case_sensitive(client):
    response = client.post('/auth/signup', json=signup_payload(email="Donor@test.com"))
    assert response.status_code == 201


@pytest.mark.parametrize("field", ["name", "email", "password", "role"])
def test_signup_missing_field(client, field):
    payload = signup_payload()
    del payload[field]

    response = client.post('/auth/signup', json=payload)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'All fields are required'


def test_signup_invalid_role(client):
    response = client.post('/auth/signup', json=signup_payload(role="admin"))
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Invalid role'


def test_signup_rejects_non_json_body(client):
    response = client.post('/auth/signup', data="name=x", content_type="text/plain")
    assert response.status_code == 400


# ==========================================
#  2. LOGIN TESTS
# ==========================================

@pytest.mark.parametrize("email,role", [
    ("donor@test.com", "donor"),
    ("ngo@test.com", "ngo"),
    ("biogas@test.com", "biogas"),
])
def test_seeded_accounts_can_login(client, email, role):
    """Demo passwords are hashed, so they go through the normal check."""
    response = client.post('/auth/login', json={
        "email": email, "password": "password123", "role": role
    })

    assert response.status_code == 200
    data = response.get_json()
    assert data['token'].startswith('token_')
    assert data['user']['email'] == email
    assert data['user']['role'] == role
    assert 'password' not in data['user']
    assert 'password_hash' not in data['user']


def test_login_wrong_password(client):
    response = client.post('/auth/login', json={
        "email": "donor@test.com", "password": "WRONG", "role": "donor"
    })
    assert response.status_code == 401


def test_login_wrong_role_same_as_unknown_user(client):
    """Edge Case: right email, wrong role looks exactly like a missing user."""
    wrong_role = client.post('/auth/login', json={
        "email": "donor@test.com", "password": "password123", "role": "ngo"
    })
    unknown = client.post('/auth/login', json={
        "email": "ghost@test.com", "password": "password123", "role": "ngo"
    })

    assert wrong_role.status_code == unknown.status_code == 401
    assert wrong_role.get_json() == unknown.get_json()


@pytest.mark.parametrize("field", ["email", "password", "role"])
def test_login_missing_field(client, field):
    payload = {"email": "donor@test.com", "password": "password123", "role": "donor"}
    del payload[field]

    response = client.post('/auth/login', json=payload)
    assert response.status_code == 400


# ==========================================
#  3. PROFILE TESTS
# ==========================================

def test_profile_returns_current_user(client, ngo_headers):
    response = client.get('/auth/me', headers=ngo_headers)

    assert response.status_code == 200
    user = response.get_json()['user']
    assert user['email'] == "ngo@test.com"
    assert user['name'] == "Jane NGO"
    assert 'password_hash' not in user


def test_profile_requires_token(client):
    response = client.get('/auth/me')
    assert response.status_code == 401


def test_new_account_can_use_api(client):
    client.post('/auth/signup', json=signup_payload(email="agent@test.com", role="biogas"))
    headers = login(client, "agent@test.com", "biogas", password="s3cret")

    response = client.get('/donations/pending', headers=headers)
    assert response.status_code == 200
    assert response.get_json()['donations'] == []
