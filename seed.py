from flask import current_app
from werkzeug.security import generate_password_hash
from repositories import users

DEMO_PASSWORD = 'password123'

DEMO_ACCOUNTS = [
    {'name': 'John Donor', 'email': 'donor@test.com', 'role': 'donor'},
    {'name': 'Jane NGO', 'email': 'ngo@test.com', 'role': 'ngo'},
    {'name': 'Bob Biogas', 'email': 'biogas@test.com', 'role': 'biogas'},
]


def seed_demo_accounts():
    """
    Creates one demo account per role, skipping any that already exist.
    Demo passwords are hashed like every other password.
    Must run inside an app context.
    """
    created = 0
    for account in DEMO_ACCOUNTS:
        if users.find_by_email(account['email']):
            continue
        users.create(
            name=account['name'],
            email=account['email'],
            password_hash=generate_password_hash(DEMO_PASSWORD),
            role=account['role'],
        )
        created += 1

    current_app.logger.info('Seeded %d demo account(s)', created)
    return created


if __name__ == "__main__":
    # Only useful against a persistent DATABASE_URL
    from app import create_app
    with create_app({'SEED_DEMO_ACCOUNTS': False}).app_context():
        seed_demo_accounts()
