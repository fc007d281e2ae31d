from flask import Flask, jsonify
from flask.logging import default_handler
from werkzeug.exceptions import HTTPException
import logging
import os
from dotenv import load_dotenv
from datetime import timedelta

from extensions import db, jwt, cors
from errors import ApiError

load_dotenv()


def _env_flag(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def create_app(test_config=None):
    """
    The Application Factory.
    Creates and configures the app, but does not run it.
    """
    app = Flask(__name__)

    # --- CONFIGURATION ---
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'default_secret_key')
    # Fix Postgres URL for SQLAlchemy; default is a throwaway in-memory DB
    database_url = os.getenv('DATABASE_URL', 'sqlite:///:memory:')
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # --- AUTH CONFIGURATION ---
    app.config['AUTH_TOKEN_SCHEME'] = os.getenv('AUTH_TOKEN_SCHEME', 'legacy')
    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'fallback-secret-key')
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = timedelta(minutes=int(os.getenv('JWT_EXPIRES_MINUTES', '25')))

    app.config['SEED_DEMO_ACCOUNTS'] = _env_flag('SEED_DEMO_ACCOUNTS', True)
    app.config['CORS_ORIGINS'] = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')

    if test_config:
        app.config.update(test_config)

    # --- LOGGING ---
    default_handler.setFormatter(logging.Formatter('%(asctime)s | %(levelname)s | %(name)s | %(message)s'))
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # --- INITIALIZE EXTENSIONS ---
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={
        r"/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PATCH", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    # --- REGISTER BLUEPRINTS ---
    # Import inside the function to avoid circular imports
    from routes.auth import auth_bp
    from routes.donations import donations_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(donations_bp)

    register_error_handlers(app)
    register_commands(app)

    # --- SCHEMA & DEMO DATA ---
    with app.app_context():
        db.create_all()
        if app.config['SEED_DEMO_ACCOUNTS']:
            from seed import seed_demo_accounts
            seed_demo_accounts()

    return app


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'error': e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        # Never leak internals to the client
        db.session.rollback()
        app.logger.exception('Unhandled error: %s', e)
        return jsonify({'error': 'Internal server error'}), 500


def register_commands(app):

    @app.cli.command('seed')
    def seed_command():
        """Create the demo donor, NGO and biogas accounts."""
        from seed import seed_demo_accounts
        created = seed_demo_accounts()
        print(f"✅ Seeded {created} demo account(s).")


# --- ENTRY POINT ---
# This only runs if you type 'python app.py'
if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
