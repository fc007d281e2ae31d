from flask import Blueprint, jsonify, current_app, g
from werkzeug.security import generate_password_hash
from models import ROLES
from repositories import users
from errors import ValidationError, InvalidCredentials
from tokens import get_token_codec, auth_required
from utils import get_json_body, missing_fields

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')


# ==========================================
#  1. SIGNUP
# ==========================================
@auth_bp.route('/signup', methods=['POST'])
def signup():
    """
    Registers a donor, NGO or biogas account.
    No token is returned; the client logs in separately.
    """
    data = get_json_body()

    if missing_fields(data, ['name', 'email', 'password', 'role']):
        raise ValidationError('All fields are required')

    if data['role'] not in ROLES:
        raise ValidationError('Invalid role')

    user = users.create(
        name=data['name'],
        email=data['email'],
        password_hash=generate_password_hash(data['password']),
        role=data['role'],
    )
    current_app.logger.info('Registered %s account %s', user.role, user.id)

    return jsonify({'message': 'User created successfully'}), 201


# ==========================================
#  2. LOGIN
# ==========================================
@auth_bp.route('/login', methods=['POST'])
def login():
    data = get_json_body()

    # 1. Validate Input
    if missing_fields(data, ['email', 'password', 'role']):
        raise ValidationError('All fields are required')

    # 2. Wrong role is reported exactly like an unknown email
    user = users.find_by_email_and_role(data['email'], data['role'])
    if user is None or not user.check_password(data['password']):
        current_app.logger.info('Failed login for role %s', data['role'])
        raise InvalidCredentials()

    token = get_token_codec().issue(user)
    current_app.logger.info('User %s logged in', user.id)

    return jsonify({
        'message': 'Login successful',
        'token': token,
        'user': user.to_dict(),
    }), 200


# ==========================================
#  3. PROFILE
# ==========================================
@auth_bp.route('/me', methods=['GET'])
@auth_required
def profile():
    """ Refreshes user data on page reload. """
    return jsonify({'user': g.user.to_dict()}), 200
