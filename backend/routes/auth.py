# backend/routes/auth.py
from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
import logging

from models import db, User
from middleware.auth import active_user_required
from services.validation import ValidationError, validate_payload, USER_FIELDS
from routes.utils import error_response, get_json_body, apply_fields

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Create an account.

    While the database has no users this is open and creates the first
    administrator. Afterwards only a logged-in admin may register users.
    """
    bootstrap = db.session.query(User.id).first() is None
    if not bootstrap:
        if not current_user.is_authenticated:
            return error_response('Authentication required', 401)
        if not current_user.is_admin or not current_user.is_active:
            logger.warning(f"User '{current_user.username}' attempted to register a user without admin rights")
            return error_response('Admin access required', 403)

    try:
        cleaned = validate_payload(get_json_body(), USER_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    if User.query.filter_by(username=cleaned['username']).first():
        return error_response('Username already exists', 400)

    password = cleaned.pop('password')
    user = apply_fields(User(), cleaned)
    if bootstrap:
        user.role = 'admin'
        user.is_active = True
    user.set_password(password)

    try:
        db.session.add(user)
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error registering user '{cleaned['username']}': {str(e)}")
        return error_response('Failed to register user', 500)

    logger.info(f"Registered user '{user.username}' (role: {user.role}, bootstrap: {bootstrap})")
    if bootstrap:
        login_user(user, remember=True)
    return jsonify(user.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = get_json_body() or {}
    username = data.get('username') if isinstance(data.get('username'), str) else ''
    password = data.get('password') if isinstance(data.get('password'), str) else ''
    username = username.strip()

    if not username or not password:
        return error_response('Username and password are required', 400)

    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        logger.warning(f"Login failed for username '{username}'")
        return error_response('Invalid username or password', 401)

    if not user.is_active:
        logger.warning(f"Login refused: user '{username}' is inactive")
        return error_response('Account is disabled', 401)

    login_user(user, remember=True)
    logger.info(f"User '{username}' logged in")
    return jsonify(user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logger.info(f"User '{current_user.username}' logged out")
    logout_user()
    return jsonify({'message': 'Logged out successfully'})


@auth_bp.route('/user', methods=['GET'])
@login_required
@active_user_required
def get_current_user():
    """The logged-in user's profile"""
    return jsonify(current_user.to_dict())
