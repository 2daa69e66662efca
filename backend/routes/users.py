# backend/routes/users.py
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required
from models import db, User
from middleware.auth import admin_required, self_or_admin_required, active_user_required
from services.validation import ValidationError, validate_payload, USER_FIELDS
from services.file_storage import file_storage
from routes.utils import error_response, get_json_body, apply_fields
import logging

users_bp = Blueprint('users', __name__)
logger = logging.getLogger(__name__)


@users_bp.route('/users', methods=['GET'])
@login_required
@active_user_required
def get_users():
    """All users, without password hashes"""
    users = User.query.order_by(User.name).all()
    return jsonify([user.to_dict() for user in users])


@users_bp.route('/users/<int:user_id>', methods=['GET'])
@login_required
@active_user_required
def get_user(user_id):
    user = db.get_or_404(User, user_id)
    return jsonify(user.to_dict())


@users_bp.route('/users', methods=['POST'])
@login_required
@active_user_required
@admin_required
def create_user():
    try:
        cleaned = validate_payload(get_json_body(), USER_FIELDS)
    except ValidationError as e:
        return error_response(e.message, 400)

    if User.query.filter_by(username=cleaned['username']).first():
        return error_response('Username already exists', 400)

    try:
        password = cleaned.pop('password')
        user = apply_fields(User(), cleaned)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        logger.info(f"Created user '{user.username}' (role: {user.role})")
        return jsonify(user.to_dict()), 201
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating user: {str(e)}")
        return error_response('Failed to create user', 500)


@users_bp.route('/users/<int:user_id>', methods=['PUT'])
@login_required
@active_user_required
@admin_required
def update_user(user_id):
    """Update a user; a missing or blank password leaves the current one in place"""
    user = db.get_or_404(User, user_id)

    data = get_json_body()
    if isinstance(data, dict):
        data = dict(data)
        password = data.get('password')
        if password is None or (isinstance(password, str) and not password.strip()):
            data.pop('password', None)

    try:
        cleaned = validate_payload(data, USER_FIELDS, partial=True)
    except ValidationError as e:
        return error_response(e.message, 400)

    new_username = cleaned.get('username')
    if new_username and new_username != user.username:
        if User.query.filter_by(username=new_username).first():
            return error_response('Username already exists', 400)

    try:
        password = cleaned.pop('password', None)
        apply_fields(user, cleaned)
        if password:
            user.set_password(password)
        db.session.commit()
        logger.info(f"Updated user {user_id} (password changed: {bool(password)})")
        return jsonify(user.to_dict())
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating user {user_id}: {str(e)}")
        return error_response('Failed to update user', 500)


@users_bp.route('/users/<int:user_id>/photo', methods=['POST'])
@login_required
@active_user_required
@self_or_admin_required
def upload_photo(user_id):
    """Replace a user's profile photo with the multipart 'photo' upload"""
    user = db.get_or_404(User, user_id)

    photo = request.files.get('photo')
    if photo is None or not photo.filename:
        return error_response('No photo provided', 400)

    content = photo.read()
    max_size = current_app.config['MAX_PHOTO_SIZE']
    if len(content) > max_size:
        return error_response(f"Photo exceeds the {max_size // (1024 * 1024)}MB limit", 413)

    success, message, photo_url = file_storage.upload_photo(content, photo.filename)
    if not success:
        logger.warning(f"Photo upload rejected for user {user_id}: {message}")
        return error_response(message, 400)

    previous_url = user.photo_url
    try:
        user.photo_url = photo_url
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        file_storage.delete_file(photo_url)
        logger.error(f"Error saving photo for user {user_id}: {str(e)}")
        return error_response('Failed to save photo', 500)

    if previous_url and previous_url != photo_url:
        deleted, delete_message = file_storage.delete_file(previous_url)
        if not deleted:
            logger.warning(f"Old photo {previous_url} was not removed: {delete_message}")

    logger.info(f"Updated photo for user {user_id}")
    return jsonify(user.to_dict())
