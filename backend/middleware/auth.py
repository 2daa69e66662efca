# backend/middleware/auth.py

from functools import wraps
from flask import jsonify
from flask_login import current_user
import logging

logger = logging.getLogger(__name__)


def admin_required(f):
    """
    Decorator to ensure a user is logged in and has the 'admin' role.
    Place it AFTER @login_required.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            logger.warning("Unauthenticated access attempt to an admin-only route.")
            return jsonify({'error': 'Authentication required'}), 401

        if not current_user.is_admin:
            logger.warning(f"User '{current_user.username}' (role: {current_user.role}) attempted to access an admin-only route.")
            return jsonify({'error': 'Admin access required'}), 403

        return f(*args, **kwargs)
    return decorated_function


def self_or_admin_required(f):
    """
    Decorator for routes taking a ``user_id`` argument: admins may act on any
    user, everyone else only on themselves.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'Authentication required'}), 401

        user_id = kwargs.get('user_id')
        if not current_user.is_admin and current_user.id != user_id:
            logger.warning(f"User '{current_user.username}' attempted to modify user {user_id}.")
            return jsonify({'error': 'Insufficient permissions'}), 403

        return f(*args, **kwargs)
    return decorated_function


def active_user_required(f):
    """
    Decorator to ensure the logged-in user's account is still active.
    Place it AFTER @login_required.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({'error': 'Authentication required'}), 401

        if not current_user.is_active:
            logger.warning(f"Inactive user '{current_user.username}' attempted to access a resource.")
            return jsonify({'error': 'Your account is disabled. Please contact an administrator.'}), 403

        return f(*args, **kwargs)
    return decorated_function
