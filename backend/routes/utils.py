# backend/routes/utils.py
"""Shared helpers for the API blueprints"""
import logging
from flask import request, jsonify
from models import db

logger = logging.getLogger(__name__)


def error_response(message, status_code=400):
    return jsonify({'error': message}), status_code


def get_json_body():
    """The decoded JSON body, or None when the request has none or it is malformed"""
    return request.get_json(silent=True)


def apply_fields(record, cleaned):
    """Copy validated attributes onto a model instance"""
    for attribute, value in cleaned.items():
        setattr(record, attribute, value)
    return record


def ensure_exists(model, record_id, label):
    """
    Look up a referenced row.

    Returns:
        tuple of (record, error message); the message is None when found
    """
    if record_id is None:
        return None, None
    record = db.session.get(model, record_id)
    if record is None:
        return None, f"{label} {record_id} does not exist"
    return record, None


def query_int_arg(name):
    """Optional integer query parameter; raises ValueError on junk"""
    raw = request.args.get(name)
    if raw in (None, ''):
        return None
    return int(raw)
