# backend/routes/files.py
from flask import Blueprint, current_app, send_from_directory
import logging

# Registered without the /api prefix
files_bp = Blueprint('files', __name__)
logger = logging.getLogger(__name__)

ONE_YEAR = 60 * 60 * 24 * 365


@files_bp.route('/pdf/<path:filename>', methods=['GET'])
def serve_pdf(filename):
    """Generated PDFs; file names carry a timestamp so they never change"""
    return send_from_directory(
        current_app.config['PDF_FOLDER'],
        filename,
        mimetype='application/pdf',
        max_age=ONE_YEAR
    )


@files_bp.route('/uploads/<path:filename>', methods=['GET'])
def serve_upload(filename):
    """Uploaded photos, stored under random names"""
    return send_from_directory(
        current_app.config['UPLOAD_FOLDER'],
        filename,
        max_age=ONE_YEAR
    )
