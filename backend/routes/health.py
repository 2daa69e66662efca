from flask import Blueprint, jsonify, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from models import db
from services.file_storage import file_storage
import os

health_bp = Blueprint('health', __name__)

APP_NAME = 'SAM Climatiza API'
CRITICAL_BLUEPRINTS = ['auth', 'clients', 'services', 'quotes', 'work_orders', 'users']


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Health check covering the database, the writable folders and the
    registered blueprints.
    """
    health_status = {
        'status': 'healthy',
        'app': APP_NAME,
        'version': '1.0.0',
        'timestamp': datetime.utcnow().isoformat() + 'Z',
        'checks': {}
    }
    overall_healthy = True

    # Database
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()

        db_url = current_app.config.get('SQLALCHEMY_DATABASE_URI', '') or ''
        if 'sqlite' in db_url.lower():
            db_type = 'SQLite'
        elif 'postgresql' in db_url.lower():
            db_type = 'PostgreSQL'
        else:
            db_type = 'Unknown'

        health_status['checks']['database'] = {
            'status': 'healthy',
            'type': db_type,
            'connected': True
        }
    except SQLAlchemyError as db_error:
        db.session.rollback()
        current_app.logger.error(f"Database health check failed: {db_error}")
        health_status['checks']['database'] = {
            'status': 'unhealthy',
            'connected': False,
            'error': str(db_error)
        }
        overall_healthy = False

    # PDF and upload folders
    folders = {}
    for key in ('PDF_FOLDER', 'UPLOAD_FOLDER'):
        path = current_app.config.get(key)
        folders[key] = bool(path) and os.path.isdir(path) and os.access(path, os.W_OK)
    health_status['checks']['storage'] = {
        'status': 'healthy' if all(folders.values()) else 'warning',
        'writable': folders,
        'azure_blob_storage': file_storage.use_azure
    }
    if not all(folders.values()):
        current_app.logger.warning(f"Storage folders not writable: {folders}")

    # Application state
    registered = list(current_app.blueprints.keys())
    missing = [name for name in CRITICAL_BLUEPRINTS if name not in registered]
    health_status['checks']['application'] = {
        'status': 'healthy' if not missing else 'warning',
        'blueprints': {
            'registered': registered,
            'missing_critical': missing
        },
        'routes': {
            'total': len(list(current_app.url_map.iter_rules())),
            'api_routes': len([rule for rule in current_app.url_map.iter_rules()
                               if rule.rule.startswith('/api/')])
        }
    }

    status_code = 200
    if not overall_healthy:
        health_status['status'] = 'unhealthy'
        status_code = 503
    elif any(check.get('status') == 'warning' for check in health_status['checks'].values()):
        health_status['status'] = 'degraded'

    current_app.logger.info(f"Health check completed: {health_status['status']}")
    return jsonify(health_status), status_code


@health_bp.route('/health/simple', methods=['GET'])
def simple_health_check():
    """Minimal check for load balancers"""
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
        return jsonify({'status': 'healthy', 'message': 'Service is running'}), 200
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Simple health check failed: {e}")
        return jsonify({'status': 'unhealthy', 'message': 'Database connection failed'}), 503
