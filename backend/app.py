import os
import logging
import click
from flask import Flask, request, jsonify
from flask_login import LoginManager

from config import config, get_config_name
from models import db, User
from middleware.cors import setup_cors
from routes import register_blueprints
from services.file_storage import file_storage


def create_app(config_name=None, config_overrides=None):
    """
    Application factory for the SAM Climatiza API.

    ``config_overrides`` is applied on top of the config class (used by tests).
    """
    if config_name is None:
        config_name = get_config_name()

    app = Flask(__name__)

    config_class = config[config_name]
    app.config.from_object(config_class())  # instance resolves the database URL
    if config_overrides:
        app.config.update(config_overrides)
    _configure_logging(app, config_name)
    app.logger.info(f"Configuration loaded for {config_name} environment")

    db_uri = app.config.get('SQLALCHEMY_DATABASE_URI', '')
    if db_uri.startswith('sqlite:///') and ':memory:' not in db_uri:
        os.makedirs(os.path.dirname(db_uri[len('sqlite:///'):]), exist_ok=True)
    os.makedirs(app.config['PDF_FOLDER'], exist_ok=True)

    db.init_app(app)
    file_storage.init_app(app)
    setup_cors(app)

    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.session_protection = 'strong'

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        """JSON 401 instead of a redirect to a login page"""
        app.logger.warning(f"Unauthorized access attempt to {request.path} from {request.remote_addr}")
        return jsonify({'error': 'Authentication required'}), 401

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (ValueError, TypeError):
            app.logger.warning(f"Invalid user_id provided to user_loader: {user_id}")
            return None

    register_blueprints(app)
    _register_error_handlers(app)
    _register_commands(app)

    @app.route('/')
    def index():
        return jsonify({
            'message': 'SAM Climatiza API',
            'status': 'running',
            'version': '1.0.0',
            'environment': config_name,
            'health': '/api/health'
        })

    with app.app_context():
        db.create_all()
        app.logger.info("Database tables created/verified")

    total_routes = len(list(app.url_map.iter_rules()))
    app.logger.info(f"SAM Climatiza API created ({total_routes} routes, environment: {config_name})")
    return app


def _configure_logging(app, config_name):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    if app.debug:
        app.logger.setLevel(logging.DEBUG)
    elif config_name == 'production':
        logging.basicConfig(level=level)
        app.logger.setLevel(level)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        app.logger.addHandler(handler)
    else:
        app.logger.setLevel(level)


def _register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not Found', 'message': f'{request.path} does not exist'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': f'The method {request.method} is not allowed for {request.path}'
        }), 405

    @app.errorhandler(413)
    def request_too_large(error):
        limit_mb = app.config['MAX_CONTENT_LENGTH'] // (1024 * 1024)
        return jsonify({'error': f'Upload too large (limit {limit_mb}MB)'}), 413

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Internal server error: {error}")
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred. Please try again later.'
        }), 500


def _register_commands(app):
    @app.cli.command('create-admin')
    @click.option('--username', prompt=True)
    @click.option('--name', prompt=True)
    @click.option('--email', prompt=True)
    @click.password_option()
    def create_admin(username, name, email, password):
        """Create an administrator account."""
        if User.query.filter_by(username=username).first():
            raise click.ClickException(f"User '{username}' already exists")

        user = User(username=username, name=name, email=email, role='admin', is_active=True)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        click.echo(f"Created admin '{username}'")


if __name__ == '__main__':
    local_app = create_app()
    port = int(os.environ.get('PORT', 5000))
    local_app.run(
        debug=local_app.config.get('DEBUG', False),
        host='0.0.0.0',
        port=port
    )
