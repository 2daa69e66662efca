import os
from datetime import timedelta
from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


def _normalize_database_url(database_url):
    """SQLAlchemy only accepts the postgresql:// scheme"""
    if database_url and database_url.startswith('postgres://'):
        return database_url.replace('postgres://', 'postgresql://', 1)
    return database_url


class Config:
    """Base configuration"""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    SQLALCHEMY_DATABASE_URI = None  # Set in __init__
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }

    # Session
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)
    REMEMBER_COOKIE_DURATION = timedelta(hours=24)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_NAME = 'sam_climatiza_session'

    # Web dev server and the packaged mobile shell
    CORS_ORIGINS = [
        'http://localhost:5000',
        'http://127.0.0.1:5000',
        'http://localhost:5173',
        'http://10.0.0.12:5000',
        'capacitor://localhost',
    ]
    CORS_SUPPORTS_CREDENTIALS = True

    # Files
    PDF_FOLDER = os.environ.get('PDF_FOLDER', os.path.join(basedir, 'public', 'pdf'))
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', os.path.join(basedir, 'uploads'))
    MAX_PHOTO_SIZE = int(os.environ.get('MAX_PHOTO_SIZE', 5 * 1024 * 1024))  # 5MB
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024
    AZURE_STORAGE_CONNECTION_STRING = os.environ.get('AZURE_STORAGE_CONNECTION_STRING')
    AZURE_STORAGE_CONTAINER_NAME = os.environ.get('AZURE_STORAGE_CONTAINER_NAME', 'uploads')

    # Letterhead for generated PDFs
    COMPANY_NAME = os.environ.get('COMPANY_NAME', 'SAM Climatiza')
    COMPANY_ADDRESS = os.environ.get('COMPANY_ADDRESS', 'Rua Principal, 100 - Centro')
    COMPANY_PHONE = os.environ.get('COMPANY_PHONE', '(11) 99999-9999')
    COMPANY_EMAIL = os.environ.get('COMPANY_EMAIL', 'contato@samclimatiza.com.br')
    COMPANY_LOGO = os.environ.get('COMPANY_LOGO', os.path.join(basedir, 'public', 'logo.png'))

    TIMEZONE = os.environ.get('TIMEZONE', 'America/Sao_Paulo')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    def __init__(self):
        self.SQLALCHEMY_DATABASE_URI = (
            _normalize_database_url(os.environ.get('DATABASE_URL'))
            or 'sqlite:///' + os.path.join(basedir, 'instance', 'sam_climatiza.db')
        )


class DevelopmentConfig(Config):
    """Development configuration for local testing"""
    DEBUG = True
    DEVELOPMENT = True

    def __init__(self):
        super().__init__()

        dev_database_url = _normalize_database_url(os.environ.get('DEV_DATABASE_URL'))
        if dev_database_url:
            self.SQLALCHEMY_DATABASE_URI = dev_database_url

        self.SQLALCHEMY_ENGINE_OPTIONS = {
            **Config.SQLALCHEMY_ENGINE_OPTIONS,
            'echo': os.environ.get('SQLALCHEMY_ECHO', 'False').lower() in ('true', '1', 't'),
        }


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    DEVELOPMENT = False
    SESSION_COOKIE_SECURE = True

    def __init__(self):
        super().__init__()

        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable is required for production")
        self.SECRET_KEY = secret_key

        database_url = os.environ.get('DATABASE_URL')
        if not database_url:
            raise ValueError("DATABASE_URL environment variable is required for production")
        self.SQLALCHEMY_DATABASE_URI = _normalize_database_url(database_url)

        extra_origins = os.environ.get('CORS_ORIGINS')
        if extra_origins:
            self.CORS_ORIGINS = [origin.strip() for origin in extra_origins.split(',') if origin.strip()]

        self.SQLALCHEMY_ENGINE_OPTIONS = {
            'pool_recycle': 3600,
            'pool_pre_ping': True,
            'pool_size': 10,
            'max_overflow': 20,
            'pool_timeout': 30,
        }


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'testing-secret-key'

    def __init__(self):
        super().__init__()
        self.SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
        self.SQLALCHEMY_ENGINE_OPTIONS = {}
        self.AZURE_STORAGE_CONNECTION_STRING = None


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config_name():
    """Detect environment from FLASK_ENV and deployment markers"""
    flask_env = os.environ.get('FLASK_ENV', '').lower()
    if flask_env in ['production', 'testing', 'development']:
        return flask_env

    if os.environ.get('TESTING') or os.environ.get('CI'):
        return 'testing'

    return 'development'


__all__ = [
    'config',
    'get_config_name',
    'Config',
]
