import os
from datetime import timedelta


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me')

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///fitdesk.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'your-secret-key-change-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    # httpOnly cookies for the browser, Authorization header for API clients
    JWT_TOKEN_LOCATION = ['cookies', 'headers']
    JWT_HEADER_NAME = 'Authorization'
    JWT_HEADER_TYPE = 'Bearer'
    JWT_COOKIE_SECURE = True
    JWT_COOKIE_CSRF_PROTECT = True
    JWT_COOKIE_SAMESITE = 'Lax'
    JWT_ACCESS_COOKIE_NAME = 'access_token_cookie'
    JWT_ACCESS_COOKIE_PATH = '/'

    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')

    # Rate limiting
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = 'memory://'
    RATELIMIT_HEADERS_ENABLED = True
    LOGIN_RATE_LIMIT = '10 per 15 minutes'

    # File storage
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER', os.path.join(os.getcwd(), 'storage'))
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024
    MAX_DOCUMENT_SIZE = 5 * 1024 * 1024
    ALLOWED_DOCUMENT_TYPES = [
        'application/pdf',
        'image/jpeg',
        'image/png',
        'image/webp',
        'application/msword',
        'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    ]
    ALLOWED_PROOF_TYPES = ['application/pdf', 'image/jpeg', 'image/png', 'image/webp']
    SIGNED_URL_EXPIRES = 3600

    # Password policy
    PASSWORD_MIN_LENGTH = 8
    PASSWORD_MAX_LENGTH = 72
    TEMPORARY_PASSWORD_LENGTH = 16

    # Tenancy
    TRIAL_DAYS = int(os.getenv('TRIAL_DAYS', 14))

    # Overdue payment check
    SCHEDULER_ENABLED = True
    SCHEDULER_API_ENABLED = False
    OVERDUE_CHECK_MINUTES = int(os.getenv('OVERDUE_CHECK_MINUTES', 60))

    SOCKETIO_ASYNC_MODE = os.getenv('SOCKETIO_ASYNC_MODE') or None

    # Errors shown to end users are mapped to friendly messages
    FRIENDLY_ERRORS = True

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_CSRF_PROTECT = False
    FRIENDLY_ERRORS = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False
    SECRET_KEY = os.getenv('SECRET_KEY')
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')
    PREFERRED_URL_SCHEME = 'https'


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    JWT_SECRET_KEY = 'test-jwt-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    JWT_COOKIE_SECURE = False
    JWT_COOKIE_CSRF_PROTECT = False
    RATELIMIT_ENABLED = False
    SCHEDULER_ENABLED = False
    SOCKETIO_ASYNC_MODE = 'threading'
    FRIENDLY_ERRORS = False
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
