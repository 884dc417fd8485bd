"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    # Database - a local SQLite file unless DATABASE_URL is given
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        DB_PATH = os.getenv('DB_PATH', os.path.join(os.path.dirname(__file__), 'rab_maker.sqlite'))
        DATABASE_URL = f"sqlite:///{DB_PATH}"

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Cost calculation
    # True: a failed calculation aborts the work item write as well.
    # False: the work item is kept and the failure is only logged.
    COST_CALCULATION_STRICT = os.getenv('COST_CALCULATION_STRICT', 'true').lower() == 'true'

    # Template deletion: 'block' while work items use the template, or 'cascade'
    TEMPLATE_DELETE_POLICY = os.getenv('TEMPLATE_DELETE_POLICY', 'block').lower()

    # Dashboard
    RECENT_PROJECTS_LIMIT = int(os.getenv('RECENT_PROJECTS_LIMIT', '5'))

    # Business Information (for exported reports)
    BUSINESS_NAME = os.getenv('BUSINESS_NAME', 'RAB Maker')
    BUSINESS_ADDRESS = os.getenv('BUSINESS_ADDRESS', '')
    BUSINESS_PHONE = os.getenv('BUSINESS_PHONE', '')
    BUSINESS_EMAIL = os.getenv('BUSINESS_EMAIL', '')


class TestConfig(Config):
    """Configuration used by the test suite."""

    TESTING = True
    DEBUG = False
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = 'DEBUG'
