import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent


def _flag(name, default='False'):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-this'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{BASE_DIR}/data/assets.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT') or 25)
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS') is not None
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or 'noreply@demo.com'

    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'admin@123'
    SEED_SAMPLE_DATA = _flag('SEED_SAMPLE_DATA', 'True')

    # 'permissive' records an assignment of a Needs Repair/Damaged asset
    # without flipping its status; 'strict' rejects it.
    ASSIGNMENT_POLICY = os.environ.get('ASSIGNMENT_POLICY') or 'permissive'
    WARRANTY_EXPIRY_WINDOW_DAYS = int(os.environ.get('WARRANTY_EXPIRY_WINDOW_DAYS') or 180)

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.environ.get('SESSION_COOKIE_SAMESITE') or 'Lax'
    SESSION_COOKIE_SECURE = _flag('SESSION_COOKIE_SECURE')
    PERMANENT_SESSION_LIFETIME = timedelta(hours=2)
    REMEMBER_COOKIE_DURATION = timedelta(hours=2)
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    MAIL_SERVER = 'localhost'
    MAIL_SUPPRESS_SEND = True
    SEED_SAMPLE_DATA = False
    ASSIGNMENT_POLICY = 'permissive'
    LOG_LEVEL = 'WARNING'
