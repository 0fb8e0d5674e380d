import os

class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET', 'dev-key-placeholder')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///tasks.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # "database" or "memory"
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'database')
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'uploads')
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_UPLOAD_MB', '10')) * 1024 * 1024
    REMINDER_EMAIL_TO = os.environ.get('REMINDER_EMAIL_TO', '')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')

class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    STORAGE_BACKEND = 'database'
    REMINDER_EMAIL_TO = 'owner@example.com'
    LOG_LEVEL = 'WARNING'
