# aquasense/core/config.py

import os
from datetime import timedelta


# Shared by create_app() and the runtime runner.
LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'


class Config:
    """Settings shared by every environment."""
    # Signs and verifies the API's access/refresh tokens.
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES_MINUTES', 60)))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=int(os.getenv('JWT_REFRESH_TOKEN_EXPIRES_DAYS', 14)))

    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')
    FIREBASE_DATABASE_URL = os.getenv('FIREBASE_DATABASE_URL')
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')

    # Cron endpoints refuse every call while this is unset.
    CRON_SECRET = os.getenv('CRON_SECRET')

    RUNTIME_TICK_SECONDS = int(os.getenv('RUNTIME_TICK_SECONDS', 60))
    SAMPLE_INTERVAL_SECONDS = int(os.getenv('SAMPLE_INTERVAL_SECONDS', 300))
    # Dashboards re-poll at this interval when the database is unreachable.
    REFRESH_FALLBACK_SECONDS = int(os.getenv('REFRESH_FALLBACK_SECONDS', 30))


class DevelopmentConfig(Config):
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'testing-secret-key-with-at-least-32-bytes')
    CRON_SECRET = 'testing-cron-secret'
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')


class ProductionConfig(Config):
    DEBUG = False


# create_app() and the runtime runner pick the class by FLASK_ENV.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)
