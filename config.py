import os

from dotenv import load_dotenv

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))

DEFAULT_CORS_ORIGINS = (
    'http://localhost:5173,'
    'https://cebwps2welfare.netlify.app,'
    'https://cebwelfare.netlify.app'
)


def _env_flag(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key-here-make-it-long'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'welfare.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    PORT = int(os.environ.get('PORT', 5000))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get('CORS_ORIGINS', DEFAULT_CORS_ORIGINS).split(',')
        if origin.strip()
    ]

    # Session token / cookie
    AUTH_COOKIE_NAME = os.environ.get('AUTH_COOKIE_NAME', 'jwt')
    AUTH_TOKEN_MAX_AGE = int(os.environ.get('AUTH_TOKEN_MAX_AGE', 30 * 24 * 60 * 60))
    AUTH_COOKIE_SECURE = _env_flag('AUTH_COOKIE_SECURE')


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    LOG_LEVEL = 'WARNING'
