import os


class Config:
    # Database
    DATABASE_URL = os.getenv(
        'DATABASE_URL',
        'sqlite:///bracket_runner.db'
    )
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Redis
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379')
    PUBLISH_EVENTS = os.getenv('PUBLISH_EVENTS', 'false').lower() == 'true'

    # Remote tournament services
    REMOTE_SERVICE_URL = os.getenv('REMOTE_SERVICE_URL', 'http://localhost:8765')
    REMOTE_TIMEOUT = float(os.getenv('REMOTE_TIMEOUT', '10'))


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    DEBUG = False
    PUBLISH_EVENTS = os.getenv('PUBLISH_EVENTS', 'true').lower() == 'true'


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    PUBLISH_EVENTS = False


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
