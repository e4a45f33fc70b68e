"""
config.py
=========

Configuration for the product mix API:
- Upstream catalog location and retry settings
- Listing page sizes
- Rate limiting settings
- Logging and metrics
"""

import os

from listing import CANONICAL_CATEGORIES


class Config:
    """Base configuration class"""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'
    TESTING = False
    ENV_NAME = 'default'

    # Server (start_server.py)
    SERVER_HOST = os.environ.get('HOST', '0.0.0.0')
    SERVER_PORT = int(os.environ.get('PORT', '5000'))
    SERVER_THREADS = int(os.environ.get('THREADS', '4'))
    SERVER_URL_SCHEME = 'https' if os.environ.get('HTTPS', 'false').lower() == 'true' else 'http'

    # Upstream catalog
    CATALOG_API_URL = os.environ.get('CATALOG_API_URL', 'http://localhost:5000')
    CATALOG_POOL_SIZE = int(os.environ.get('CATALOG_POOL_SIZE', '500'))
    CATALOG_TIMEOUT = int(os.environ.get('CATALOG_TIMEOUT', '15'))
    CATALOG_MAX_RETRIES = int(os.environ.get('CATALOG_MAX_RETRIES', '3'))
    CATALOG_RETRY_DELAY = float(os.environ.get('CATALOG_RETRY_DELAY', '1.0'))

    # Listing
    CANONICAL_CATEGORIES = CANONICAL_CATEGORIES
    DEFAULT_PAGE_SIZE = int(os.environ.get('DEFAULT_PAGE_SIZE', '10'))
    PAGE_SIZE_CHOICES = (10, 50, 100, 500)

    # Rate limiting settings
    RATELIMIT_ENABLED = os.environ.get('RATELIMIT_ENABLED', 'True').lower() == 'true'
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    RATE_LIMIT_PER_HOUR = os.environ.get('RATE_LIMIT_PER_HOUR', '1000')
    RATE_LIMIT_PER_MINUTE = os.environ.get('RATE_LIMIT_PER_MINUTE', '60')

    # Logging settings
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Performance monitoring
    ENABLE_METRICS = os.environ.get('ENABLE_METRICS', 'True').lower() == 'true'


class DevelopmentConfig(Config):
    """Development configuration"""
    ENV_NAME = 'development'
    DEBUG = True
    CATALOG_MAX_RETRIES = 1
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production configuration"""
    ENV_NAME = 'production'
    DEBUG = False
    CATALOG_MAX_RETRIES = 3


class TestingConfig(Config):
    """Testing configuration"""
    ENV_NAME = 'testing'
    TESTING = True
    RATELIMIT_ENABLED = False
    CATALOG_API_URL = 'http://catalog.test'
    CATALOG_MAX_RETRIES = 1
    CATALOG_RETRY_DELAY = 0.0


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: str = None) -> type:
    """Get configuration based on environment"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'default')

    return config.get(config_name, config['default'])
