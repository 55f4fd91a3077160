"""
Configuration management for the prompt context service

Loads environment variables and provides configuration classes for different environments.
"""
import json
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def parse_priority_weights(raw):
    """
    Parse a JSON object of priority weight overrides.

    Args:
        raw (str): JSON text such as '{"event": 5, "world.history": 2}'

    Returns:
        dict mapping type prefix to weight ({} for empty input)

    Raises:
        ValueError: If the text is not a JSON object of numbers
    """
    if not raw:
        return {}

    try:
        weights = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"CONTEXT_PRIORITY_WEIGHTS is not valid JSON: {e}") from e

    if not isinstance(weights, dict):
        raise ValueError("CONTEXT_PRIORITY_WEIGHTS must be a JSON object")

    for key, value in weights.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Priority weight for '{key}' must be a number, got {value!r}")

    return weights


class Config:
    """Base configuration with common settings."""

    # Flask Core
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # Context assembly
    CONTEXT_TOKEN_LIMIT = int(os.getenv('CONTEXT_TOKEN_LIMIT', 1000))
    CONTEXT_PRIORITY_WEIGHTS = parse_priority_weights(os.getenv('CONTEXT_PRIORITY_WEIGHTS'))

    @classmethod
    def validate_required_config(cls):
        """Validate that configured values are usable."""
        if cls.CONTEXT_TOKEN_LIMIT < 1:
            raise ValueError(
                f"CONTEXT_TOKEN_LIMIT must be at least 1, got {cls.CONTEXT_TOKEN_LIMIT}. "
                f"Please check your .env file."
            )


class DevelopmentConfig(Config):
    """Development environment configuration."""
    DEBUG = True
    TESTING = False

    # More verbose logging in development
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG').upper()


class ProductionConfig(Config):
    """Production environment configuration."""
    DEBUG = False
    TESTING = False

    # Stricter session security in production
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing environment configuration."""
    DEBUG = True
    TESTING = True

    # Tests always run against the built-in defaults
    CONTEXT_TOKEN_LIMIT = 1000
    CONTEXT_PRIORITY_WEIGHTS = {}


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """
    Get configuration for the specified environment.

    Args:
        env (str): Environment name ('development', 'production', 'testing')
                   If None, uses FLASK_ENV environment variable or 'development'

    Returns:
        Config subclass
    """
    if env is None:
        env = os.getenv('FLASK_ENV', 'development')

    return config.get(env, config['default'])
