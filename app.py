"""
Flask application entry point for the prompt context service.

Exposes world/character context assembly over HTTP so the narrative
pipeline can request a budgeted context string before calling a model.
"""

import logging
import os
from flask import Flask
from dotenv import load_dotenv
from config import get_config
from services.context_manager import ContextAssembler

# Load environment variables
load_dotenv()


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Environment name; defaults to FLASK_ENV

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration from config.py
    env = config_name or os.getenv('FLASK_ENV', 'development')
    config_class = get_config(env)
    config_class.validate_required_config()
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )

    # One shared assembler; it keeps no per-call state
    app.extensions['context_assembler'] = ContextAssembler(
        priority_weights=app.config['CONTEXT_PRIORITY_WEIGHTS'],
        default_token_limit=app.config['CONTEXT_TOKEN_LIMIT']
    )

    # Register blueprints
    from routes.context import context_bp
    app.register_blueprint(context_bp)

    @app.route('/health')
    def health():
        """Health check endpoint for monitoring."""
        return {'status': 'healthy'}

    return app


if __name__ == '__main__':
    # Development server
    app = create_app()
    debug_mode = os.getenv('DEBUG', 'False').lower() == 'true'
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=debug_mode
    )
