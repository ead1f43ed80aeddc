"""
TAPS Application Factory
Transcript Automation and Processing Service
"""

import os
from flask import Flask
from flask_cors import CORS
from taps.models import db
from taps.routes import request_bp, admin_bp
from taps.services import init_workflow
from taps.utils import setup_logging, log_info, log_error


def create_app(config_name: str = None, channel=None, clock=None) -> Flask:
    """
    Application factory

    Args:
        config_name: Configuration name (development, production, testing)
        channel: Notification channel override; SMTP from config when omitted
        clock: Callable returning naive UTC now, for the workflow service

    Returns:
        Flask application instance
    """
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Import and set configuration
    from config import config
    config_class = config.get(config_name, config['default'])
    app.config.from_object(config_class)
    config_class.init_app(app)

    # Initialize extensions
    db.init_app(app)
    CORS(app)
    init_workflow(app, channel=channel, clock=clock)

    # Setup logging
    with app.app_context():
        setup_logging()
        log_info("Application initialized")

    # Register blueprints
    app.register_blueprint(request_bp, url_prefix='/api')
    app.register_blueprint(admin_bp, url_prefix='/api')

    from taps.cli import register_commands
    register_commands(app)

    # Create database tables
    with app.app_context():
        try:
            db.create_all()
            log_info("Database tables created successfully")
        except Exception as e:
            log_error("Database initialization warning", e)

    return app
