"""
Application factory and initialization.
"""

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from dotenv import load_dotenv
import logging
import os

# Load environment variables
load_dotenv()

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = 'True') -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def create_app(config=None):
    """
    Create and configure the Flask application.

    ``config`` overrides the environment-derived settings; tests use it to
    point the app at an in-memory database.
    """
    app = Flask(__name__)

    # Configuration
    app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev-secret-key-change-me')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.getenv('DATABASE_URL', 'sqlite:///earn_tracker.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['BASE_CURRENCY'] = os.getenv('BASE_CURRENCY', 'UAH').upper()
    app.config['NBU_API_URL'] = os.getenv(
        'NBU_API_URL', 'https://bank.gov.ua/NBUStatService/v1/statdirectory/exchange'
    )
    app.config['EXCHANGE_RATE_TIMEOUT'] = float(os.getenv('EXCHANGE_RATE_TIMEOUT', 5))
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO').upper()
    app.config['SEED_ADMIN'] = _env_flag('SEED_ADMIN')
    app.config['ADMIN_USERNAME'] = os.getenv('ADMIN_USERNAME', 'admin')
    app.config['ADMIN_PASSWORD'] = os.getenv('ADMIN_PASSWORD', 'admin')

    if config:
        app.config.update(config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)

    # Register blueprints
    from earn_tracker.routes.auth import auth_bp
    from earn_tracker.routes.main import main_bp
    from earn_tracker.routes.incomes import incomes_bp
    from earn_tracker.routes.tax_rules import tax_rules_bp
    from earn_tracker.routes.events import events_bp
    from earn_tracker.routes.analytics import analytics_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(incomes_bp)
    app.register_blueprint(tax_rules_bp)
    app.register_blueprint(events_bp)
    app.register_blueprint(analytics_bp)

    _register_error_handlers(app)

    # Create database tables
    with app.app_context():
        import earn_tracker.models  # noqa: F401
        db.create_all()
        if app.config['SEED_ADMIN']:
            from earn_tracker.utils.init_db import init_admin_user
            init_admin_user(app.config['ADMIN_USERNAME'], app.config['ADMIN_PASSWORD'])

    return app


def _register_error_handlers(app):
    from earn_tracker.errors import EarnTrackerError

    @app.errorhandler(EarnTrackerError)
    def handle_app_error(error):
        if error.status_code >= 500:
            logger.error("Request failed: %s", error, exc_info=True)
        else:
            logger.info("Request rejected (%s): %s", error.status_code, error)
        return jsonify(error.to_dict()), error.status_code


@login_manager.user_loader
def load_user(user_id):
    """Load user by ID for Flask-Login."""
    from earn_tracker.models.user import User
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': 'Authentication required'}), 401
