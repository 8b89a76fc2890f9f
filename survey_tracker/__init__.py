"""
Flask application factory.

Creates and configures the Flask app, wires the record store into the
reporting engine and registers all blueprints.
"""
import logging
from flask import Flask, jsonify

from survey_tracker.errors import SurveyError

logger = logging.getLogger('survey_tracker')


def create_app(store=None):
    """
    Create and configure the Flask application.

    Args:
        store: RecordStore to serve. When omitted, one is built from
               STORE_BACKEND / DATA_FILE / DATABASE_URL.
    """
    from survey_tracker.logging_config import configure_logging
    from survey_tracker.extensions import init_engine

    app = Flask(__name__)

    configure_logging()

    # Item names are Cyrillic; keep them readable in JSON responses
    app.json.ensure_ascii = False

    if store is None:
        from survey_tracker import config
        from survey_tracker.stores import build_store
        store = build_store(config.STORE_BACKEND, config.DATABASE_URL, config.DATA_FILE)

    init_engine(app, store)

    @app.errorhandler(SurveyError)
    def handle_survey_error(e):
        if e.status_code >= 500:
            logger.error("%s: %s", e.__class__.__name__, e.message, exc_info=e)
        else:
            logger.info("%s: %s", e.__class__.__name__, e.message)
        return jsonify({'error': e.message}), e.status_code

    # Register blueprints
    from survey_tracker.routes.data import bp as data_bp
    from survey_tracker.routes.reports import bp as reports_bp
    from survey_tracker.routes.health import bp as health_bp

    app.register_blueprint(data_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(health_bp)

    return app
