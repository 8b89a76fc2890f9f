"""
Per-app shared instances.

create_app() builds one ReportingEngine around the configured RecordStore and
stores it in app.extensions; routes fetch it through get_engine() instead of
importing a module-level singleton.
"""
from flask import current_app

ENGINE_KEY = 'survey_engine'


def init_engine(app, store):
    """Attach a ReportingEngine for ``store`` to ``app``."""
    from survey_tracker.services.reporting import ReportingEngine
    engine = ReportingEngine(store)
    app.extensions[ENGINE_KEY] = engine
    return engine


def get_engine():
    """ReportingEngine of the current app."""
    return current_app.extensions[ENGINE_KEY]
