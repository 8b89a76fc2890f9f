"""
Logging setup for the survey service.

Called once from create_app(). Level and format come from
survey_tracker.config (LOG_LEVEL / LOG_FORMAT env vars). In JSON mode every
line emitted while a Flask request is being handled carries the request's
method and path, so store and engine warnings can be traced to the call that
caused them.
"""
import json
import logging
import sys
from datetime import datetime, timezone

from flask import has_request_context, request

from survey_tracker import config

TEXT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s — %(message)s'


class RequestContextFilter(logging.Filter):
    """Stamp records with the current request's method and path, if any."""

    def filter(self, record):
        if has_request_context():
            record.method = request.method
            record.path = request.path
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; Cyrillic item names are written as is."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        method = getattr(record, 'method', None)
        if method:
            entry['method'] = method
            entry['path'] = record.path
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


# Per-statement and per-request chatter at INFO
_NOISY_LOGGERS = [
    'sqlalchemy.engine',
    'werkzeug',
    'urllib3',
]


def _resolve_level(name):
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(level=None, log_format=None):
    """
    Install a single stderr handler on the root logger.

    Args:
        level: level name; defaults to config.LOG_LEVEL, unknown names fall back to INFO.
        log_format: "text" or "json"; defaults to config.LOG_FORMAT.
    """
    level = _resolve_level(level or config.LOG_LEVEL)
    log_format = (log_format or config.LOG_FORMAT).lower()

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(RequestContextFilter())
    if log_format == 'json':
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
