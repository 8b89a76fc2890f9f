"""
Error taxonomy shared by the stores, the reporting engine and the routes.

Every error carries the HTTP status the boundary answers with; the handler
registered in create_app() renders them as {"error": message}.
"""


class SurveyError(Exception):
    """Base class for all survey tracker errors."""
    status_code = 500
    default_message = 'internal error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidSubmission(SurveyError):
    """Request body or key is missing required fields or has the wrong shape."""
    status_code = 400
    default_message = 'invalid data format'


class NotFound(SurveyError):
    """No record exists for the requested date."""
    status_code = 404
    default_message = 'not found'


class NoData(SurveyError):
    """The operation needs at least one stored week."""
    status_code = 404
    default_message = 'no data'


class StorageUnavailable(SurveyError):
    """The backing file or database cannot be reached."""
    status_code = 503
    default_message = 'storage unavailable'


class CorruptState(SurveyError):
    """Persisted content exists but cannot be read back as weekly records."""
    status_code = 500
    default_message = 'stored data is corrupt'
