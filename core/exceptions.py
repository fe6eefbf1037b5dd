"""
CYAI Threat Platform - Exceptions
"""


class CyaiError(Exception):
    """Base error for the platform"""
    status_code = 500


class ValidationError(CyaiError):
    """Request payload is missing or malformed"""
    status_code = 400


class NotFoundError(CyaiError):
    """Referenced record does not exist"""
    status_code = 404


class IngestionError(CyaiError):
    """Uploaded file could not be parsed"""
    status_code = 400


class UnsupportedFormatError(IngestionError):
    """Uploaded file has an extension other than .csv or .json"""


class DetectionServiceError(CyaiError):
    """Remote detection function failed or returned an error envelope"""
    status_code = 502
