"""
Error taxonomy — Transaction Service
Every error that reaches a route handler is a ServiceError and knows its HTTP status.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message}


class ConfigError(ServiceError):
    """Required settings are missing; fatal at startup."""


class ValidationError(ServiceError):
    status_code = 400


class UpstreamAssessmentError(ServiceError):
    """Risk assessor unreachable, failed, or answered with an unknown tier."""


class VerificationRejected(ServiceError):
    status_code = 400


class VerificationSystemError(ServiceError):
    status_code = 500


class PersistenceError(ServiceError):
    status_code = 500


class ScamCheckError(ServiceError):
    status_code = 502
