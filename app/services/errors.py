"""Domain errors raised by services and mapped to HTTP responses in app.main"""


class ServiceError(Exception):
    """Base class for expected, client-facing service failures"""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class ValidationFailedError(ServiceError):
    status_code = 400


class UpstreamError(ServiceError):
    """A proxied third-party API failed or answered with something unusable"""

    status_code = 502


class ServiceUnavailableError(ServiceError):
    status_code = 503
