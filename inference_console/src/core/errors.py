class ConsoleError(Exception):
    def __init__(self, code: str, message: str, status_code: int = 400, details: dict | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class ValidationError(ConsoleError):
    """Bad or incomplete options, detected before any network call."""


class TransportError(ConsoleError):
    """The inference service answered with a non-2xx status or could not be reached."""

    def __init__(self, message: str, upstream_status: int | None = None, body: str = ''):
        super().__init__(
            'BACKEND_HTTP_ERROR',
            message,
            status_code=502,
            details={'upstream_status': upstream_status, 'body': body},
        )
        self.upstream_status = upstream_status
        self.body = body


class ProcessingError(ConsoleError):
    """Well-formed response that reports failure or lacks the processed image."""

    def __init__(self, message: str, code: str = 'PROCESSING_FAILED'):
        super().__init__(code, message, status_code=502)
