import logging


class ReporterError(Exception):
    pass


class InvalidDSN(ReporterError, ValueError):
    """
    Raised when a DSN string cannot be turned into a collector endpoint.  This is a
    configuration problem and is surfaced when the client is built, never at capture time.
    """


class TransportError(ReporterError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SeverityError(Exception):
    """
    An exception that carries a numeric severity, using the stdlib `logging` level numbers.
    The exception reporter maps it onto the event level.
    """

    def __init__(self, message: str = "", severity: int = logging.ERROR):
        super().__init__(message)
        self.severity = severity
