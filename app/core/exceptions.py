"""
Domain error taxonomy.

Services raise these; controllers and the global handlers in main.py map
them onto HTTP responses.
"""


class PontoError(Exception):
    """Base class for every error raised by the ponto API."""

    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PontoError):
    """Missing or malformed client input. Nothing is mutated."""

    status_code = 400


class NotFoundError(PontoError):
    """Target id absent, or an update that changed nothing."""

    status_code = 404


class StoreError(PontoError):
    """Connectivity or query failure in the interval/member store."""

    status_code = 500

    def __init__(self, operation: str, detail: str = "") -> None:
        super().__init__(f"Store operation '{operation}' failed")
        self.operation = operation
        self.detail = detail


class ConfigurationError(PontoError):
    """Required configuration missing at startup. Fatal."""
