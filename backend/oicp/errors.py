"""
Error types for the OICP flag engine.

Missing or malformed business data never raises: it only disables the
rules that need it. These exceptions cover programmer errors, such as a
concentration context that is not a context at all.
"""


class DomainError(Exception):
    """Base class for domain-level errors."""
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidContextError(DomainError):
    """Concentration context is missing a required aggregate map."""
    error_code = "INVALID_CONTEXT"


class InvalidReleaseError(DomainError):
    """Normalizer input is not a release, record or procedure."""
    error_code = "INVALID_RELEASE"
