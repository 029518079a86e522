"""Failure kinds raised by the credential core.

Every failure the auth service reports is an ``AuthError`` subclass. The
``kind`` attribute is the stable name a caller switches on; ``message`` is
safe to show to the client verbatim; ``status_code`` is the HTTP status the
API layer maps the failure to.
"""


class AuthError(Exception):
    """Base class for all named auth failures."""

    kind: str = "AuthError"
    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(AuthError):
    """A required field is missing, blank, too long, or outside its allowed set."""

    kind = "ValidationError"
    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class DuplicateEmailError(AuthError):
    kind = "DuplicateEmail"
    status_code = 409


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password; the two cases are not distinguished."""

    kind = "InvalidCredentials"
    status_code = 401


class MissingTokenError(AuthError):
    kind = "MissingToken"
    status_code = 403


class TokenExpiredError(AuthError):
    kind = "Expired"
    status_code = 401


class TokenMalformedError(AuthError):
    """Bad signature, wrong key, wrong token type, or undecodable input."""

    kind = "Malformed"
    status_code = 401


class TokenNotYetValidError(AuthError):
    kind = "NotYetValid"
    status_code = 401


class ForbiddenError(AuthError):
    """Authenticated, but the role does not grant access."""

    kind = "Forbidden"
    status_code = 403


class StorageUnavailableError(AuthError):
    """Transient storage failure (connection lost, timeout). Safe to retry."""

    kind = "StorageUnavailable"
    status_code = 503


class ConfigurationError(AuthError):
    """Fatal misconfiguration detected at startup (e.g. missing signing key)."""

    kind = "ConfigurationError"
    status_code = 500
