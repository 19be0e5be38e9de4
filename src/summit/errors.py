from enum import Enum


class SummitError(Exception):
    """Base class for errors raised by the summit package."""


class RepositoryError(SummitError):
    """A repository call failed (transport, auth or storage failure)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ConflictError(RepositoryError):
    """The membership being created already exists."""


class AuthError(SummitError):
    """Sign-in or sign-up was rejected by the auth backend."""


class ConfigError(SummitError):
    """The configuration does not describe a usable backend."""


class ErrorKind(str, Enum):
    """How a caught failure is reported to the user."""

    FETCH = "FetchError"
    TOGGLE = "ToggleError"
    UNAUTHENTICATED = "Unauthenticated"
