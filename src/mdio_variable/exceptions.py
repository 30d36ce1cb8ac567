"""Custom exceptions related to MDIO Variable functionality."""

from __future__ import annotations


class MDIOError(Exception):
    """Base exceptions class."""


class InvalidArgumentError(MDIOError, ValueError):
    """Raised when a schema, descriptor, or payload is malformed or conflicting.

    Args:
        message: Message to show with the exception.
        expected: String form of the expected value for the `message`.
        actual: String form of the received value for the `message`.
    """

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None):
        if expected is not None and actual is not None:
            message = f"{message} - Expected: {expected}, but got: {actual}"

        super().__init__(message)


class NotFoundError(MDIOError, LookupError):
    """Raised when a required field, key, or stored object doesn't exist."""


class AlreadyExistsError(MDIOError):
    """Raised when a Variable is created over an existing array."""


class EnvironmentFormatError(MDIOError):
    """Raised when an environment variable can't be parsed into its expected type.

    Args:
        name: Name of the environment variable.
        expected: Name of the expected type.
    """

    def __init__(self, name: str, expected: str):
        super().__init__(f"Environment variable {name} must be of type {expected}")
