"""
Exceptions raised by asynchon.
"""


class HonException(Exception):
    """Base exception for all asynchon errors."""
    pass


class ValidationError(HonException, ValueError):
    """Exception raised when a value lies outside a parameter's legal domain.

    The offending value is never committed nor sent.
    """

    def __init__(self, key, value, allowed=None, message=None):
        """Initialize the exception.

        Args:
            key: Parameter (or command) key the value was meant for
            value: The rejected value
            allowed: Human readable description of the legal domain
            message: Optional message overriding the generated one
        """
        self.key = key
        self.value = value
        self.allowed = allowed
        if message is None:
            message = f"Allowed: {allowed} But was: {value}"
        super().__init__(message)


class MissingCredentialsError(HonException):
    """Exception raised when a command is used without an API session."""

    def __init__(self, message="Missing hOn login"):
        super().__init__(message)


class TransmissionError(HonException):
    """Exception raised when a command could not be delivered or was rejected."""

    def __init__(self, command_name, message=None):
        """Initialize the exception.

        Args:
            command_name: Name of the command that failed
            message: Optional error message
        """
        self.command_name = command_name
        self.message = message
        super().__init__(f"Can't send command {command_name}{': ' + message if message else ''}")


class ParseError(HonException):
    """Exception raised when an API response cannot be decoded."""
    pass


__all__ = [
    "HonException",
    "ValidationError",
    "MissingCredentialsError",
    "TransmissionError",
    "ParseError",
]
