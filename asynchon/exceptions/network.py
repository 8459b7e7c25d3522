"""
Transport failures while talking to the hOn cloud.

:class:`asynchon.commands.HonCommand` wraps every one of them into a
:class:`asynchon.exceptions.TransmissionError` when sending.
"""

from asynchon.exceptions import HonException


class NetworkException(HonException):
    """A request to the hOn cloud did not produce a usable answer."""
    pass


class NetworkConnectionError(NetworkException):
    """The API host could not be reached (DNS, TLS or refused connection)."""
    pass


class NetworkTimeoutError(NetworkException):
    """No answer arrived within ``settings.request_timeout`` seconds."""
    pass


class ResponseError(NetworkException):
    """The hOn cloud answered with an error status.

    A 401/403 usually means the cognito or id token has expired and must be
    refreshed by the caller; 5xx answers are outages on the vendor side.
    Failures inside aiohttp that are neither connection nor timeout errors
    are reported with status 500.
    """

    def __init__(self, status_code, message=None):
        """Initialize the exception.

        Args:
            status_code: HTTP status of the answer
            message: Endpoint or detail the failure relates to
        """
        self.status_code = status_code
        self.message = message
        super().__init__(f"hOn API returned {status_code}{': ' + message if message else ''}")

    @property
    def is_auth_error(self):
        """Whether the tokens were rejected."""
        return self.status_code in (401, 403)
