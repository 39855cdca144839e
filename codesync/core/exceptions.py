"""Errors raised by the room session layer.

Each one is turned into a wire signal (or dropped) at the socket handler
boundary; none of them is allowed to reach other rooms or connections.
"""


class SessionError(Exception):
    """Base class for room session errors."""

    message = "Session error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class DuplicateUsernameError(SessionError):
    """The username is already present in the room."""

    message = "This username is already taken."


class JoinFailedError(SessionError):
    """The join sequence failed for an internal reason."""

    message = "An error occurred while joining."


class InvalidEventError(SessionError):
    """An inbound event had an unknown name or a malformed payload."""

    message = "Invalid event"
