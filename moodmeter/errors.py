"""
Exceptions raised by the Mood Meter service.
"""

INVALID_SESSION_MESSAGE = "Invalid or missing session ID."
NO_DATA_MESSAGE = "No mood data found for this session."
FETCH_ERROR_MESSAGE = "An error occurred while fetching mood data. Please try again."


class MoodMeterError(Exception):
    """Base class for all Mood Meter errors."""


class RouteNotReadyError(MoodMeterError):
    """Routing information is not available yet."""


class InvalidSessionError(MoodMeterError):
    """The session identifier is missing or empty."""

    def __init__(self, message: str = INVALID_SESSION_MESSAGE) -> None:
        super().__init__(message)


class SubscriptionError(MoodMeterError):
    """A live subscription failed to deliver snapshots."""

    def __init__(self, cause: BaseException | str) -> None:
        self.cause = cause
        super().__init__(f"{FETCH_ERROR_MESSAGE} {cause}")


class SubscriptionClosedError(MoodMeterError):
    """The subscription handle was already detached."""
