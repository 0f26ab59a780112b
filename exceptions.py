class WorkoutError(Exception):
    """Base class for errors raised by the workout engine."""


class WorkoutDataError(WorkoutError, ValueError):
    """Raised when workout input does not have a usable shape."""


class WorkoutFetchError(WorkoutError):
    """Raised when the latest workout could not be fetched or resolved."""


class SetValidationError(WorkoutError, ValueError):
    """Raised when a set cannot be saved because its values are invalid."""


class SaveRequestError(WorkoutError):
    """Raised when the remote store rejects a session save."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ReplaceRequestError(SaveRequestError):
    """Raised when the remote store rejects an exercise replacement."""
