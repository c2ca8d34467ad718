"""Error taxonomy shared by the layout engine, collectors and entrypoint."""

from __future__ import annotations


class InvalidDimension(ValueError):
    """Raised when a widget or container is given a negative size."""

    def __init__(self, width: int, height: int):
        super().__init__(f"invalid dimension {width}x{height}: sizes must be non-negative")
        self.width = width
        self.height = height


class InitializationFailure(RuntimeError):
    """Collaborator setup failed before the dashboard loop started."""


class TaskServiceError(RuntimeError):
    """The remote task service could not be reached or answered unexpectedly."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def check_dimensions(width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise InvalidDimension(width, height)
