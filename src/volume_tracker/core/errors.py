"""Exception types shared by the engine, the store and the CLI."""


class TrackerError(Exception):
    """Base class for volume-tracker errors."""


class ValidationError(TrackerError, ValueError):
    """Raised when data validation fails."""


class NotFoundError(TrackerError, KeyError):
    """Raised when an exercise or history entry id is unknown."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep plain messages for the CLI
        return str(self.args[0]) if self.args else ""
