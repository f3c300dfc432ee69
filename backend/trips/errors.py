"""Domain error taxonomy for the component engine."""


class TripEngineError(Exception):
    """Base class for errors raised by the component engine."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(TripEngineError):
    """A referenced component, day, pricing row or itinerary does not exist."""

    pass


class InvalidInputError(TripEngineError):
    """Input failed validation (enumerations, ranges, ownership, date bounds)."""

    pass


class ConflictError(TripEngineError):
    """State conflict, e.g. a duplicate payment schedule or a running regeneration."""

    pass
