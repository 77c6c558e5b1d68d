"""Exception taxonomy for chart and transit computation."""


class AstroCalError(Exception):
    """Base exception for all engine errors."""
    pass


class ProviderUnavailable(AstroCalError):
    """Raised when the ephemeris backend never became ready."""
    pass


class IncompletePositions(AstroCalError):
    """Raised when the Sun or Moon position could not be computed."""

    def __init__(self, missing):
        self.missing = tuple(missing)
        super().__init__(f"Failed to calculate planetary positions: {', '.join(self.missing)}")


class HouseCalculationError(AstroCalError):
    """Raised when house cusps or angles cannot be computed."""
    pass


class InvalidCoordinatesError(AstroCalError, ValueError):
    """Raised when latitude/longitude are out of range."""
    pass


class InvalidDateTimeError(AstroCalError, ValueError):
    """Raised when a date or time string cannot be parsed."""
    pass
