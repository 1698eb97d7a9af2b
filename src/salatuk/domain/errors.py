"""Domain errors."""


class SalatukError(Exception):
    """Base class for all domain errors."""


class InvalidCoordinateError(SalatukError, ValueError):
    """Latitude or longitude is outside its valid range."""


class PrayerTimeUndefinedError(SalatukError):
    """The sun never reaches the requested angle on this day.

    Raised by the hour-angle solver and recovered by the high-latitude rule;
    callers of the public calculation API never see it.
    """

    def __init__(self, angle: float, latitude: float, declination: float) -> None:
        super().__init__(
            f"Sun does not reach {angle:.3f}° at latitude {latitude:.4f} "
            f"(declination {declination:.4f})"
        )
        self.angle = angle
        self.latitude = latitude
        self.declination = declination


class PrayerTimesUncomputableError(SalatukError):
    """Prayer times cannot be solved even after the high-latitude fallback."""
