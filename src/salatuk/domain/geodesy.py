"""Great-circle bearing and qibla direction."""

import math

from salatuk.domain.models import GeoCoordinate

KAABA = GeoCoordinate(latitude=21.4225, longitude=39.8262)

# Heading tolerance (degrees) within which the device counts as facing the qibla
QIBLA_TOLERANCE = 5.0


def normalize_degrees(angle: float) -> float:
    """Map any angle into [0, 360)."""
    normalized = math.fmod(angle, 360.0)
    if normalized < 0:
        normalized += 360.0
    # fmod of a tiny negative value can round up to exactly 360
    return 0.0 if normalized >= 360.0 else normalized


def bearing(origin: GeoCoordinate, target: GeoCoordinate) -> float:
    """
    Initial great-circle bearing from *origin* to *target*.

    Returns degrees clockwise from true north in [0, 360). Coincident
    points have no defined bearing and yield 0.
    """
    if origin == target:
        return 0.0

    phi1 = math.radians(origin.latitude)
    phi2 = math.radians(target.latitude)
    delta_lambda = math.radians(target.longitude - origin.longitude)

    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    theta = math.degrees(math.atan2(y, x))
    return normalize_degrees(theta + 360.0)


def qibla_bearing(location: GeoCoordinate) -> float:
    """Bearing from *location* to the Kaaba."""
    return bearing(location, KAABA)


def relative_qibla_angle(qibla: float, heading: float) -> float:
    """Rotation a compass needle needs, given the device heading."""
    return normalize_degrees(qibla - heading)


def is_facing_qibla(qibla: float, heading: float, tolerance: float = QIBLA_TOLERANCE) -> bool:
    """True when *heading* is within *tolerance* degrees of the qibla on either side."""
    diff = relative_qibla_angle(qibla, heading)
    return diff <= tolerance or diff >= 360.0 - tolerance
