"""
Assembly of the final route result handed to the display layer.
"""
from typing import Optional, Sequence

from services.models import (
    Coordinate, NormalizedRoute, RouteResult, RouteWarning, Waypoint, highest_severity
)


def assemble(normalized: NormalizedRoute, warnings: Sequence[RouteWarning],
             start: Coordinate, end: Coordinate) -> RouteResult:
    """
    Merge normalized route fields and audit warnings into a RouteResult.

    An empty warning list leaves RouteResult.warnings empty, so callers can
    test "no warnings" with a plain truth check.
    """
    return RouteResult(
        distance=normalized.distance,
        duration=normalized.duration,
        geometry=tuple(normalized.geometry),
        instructions=tuple(normalized.instructions),
        waypoints=(Waypoint('Start', start), Waypoint('Destination', end)),
        bounding_box=normalized.bounding_box,
        warnings=tuple(warnings)
    )


def risk_summary(result: RouteResult) -> Optional[str]:
    """
    One-line advisory for a route with warnings, None for a clear route.

    Routes crossing a zone get the stronger advice to seek shelter.
    """
    level = highest_severity(result.warnings)
    if level is None:
        return None
    if level == 'critical':
        return "WARNING: Route passes through fire danger zones. Consider finding shelter or an alternative route."
    return "Route passes near fire activity. Proceed with caution and monitor conditions."
