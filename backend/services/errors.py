"""
Error taxonomy for route planning.

Every failure of an external call (geocoding, directions, credential lookup)
is classified into one of these at the call site. NotFound and
RouteUnavailable are expected outcomes the user can act on; the operational
failures (AuthenticationFailure, ServiceUnavailable) are configuration or
network problems the user cannot fix by changing their input.
"""


class RoutePlanningError(Exception):
    """Base class for all classified planning failures."""

    kind = 'RoutePlanningError'
    is_operational = False
    default_message = 'Route planning failed'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'kind': self.kind, 'message': self.message}


class NotFound(RoutePlanningError):
    """Address search returned zero results."""

    kind = 'NotFound'
    default_message = 'Destination not found'


class RouteUnavailable(RoutePlanningError):
    """The routing engine returned no candidate route."""

    kind = 'RouteUnavailable'
    default_message = 'No safe route avoiding current fire zones - consider shelter'


class AuthenticationFailure(RoutePlanningError):
    """Credential for an external capability is missing or rejected."""

    kind = 'AuthenticationFailure'
    is_operational = True
    default_message = 'Could not authenticate with the routing service'


class ServiceUnavailable(RoutePlanningError):
    """Transient network or HTTP failure of an external capability."""

    kind = 'ServiceUnavailable'
    is_operational = True
    default_message = 'Service temporarily unavailable'
