"""
Session identifier resolution from route parameters.
"""

from enum import Enum

from pydantic import BaseModel

from .errors import INVALID_SESSION_MESSAGE, InvalidSessionError, RouteNotReadyError


class ResolutionStatus(str, Enum):
    PENDING = "pending"
    INVALID = "invalid"
    OK = "ok"


class SessionResolution(BaseModel):
    """Outcome of checking a route's session parameter."""

    status: ResolutionStatus
    session_id: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResolutionStatus.OK


def resolve_session(
    session_param: str | None, route_ready: bool = True
) -> SessionResolution:
    """
    Validate the session parameter of the current route.

    Args:
        session_param: Raw ``sessionID`` path segment, or None when absent
        route_ready: Whether routing information has been fully resolved

    Returns:
        A pending resolution while the route is not ready, an invalid one for
        missing or blank identifiers, otherwise the stripped identifier
    """
    if not route_ready:
        return SessionResolution(status=ResolutionStatus.PENDING)

    session_id = session_param.strip() if isinstance(session_param, str) else ""
    if not session_id:
        return SessionResolution(
            status=ResolutionStatus.INVALID, message=INVALID_SESSION_MESSAGE
        )

    return SessionResolution(status=ResolutionStatus.OK, session_id=session_id)


def require_session(session_param: str | None, route_ready: bool = True) -> str:
    """Like :func:`resolve_session` but raises instead of returning a status."""
    resolution = resolve_session(session_param, route_ready)
    if resolution.status is ResolutionStatus.PENDING:
        raise RouteNotReadyError("Route is not ready")
    if resolution.status is ResolutionStatus.INVALID or not resolution.session_id:
        raise InvalidSessionError()
    return resolution.session_id
