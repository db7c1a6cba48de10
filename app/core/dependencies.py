"""
FastAPI dependencies for route protection.
"""
import uuid
from fastapi import Request, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.exceptions import NotAuthenticated, SessionExpired
from typing import Dict, Any, Optional

# Security scheme for OpenAPI docs (shows lock icon and Authorization header)
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="Session token from the login endpoint",
    auto_error=False,
)


async def validate_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Dict[str, Any]:
    """
    Validates session loaded by middleware.

    Returns:
        Session dict with user_id, email, name

    Raises:
        NotAuthenticated: No token provided
        SessionExpired: Token not found in the session store
    """
    if not request.state.token:
        raise NotAuthenticated()

    if not request.state.session:
        raise SessionExpired()

    return request.state.session


def get_current_token(request: Request) -> str:
    """Get current token from request state."""
    if not request.state.token:
        raise NotAuthenticated()
    return request.state.token


def current_user_id(current_user: Dict[str, Any] = Depends(validate_session)) -> uuid.UUID:
    return uuid.UUID(current_user["user_id"])


def get_gateway(request: Request):
    """Connection gateway created at startup (owns the room subscriber registry)."""
    return request.app.state.gateway
