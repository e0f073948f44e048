"""FastAPI dependencies for authentication and authorization.

Usage:
    @router.get("/documents")
    def list_documents(actor: CurrentActor):
        ...

    @router.delete("/admin/documents/{document_id}")
    def admin_delete(actor: Actor = Depends(require_role(UserRole.ADMIN))):
        ...
"""

from dataclasses import dataclass
from typing import Annotated, Callable, Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .jwt import decode_token
from .roles import UserRole, has_permission


# HTTP Bearer token security scheme
security = HTTPBearer()


@dataclass(frozen=True)
class Actor:
    """Caller identity resolved from the bearer token"""
    id: UUID
    role: UserRole
    email: Optional[str] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_actor(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Actor:
    """Validate the bearer token and return the calling actor.

    Raises:
        HTTPException 401: If token is missing, invalid, expired, or lacks claims
    """
    try:
        payload = decode_token(credentials.credentials)

        user_id_str = payload.get("sub")
        if not user_id_str:
            raise _unauthorized("Invalid token: missing user ID claim")

        return Actor(
            id=UUID(user_id_str),
            role=UserRole(payload.get("role", UserRole.USER.value)),
            email=payload.get("email"),
        )

    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")
    except ValueError as e:
        raise _unauthorized(f"Invalid token claims: {str(e)}")


def require_role(required_role: UserRole) -> Callable:
    """Create a dependency that enforces a minimum role.

    Raises:
        HTTPException 403: If the actor's role is insufficient
    """

    def role_dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not has_permission(actor.role, required_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required role: {required_role.value}",
            )
        return actor

    return role_dependency


# Type aliases for dependency injection
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
AdminActor = Annotated[Actor, Depends(require_role(UserRole.ADMIN))]
