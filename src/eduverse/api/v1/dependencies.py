"""Shared API dependencies for authentication and common functionality."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from eduverse.core.security import decode_access_token
from eduverse.db.session import get_db
from eduverse.models import User
from eduverse.models.user import ROLE_ADMIN, ROLE_INSTRUCTOR
from eduverse.services.metrics import MetricsSink, get_metrics_sink

# HTTP Bearer scheme; missing credentials are reported as 401 below.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def _user_from_token(token: str, db: Session) -> User:
    try:
        payload = decode_access_token(token)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        ) from err

    subject = payload.get("sub")
    if not subject:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    user = db.get(User, subject)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def get_current_user(credentials: CredentialsDep, db: SessionDep) -> User:
    """Get the current authenticated user from the bearer token.

    Raises:
        HTTPException: 401 when the token is missing, invalid, expired or
            refers to a deleted user.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return _user_from_token(credentials.credentials, db)


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Like :func:`get_current_user`, but anonymous requests yield ``None``.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _user_from_token(credentials.credentials, db)


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def require_roles(*roles: str, detail: str = "Access denied") -> Callable[[User], User]:
    """Build a dependency that admits only callers holding one of ``roles``."""

    def checker(current_user: CurrentUserDep) -> User:
        if current_user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user

    return checker


InstructorDep = Annotated[
    User,
    Depends(require_roles(ROLE_INSTRUCTOR, ROLE_ADMIN, detail="Instructor access required")),
]
AdminDep = Annotated[User, Depends(require_roles(ROLE_ADMIN, detail="Admin access required"))]
MetricsSinkDep = Annotated[MetricsSink, Depends(get_metrics_sink)]
