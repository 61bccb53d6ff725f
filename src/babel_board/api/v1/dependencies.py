"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from babel_board.core.security import decode_access_token
from babel_board.db.session import get_db
from babel_board.models import User
from babel_board.services.feed_cache import FeedCache, get_feed_cache

# HTTP Bearer scheme for JWT authentication; optional on read endpoints
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def _user_from_credentials(
    credentials: HTTPAuthorizationCredentials | None,
    db: Session,
) -> User | None:
    if credentials is None:
        return None
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the current authenticated user from the JWT bearer token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or names an
            unknown user.
    """
    user = _user_from_credentials(credentials, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Return the authenticated user if a valid token was sent, else None."""
    return _user_from_credentials(credentials, db)


def get_feed_cache_dep() -> FeedCache:
    """Return the shared ranked-feed cache."""
    return get_feed_cache()


# Type aliases for user and cache dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
FeedCacheDep = Annotated[FeedCache, Depends(get_feed_cache_dep)]
