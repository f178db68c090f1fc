"""
FastAPI dependencies for authentication.

Every protected route depends on get_current_user, which resolves the caller
from the bearer token before the handler runs.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from database import get_db
from errors import AuthenticationError
from models import User
from auth.security import get_token_user_id

logger = logging.getLogger(__name__)

# HTTP Bearer token scheme; missing credentials are reported by get_current_user
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Extract and validate the current user from the JWT bearer token.

    Args:
        credentials: HTTP Bearer credentials (JWT token)
        db: Database session

    Returns:
        User object if authentication succeeds

    Raises:
        AuthenticationError: 401 if the token is missing, invalid, expired,
            or refers to a user that no longer exists

    Example:
        @router.get("/api/protected")
        def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": user.id}
    """
    if not credentials or not credentials.credentials:
        logger.info("No authentication credentials provided")
        raise AuthenticationError("Not authorized, no token")

    user_id = get_token_user_id(credentials.credentials)
    if user_id is None:
        raise AuthenticationError("Not authorized, token failed")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        logger.info(f"User not found for id: {user_id}")
        raise AuthenticationError("Not authorized, user not found")

    logger.debug(f"User authenticated via JWT: {user.id}")
    return user
