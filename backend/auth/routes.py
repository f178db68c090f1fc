"""
Authentication API endpoints.

This module provides REST API endpoints for:
- User registration
- Login
- Fetching the current user
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import schemas
from database import get_db
from errors import AuthenticationError, ValidationError
from models import User
from validations import validate_email, validate_password, validate_required
from auth.security import hash_password, verify_password, create_user_token
from auth.dependencies import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid email or password"


def _auth_response(user: User) -> schemas.AuthResponse:
    return schemas.AuthResponse(
        data=schemas.UserWithToken(
            id=user.id,
            name=user.name,
            email=user.email,
            token=create_user_token(user.id),
        )
    )


@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: schemas.RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user account.

    Args:
        request: Registration data (name, email, password)
        db: Database session

    Returns:
        Created user with an access token

    Raises:
        ValidationError: 400 if a field is missing or malformed, or the email
            is already registered
    """
    body = request.model_dump()
    errors = validate_required(["name", "email", "password"], body)
    if errors:
        raise ValidationError(", ".join(errors))

    email = request.email.strip().lower()
    if not validate_email(email):
        raise ValidationError("Please enter a valid email")

    if not validate_password(request.password):
        raise ValidationError("Password must be at least 6 characters")

    logger.info(f"Registration attempt for email: {email}")

    if db.query(User).filter(User.email == email).first():
        logger.info(f"Registration failed: email already exists: {email}")
        raise ValidationError("User already exists with this email")

    new_user = User(
        name=request.name.strip(),
        email=email,
        password_hash=hash_password(request.password),
    )
    db.add(new_user)

    # Unique index on email catches a concurrent registration
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Registration failed: email registered concurrently: {email}")
        raise ValidationError("User already exists with this email")
    db.refresh(new_user)

    logger.critical(f"User registered successfully: {new_user.email} (ID: {new_user.id})")
    return _auth_response(new_user)


@router.post("/login", response_model=schemas.AuthResponse)
def login(request: schemas.LoginRequest, db: Session = Depends(get_db)):
    """
    Login with email and password.

    Raises:
        ValidationError: 400 if a field is missing or the email is malformed
        AuthenticationError: 401 if the credentials do not match a user
    """
    errors = validate_required(["email", "password"], request.model_dump())
    if errors:
        raise ValidationError(", ".join(errors))

    email = request.email.strip().lower()
    if not validate_email(email):
        raise ValidationError("Please enter a valid email")

    logger.info(f"Login attempt for email: {email}")

    user = db.query(User).filter(User.email == email).first()
    if not user:
        logger.info(f"Login failed: user not found: {email}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    if not verify_password(request.password, user.password_hash):
        logger.info(f"Login failed: invalid password: {email}")
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.critical(f"User logged in successfully: {user.email} (ID: {user.id})")
    return _auth_response(user)


@router.get("/me", response_model=schemas.UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information."""
    logger.debug(f"Fetching user info for: {current_user.email}")
    return schemas.UserResponse(data=schemas.UserPublic.model_validate(current_user))
