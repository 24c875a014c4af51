"""
Auth service module
Handles registration, login and profile lookup
"""
import logging
from typing import Any, Mapping, Union

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.config import Settings
from ..core.exceptions import AuthError, NotFoundError, ValidationError
from ..core.security import create_access_token, get_password_hash, verify_password
from ..models.user import User
from ..schemas.user import AuthData, Identity, UserCreate, UserLogin, UserRead
from ._validation import coerce_payload

logger = logging.getLogger(__name__)

# Same message for unknown email and wrong password so accounts can't be enumerated
INVALID_CREDENTIALS = "Invalid credentials"


def _issue(user: User, settings: Settings) -> AuthData:
    token = create_access_token(user.id, settings)
    return AuthData(user=UserRead.model_validate(user), token=token)


class AuthService:
    """Service class for account operations"""

    @staticmethod
    def register(
        db: Session,
        payload: Union[UserCreate, Mapping[str, Any]],
        settings: Settings,
    ) -> AuthData:
        """
        Create an account and sign a token for it.

        Raises:
            ValidationError: If a field is missing or malformed, or the username
                or email is already taken.
        """
        user_create = coerce_payload(UserCreate, payload)

        existing = db.exec(
            select(User).where(
                or_(User.email == user_create.email, User.username == user_create.username)
            )
        ).first()
        if existing:
            if existing.email == user_create.email:
                raise ValidationError("Email already registered")
            raise ValidationError("Username already taken")

        db_user = User(
            username=user_create.username,
            email=user_create.email,
            password_hash=get_password_hash(user_create.password),
        )
        db.add(db_user)
        try:
            db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same name
            db.rollback()
            raise ValidationError("User already exists", detail=str(e.orig))
        db.refresh(db_user)

        logger.info("Registered user %s", db_user.id)
        return _issue(db_user, settings)

    @staticmethod
    def login(
        db: Session,
        payload: Union[UserLogin, Mapping[str, Any]],
        settings: Settings,
    ) -> AuthData:
        credentials = coerce_payload(UserLogin, payload)

        user = db.exec(select(User).where(User.email == credentials.email)).first()
        if not user or not verify_password(credentials.password, user.password_hash):
            logger.warning("Failed login attempt for %s", credentials.email)
            raise AuthError(INVALID_CREDENTIALS)

        return _issue(user, settings)

    @staticmethod
    def get_current_user(db: Session, identity: Identity) -> UserRead:
        user = db.get(User, identity.user_id)
        if user is None:
            # Token outlived the account it was issued to
            raise NotFoundError("User not found")
        return UserRead.model_validate(user)
