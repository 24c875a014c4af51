from datetime import datetime, timedelta, timezone
from typing import Optional
import uuid

import jwt
from passlib.context import CryptContext

from .config import Settings
from .exceptions import AuthError
from ..schemas.user import Identity

# Cost factor for password hashes
BCRYPT_ROUNDS = 10

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


# JWT token functions
def create_access_token(
    user_id: uuid.UUID, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {"sub": str(user_id), "iat": now, "exp": now + expires_delta}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Identity:
    """
    Verify a bearer token and return the identity it was issued to.

    Raises:
        AuthError: "Token expired" once ``exp`` has passed, "Invalid token" for
            any other signature, format or claim problem.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.PyJWTError:
        raise AuthError("Invalid token")

    subject = payload.get("sub")
    if subject is None:
        raise AuthError("Invalid token")
    try:
        return Identity(user_id=uuid.UUID(subject))
    except (TypeError, ValueError):
        raise AuthError("Invalid token")
