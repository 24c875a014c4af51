from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from task_tracker.core.config import Settings
from task_tracker.core.exceptions import AuthError
from task_tracker.core.security import decode_access_token
from task_tracker.db.session import get_session
from task_tracker.schemas.user import Identity


# auto_error is off so a missing header answers 401 "No token provided" rather than 403
security = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity(
    token: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    if token is None or not token.credentials:
        raise AuthError("No token provided")

    return decode_access_token(token.credentials, settings)


__all__ = ["get_identity", "get_session", "get_app_settings", "security"]
