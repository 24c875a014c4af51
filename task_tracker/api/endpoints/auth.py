from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from task_tracker.api.deps import get_identity, get_session, get_app_settings
from task_tracker.core.config import Settings
from task_tracker.schemas.user import (
    AuthResponse,
    Identity,
    LoginResponse,
    UserCreate,
    UserData,
    UserLogin,
    UserResponse,
)
from task_tracker.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_create: UserCreate,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    auth_data = AuthService.register(session, user_create, settings)
    return AuthResponse(message="User registered successfully", data=auth_data)


@router.post("/login", response_model=LoginResponse)
def login(
    user_credentials: UserLogin,
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    auth_data = AuthService.login(session, user_credentials, settings)
    return LoginResponse(data=auth_data)


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
):
    user = AuthService.get_current_user(session, identity)
    return UserResponse(data=UserData(user=user))
