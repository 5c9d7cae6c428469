from fastapi import APIRouter, Depends, status

from app.core.response import APIResponse
from app.domain.entities.user_entity import User
from app.interfaces.dependencies import get_auth_service, get_current_user
from app.schemas.auth import AuthResult, LoginRequest, RegisterRequest, UserRead
from app.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=APIResponse[AuthResult], status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new user and return an access token"""
    result = await auth_service.register(payload)
    return APIResponse.ok(message="User registered successfully", data=result)


@router.post("/login", response_model=APIResponse[AuthResult])
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Login and get access token"""
    result = await auth_service.login(payload)
    return APIResponse.ok(message="Login successful", data=result)


@router.get("/me", response_model=APIResponse[UserRead])
async def get_current_user_info(
    current_user: User = Depends(get_current_user),
):
    """Get current user information"""
    return APIResponse.ok(data=UserRead.model_validate(current_user))
