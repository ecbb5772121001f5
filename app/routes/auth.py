"""
Authentication Routes
Registration, login, profile and email verification endpoints
"""

from fastapi import APIRouter, Depends, status
from app.auth import get_current_user
from app.services.auth_service import auth_service
from app.services.club_service import club_service
from app.services.otp_service import otp_service
from app.schemas.auth import (
    SendCodeRequest,
    VerifyCodeRequest,
    RegisterRequest,
    LoginRequest,
    UpdateProfileRequest,
    AuthResponse,
    MeResponse,
    UserResponse,
)

router = APIRouter()


@router.post("/send-otp")
async def send_otp(request: SendCodeRequest):
    """
    Email a 6-digit verification code

    If mail delivery fails the code is returned as **otp_fallback**.
    """
    return await otp_service.send(request.email)


@router.post("/verify-otp")
async def verify_otp(request: VerifyCodeRequest):
    """Check a verification code (single use)"""
    return otp_service.verify(request.email, request.otp)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest):
    """
    Create a student account

    - **email**: must not be registered yet
    - **password**: at least 6 characters
    - **name**: display name

    Returns: token and the new user
    """
    return await auth_service.register(request)


@router.post("/login", response_model=AuthResponse)
async def login(credentials: LoginRequest):
    """Exchange email and password for a token"""
    return await auth_service.login(credentials.email, credentials.password)


@router.get("/me", response_model=MeResponse)
async def me(current_user: dict = Depends(get_current_user)):
    return await auth_service.me(current_user)


@router.put("/profile")
async def update_profile(
    request: UpdateProfileRequest,
    current_user: dict = Depends(get_current_user)
):
    user = await auth_service.update_profile(current_user, request)
    return {"message": "Profile updated.", "user": UserResponse(**user)}


@router.get("/clubs-list")
async def clubs_list():
    """Active clubs for sign-up forms (public)"""
    return await club_service.public_club_list()
