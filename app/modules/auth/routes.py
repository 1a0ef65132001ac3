from pathlib import Path
from fastapi import APIRouter, Depends, File, Request, UploadFile
from app.config import settings
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, AuthResponse, ProfileUpdateRequest,
    ImageUploadResponse
)
from app.modules.auth.service import AuthService
from app.modules.auth.uploads import save_profile_image
from app.modules.users.schemas import UserResponse
from app.core.dependencies import get_auth_service, get_current_user_id
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Handlers that hash passwords are sync so FastAPI runs them in its threadpool


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=AuthResponse)
def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Get the authenticated user's profile"""
    return service.get_profile(current_user["id"])


@router.put("/profile", response_model=AuthResponse)
def update_profile(
    profile_data: ProfileUpdateRequest,
    current_user: Dict = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service)
):
    """Update name, email, password or profile image; returns a fresh token"""
    return service.update_profile(current_user["id"], profile_data)


@router.post("/upload-image", response_model=ImageUploadResponse)
async def upload_image(
    request: Request,
    image: UploadFile = File(...),
):
    """Upload a profile image (jpeg/png); returns its public URL"""
    path = await save_profile_image(
        image,
        Path(settings.uploads_dir),
        settings.max_image_size_mb * 1024 * 1024,
    )
    return ImageUploadResponse(image_url=f"{str(request.base_url).rstrip('/')}{path}")
