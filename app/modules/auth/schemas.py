from pydantic import Field
from typing import Optional

from app.core.schemas import CamelModel


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""


class RegisterRequest(CamelModel):
    name: str = ""
    email: str = ""
    password: str = ""
    profile_image_url: Optional[str] = None
    admin_invite_token: Optional[str] = None


class ProfileUpdateRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    profile_image_url: Optional[str] = None


class AuthResponse(CamelModel):
    id: str = Field(alias="_id")
    name: str
    email: str
    role: str
    profile_image_url: Optional[str] = None
    token: str


class ImageUploadResponse(CamelModel):
    image_url: str
