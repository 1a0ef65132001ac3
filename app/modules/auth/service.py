import re
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt
from supabase import Client

from app.config.settings import Settings
from app.config.permissions_config import ADMIN_ROLE, MEMBER_ROLE
from app.core.errors import (
    DuplicateEmail, InvalidCredentials, InvalidInvite, NotFound,
    ServerError, Unauthorized, ValidationError, WeakPassword,
)
from app.modules.auth.schemas import AuthResponse, LoginRequest, ProfileUpdateRequest, RegisterRequest
from app.modules.users.schemas import UserResponse
from app.modules.users.service import UserService, normalize_email

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class AuthConfig:
    jwt_secret: str = ""
    admin_invite_token: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    bcrypt_rounds: int = 10

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthConfig":
        return cls(
            jwt_secret=settings.jwt_secret,
            admin_invite_token=settings.admin_invite_token,
            jwt_algorithm=settings.jwt_algorithm,
            jwt_expires_days=settings.jwt_expires_days,
            bcrypt_rounds=settings.bcrypt_rounds,
        )


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class AuthService:
    def __init__(self, supabase: Client, config: AuthConfig):
        self.users = UserService(supabase)
        self.config = config

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.config.bcrypt_rounds)
        return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")

    def check_password(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed stored hash
            return False

    def create_token(self, user_id: str) -> str:
        """Sign a session token for user_id"""
        if not self.config.jwt_secret:
            logger.error("JWT_SECRET not set; cannot issue session tokens")
            raise ServerError("Server misconfigured: JWT_SECRET not set", code="NO_JWT_SECRET")
        now = datetime.now(timezone.utc)
        payload = {
            "id": user_id,
            "iat": now,
            "exp": now + timedelta(days=self.config.jwt_expires_days),
        }
        return jwt.encode(payload, self.config.jwt_secret, algorithm=self.config.jwt_algorithm)

    def verify_token(self, token: str) -> str:
        """Return the user id carried by a valid token"""
        if not self.config.jwt_secret:
            logger.error("JWT_SECRET not set; rejecting bearer token")
            raise Unauthorized("Not authorized, server token secret not configured")
        if not token:
            raise Unauthorized("Not authorized, no token")
        try:
            payload = jwt.decode(token, self.config.jwt_secret, algorithms=[self.config.jwt_algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Not authorized, token expired")
        except jwt.InvalidTokenError:
            raise Unauthorized()
        user_id = payload.get("id")
        if not user_id:
            raise Unauthorized()
        return str(user_id)

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to the acting user (id, name, email, role, profile_image_url)"""
        user_id = self.verify_token(token)
        user = self.users.get_user_row(user_id)
        if not user:
            raise Unauthorized("Not authorized, user not found")
        return {
            "id": user["id"],
            "name": user.get("name"),
            "email": user.get("email"),
            "role": user.get("role") or MEMBER_ROLE,
            "profile_image_url": user.get("profile_image_url"),
        }

    def _auth_response(self, user: Dict[str, Any]) -> AuthResponse:
        return AuthResponse(
            id=user["id"],
            name=user["name"],
            email=user["email"],
            role=user["role"],
            profile_image_url=user.get("profile_image_url") or "",
            token=self.create_token(user["id"]),
        )

    def _validate_email(self, email: str) -> None:
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Email format is invalid", code="BAD_EMAIL")

    def register(self, register_data: RegisterRequest) -> AuthResponse:
        """Register a new user; a matching invite token grants the admin role"""
        name = (register_data.name or "").strip()
        email = normalize_email(register_data.email)
        password = register_data.password or ""

        if not name or not email or not password:
            raise ValidationError("Name, email and password are required", code="MISSING_FIELDS")
        self._validate_email(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise WeakPassword()

        invite = register_data.admin_invite_token
        if invite:
            if not self.config.admin_invite_token or invite != self.config.admin_invite_token:
                logger.warning("Registration for %s rejected: invalid admin invite token", email)
                raise InvalidInvite()
            role = ADMIN_ROLE
        else:
            role = MEMBER_ROLE

        if self.users.email_exists(email):
            raise DuplicateEmail()

        user = self.users.create_user({
            "name": name,
            "email": email,
            "password_hash": self.hash_password(password),
            "profile_image_url": register_data.profile_image_url or "",
            "role": role,
        })
        return self._auth_response(user)

    def login(self, login_data: LoginRequest) -> AuthResponse:
        """Authenticate with email and password"""
        email = normalize_email(login_data.email)
        password = login_data.password or ""
        if not email or not password:
            raise ValidationError("Email and password are required", code="MISSING_FIELDS")

        user = self.users.get_user_by_email(email)
        if not user or not self.check_password(password, user.get("password_hash") or ""):
            logger.info("Failed login attempt for %s", email)
            raise InvalidCredentials()

        user = dict(user)
        user.pop("password_hash", None)
        return self._auth_response(user)

    def get_profile(self, user_id: str) -> UserResponse:
        return self.users.get_user_by_id(user_id)

    def update_profile(self, user_id: str, profile_data: ProfileUpdateRequest) -> AuthResponse:
        """Partial update of name, email, password and profile image"""
        current = self.users.get_user_row(user_id)
        if not current:
            raise NotFound("User not found")

        changes: Dict[str, Any] = {}
        if profile_data.name is not None and profile_data.name.strip():
            changes["name"] = profile_data.name.strip()
        if profile_data.email:
            email = normalize_email(profile_data.email)
            self._validate_email(email)
            if self.users.email_exists(email, exclude_user_id=user_id):
                raise DuplicateEmail()
            changes["email"] = email
        if profile_data.profile_image_url is not None:
            changes["profile_image_url"] = profile_data.profile_image_url
        if profile_data.password:
            if len(profile_data.password) < MIN_PASSWORD_LENGTH:
                raise WeakPassword()
            changes["password_hash"] = self.hash_password(profile_data.password)

        user = self.users.update_user(user_id, changes) if changes else current
        return self._auth_response(user)
