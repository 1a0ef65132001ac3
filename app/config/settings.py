from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Bypasses RLS; preferred for server-side writes

    # Auth
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    admin_invite_token: str = ""
    bcrypt_rounds: int = 10

    # Uploads
    uploads_dir: str = "uploads"
    max_image_size_mb: int = 5

    # App
    app_name: str = "task-manager-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    port: int = 5000
    client_url: str = ""
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        origins = [o.strip() for o in self.client_url.split(",") if o.strip()]
        return origins or ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
