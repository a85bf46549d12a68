from pydantic_settings import BaseSettings
from typing import List, Any, Optional
import json
from pathlib import Path


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


PLACEHOLDER_SECRETS = {"", "CHANGE_ME", "dev-secret-key-change-in-production"}


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Final-Year Project Repository"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_VERSION: str = "v1"
    APP_VERSION: str = "1.0.0"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 5000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_ECHO: bool = False

    # ==========================================
    # Security
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days
    BCRYPT_ROUNDS: int = 10

    # ==========================================
    # CORS
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_MINUTES: int = 15
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Uploads
    # ==========================================
    MAX_FILE_SIZE: int = 52428800  # 50MB
    MAX_REQUEST_SIZE: int = 53477376  # 51MB - file plus multipart form fields
    UPLOAD_DIR_STR: str = "./uploads"
    UPLOAD_CHUNK_SIZE: int = 1024 * 1024

    # ==========================================
    # Listing
    # ==========================================
    PAGE_SIZE: int = 12
    TOP_PROJECTS_LIMIT: int = 5

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    # ==========================================
    # Admin bootstrap (no defaults on purpose)
    # ==========================================
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @property
    def UPLOAD_DIR(self) -> Path:
        return Path(self.UPLOAD_DIR_STR)

    @property
    def RATE_LIMIT(self) -> str:
        """slowapi limit string, e.g. 100/15 minutes"""
        return f"{self.RATE_LIMIT_REQUESTS}/{self.RATE_LIMIT_WINDOW_MINUTES} minutes"

    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    def has_placeholder_secret(self) -> bool:
        return self.JWT_SECRET_KEY in PLACEHOLDER_SECRETS

    def ensure_directories(self) -> None:
        """Create upload and log directories if they don't exist"""
        self.UPLOAD_DIR.mkdir(exist_ok=True, parents=True)
        if self.LOG_FILE:
            Path(self.LOG_FILE).parent.mkdir(exist_ok=True, parents=True)


# Create settings instance
settings = Settings()
