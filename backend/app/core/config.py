from pydantic_settings import BaseSettings
from typing import List, Any, Optional
import json


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


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Deckster"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"
    APP_URL: str = "http://localhost:3000"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 0
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # Users with this email are auto-approved and treated as admins
    DEV_BYPASS_EMAIL: str = ""

    # ==========================================
    # Google OAuth
    # ==========================================
    GOOGLE_CLIENT_ID: str = ""

    # ==========================================
    # Builder Services (Layout Service, Elementor, Text Labs)
    # ==========================================
    LAYOUT_SERVICE_URL: str = "https://web-production-f0d13.up.railway.app"
    ELEMENTOR_URL: str = "https://web-production-3b42.up.railway.app"
    # Text Labs is served by the Elementor deployment unless overridden
    TEXTLABS_URL: str = ""
    SERVICE_REQUEST_TIMEOUT: float = 60.0  # seconds
    TEXTLABS_MESSAGE_TIMEOUT: float = 30.0  # seconds
    TEXTLABS_SESSION_TIMEOUT: Optional[float] = 30.0  # seconds, None disables

    @property
    def EFFECTIVE_TEXTLABS_URL(self) -> str:
        return self.TEXTLABS_URL or self.ELEMENTOR_URL

    # ==========================================
    # Stripe Billing
    # ==========================================
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_PRO_MONTHLY_PRICE_ID: str = ""
    STRIPE_PRO_YEARLY_PRICE_ID: str = ""

    # ==========================================
    # Chat Sessions
    # ==========================================
    SESSION_CLEANUP_THRESHOLD_HOURS: int = 24
    CRON_SECRET: str = ""
    MAX_FILE_SIZE: int = 26214400  # 25MB
    MAX_FILES_PER_SESSION: int = 5

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings


# Create settings instance
settings = Settings()
