from dotenv import load_dotenv
from pydantic import BaseModel
from typing import List
import os

# Load .env automatically
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./expenses.db")
    sql_echo: bool = _env_flag("SQL_ECHO")
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    enable_legacy_routes: bool = _env_flag("ENABLE_LEGACY_ROUTES")
    cors_origins: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "5000"))


# Global settings instance
settings = Settings()
