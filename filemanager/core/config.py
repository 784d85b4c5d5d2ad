import os
from pathlib import Path
from dotenv import load_dotenv

# Ensure .env is loaded from project root even if server is started elsewhere
BASE_DIR = Path(__file__).resolve().parents[2]
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH)


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes")


class Settings:
    # Application
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "File Manager API")
    API_PREFIX: str = os.getenv("API_PREFIX", "/api/v1")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper()

    # Security
    # Strip values to avoid accidental whitespace or surrounding quotes from .env
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me-in-production").strip()
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256").strip()
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    JWT_LEEWAY_SECONDS: int = int(os.getenv("JWT_LEEWAY_SECONDS", "0"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))  # 2^10 rounds

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./file_manager.db")
    DB_ECHO: bool = _as_bool(os.getenv("DB_ECHO", "false"))
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))

    # File Upload
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", str(5 * 1024 * 1024)))

    def get_cors_origins_list(self):
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

settings = Settings()
