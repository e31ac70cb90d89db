import os
from dotenv import load_dotenv
from urllib.parse import quote_plus

load_dotenv()

class Settings:
    # Environment setting
    ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

    # Which remote data service binding to use: "rest" or "database"
    GATEWAY_BACKEND = os.getenv("GATEWAY_BACKEND", "rest")

    # REST backend
    API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:7080")
    API_VERSION = os.getenv("API_VERSION", "/api/v1")
    REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))

    # db creds (hosted backend binding)
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_NAME = os.getenv("DB_NAME", "postgres")
    DB_PORT = os.getenv("DB_PORT", "5432")

    # Auth token persistence; in-memory when unset
    TOKEN_FILE = os.getenv("TOKEN_FILE")
    TOKEN_TTL_HOURS = int(os.getenv("TOKEN_TTL_HOURS", "168"))

    # Advisory client-side throttle between lap records, 0 disables it
    LAP_COOLDOWN_SECONDS = int(os.getenv("LAP_COOLDOWN_SECONDS", "60"))

    LOG_DIR = os.getenv("LOG_DIR", "logs")

    def _build_database_url(self):
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit
        base_url = f"postgresql+asyncpg://{self.DB_USER}:{quote_plus(self.DB_PASSWORD)}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        if self.ENVIRONMENT == "development":
            return base_url
        else:
            return f"{base_url}?ssl=require"

    @property
    def DATABASE_URL(self):
        return self._build_database_url()

    @property
    def IS_DEVELOPMENT(self) -> bool:
        return self.ENVIRONMENT == "development"

settings = Settings()
