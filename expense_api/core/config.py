import os
from dotenv import load_dotenv

# 1. This line finds the local .env file and loads it into memory
load_dotenv()


def _as_bool(value: str) -> bool:
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "Expense Tracker API"
    PROJECT_VERSION: str = "1.0.0"

    def __init__(self, **overrides):
        # 2. Database Config (Loaded from .env with defaults)
        self.POSTGRES_USER: str = os.getenv("POSTGRES_USER", "expense_user")
        self.POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "expense_password")
        self.POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "db")
        self.POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
        self.POSTGRES_DB: str = os.getenv("POSTGRES_DB", "expense_db")
        self.DATABASE_URL_OVERRIDE: str = os.getenv("DATABASE_URL", "")

        # Connection pool: fixed size, callers wait instead of being rejected
        self.DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
        self.DB_POOL_TIMEOUT: float = float(os.getenv("DB_POOL_TIMEOUT", "30"))

        # 3. Mail Config
        self.EMAIL_HOST: str = os.getenv("EMAIL_HOST", "smtp.gmail.com")
        self.EMAIL_PORT: int = int(os.getenv("EMAIL_PORT", "587"))
        self.EMAIL_USER: str = os.getenv("EMAIL_USER", "")
        self.EMAIL_PASSWORD: str = os.getenv("EMAIL_PASSWORD", "")
        self.EMAIL_USE_TLS: bool = _as_bool(os.getenv("EMAIL_USE_TLS", "true"))

        # 4. HTTP Config
        self.FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")
        self.PORT: int = int(os.getenv("PORT", "5111"))
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

        # Echoing driver messages to clients leaks schema details, keep it off outside dev
        self.EXPOSE_ERROR_DETAILS: bool = _as_bool(os.getenv("EXPOSE_ERROR_DETAILS", "false"))

        for key, value in overrides.items():
            setattr(self, key, value)

    # 5. Construct the Database URL dynamically
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def MAIL_ENABLED(self) -> bool:
        return bool(self.EMAIL_USER and self.EMAIL_PASSWORD)


settings = Settings()
