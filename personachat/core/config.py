from dotenv import load_dotenv
from pydantic_settings import BaseSettings
from typing import List, Optional

load_dotenv()

class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "DEBUG"
    LOG_FILE: str = "app.log"

    DATABASE_URL: str = "sqlite:///./personachat.db"
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # Auth settings
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 7 days
    VERIFICATION_TOKEN_EXPIRE_HOURS: int = 24

    # Completion provider
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_BASE_URL: Optional[str] = None
    DEFAULT_MODEL: str = "gpt-3.5-turbo"
    COMPLETION_TIMEOUT_SECONDS: float = 60.0
    COMPLETION_MAX_RETRIES: int = 0  # one generation per user action

    # Character auto-created at signup
    DEFAULT_CHARACTER_NAME: str = "Nelliel"
    DEFAULT_CHARACTER_PROMPT: str = (
        "You are Nelliel, a helpful and friendly AI companion. You are knowledgeable, "
        "empathetic, and always eager to assist users with their questions and tasks."
    )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"

settings = Settings()
