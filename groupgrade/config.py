# groupgrade/config.py
from pydantic_settings import BaseSettings
from typing import Optional
from pydantic import Field

class Settings(BaseSettings):
    SECRET_KEY: str = Field("change-me-in-production")
    ALGORITHM: str = Field("HS256")

    DATABASE_URL: str
    SQLALCHEMY_DATABASE_URL: Optional[str] = None
    SQL_ECHO: bool = Field(False)

    LOG_LEVEL: str = Field("INFO")

    # Contribution scoring
    MAX_COMMIT_LINES_CAP: int = Field(1000, gt=0)  # soft cap per commit (bulk imports)
    CODE_ADDITION_WEIGHT: float = Field(1.0, ge=0)
    CODE_DELETION_WEIGHT: float = Field(1.25, ge=0)

    # Pressure scoring
    PRESSURE_RISK_FRACTION: float = Field(0.7, gt=0)
    PRESSURE_OVERLOAD_FRACTION: float = Field(1.0, gt=0)
    DEFAULT_PRESSURE_THRESHOLD: int = Field(15, gt=0)
    PRESSURE_HISTORY_LIMIT: int = Field(30, gt=0)

    model_config = {
        "env_file": ".env",
        "extra": "allow",
    }

    @property
    def effective_database_url(self) -> str:
        """
        Returns the async driver URL:
          - SQLALCHEMY_DATABASE_URL wins when set
          - plain postgresql:// is rewritten to postgresql+asyncpg://
        """
        url = self.SQLALCHEMY_DATABASE_URL or self.DATABASE_URL or "sqlite+aiosqlite:///./test.db"
        if url.startswith("postgresql://") and "+asyncpg" not in url:
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

settings = Settings()
