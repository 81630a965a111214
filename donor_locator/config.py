from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DB_PATH: Path = Path.home() / "donors.db"
    # Full SQLAlchemy async URL; takes precedence over DB_PATH when set
    DATABASE_URL: str | None = None
    DB_ECHO: bool = False
    # Run `alembic upgrade head` on start-up when alembic.ini is available
    AUTO_MIGRATE: bool = False

    HOST: str = "127.0.0.1"
    PORT: int = 3000
    # Origins allowed to call the API from a browser; "*" allows any
    CORS_ORIGINS: list[str] = ["*"]

    SEARCH_RADIUS_KM: float = 15.0

    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path | None = None

    @property
    def database_url(self) -> str:
        return self.DATABASE_URL or f"sqlite+aiosqlite:///{self.DB_PATH}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
