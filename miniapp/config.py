from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from miniapp.errors import ConfigurationError

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Supabase exposes its Postgres instance through a regular connection string.
    database_url: Optional[str] = None
    log_level: str = "INFO"
    log_dir: str = "logs"
    cors_origins: str = "*"
    lesson_completion_xp: int = 50
    default_xp_reward: int = 10

    def require_database_url(self) -> str:
        if not self.database_url:
            raise ConfigurationError("DATABASE_URL is not set; point it at the Supabase Postgres instance")
        return self.database_url

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()


SessionLocal = sessionmaker(autocommit=False, autoflush=False)
Base = declarative_base()
_engine: Optional[Engine] = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = get_settings().require_database_url()
        if url.startswith("sqlite"):
            _engine = create_engine(url, connect_args={"check_same_thread": False})
        else:
            _engine = create_engine(url, pool_pre_ping=True)
        SessionLocal.configure(bind=_engine)
    return _engine


def reset_db():
    Base.metadata.drop_all(bind=get_engine())
    create_db()


def create_db():
    # Entities must be registered on Base before create_all.
    import miniapp.models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())


def get_db():
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
