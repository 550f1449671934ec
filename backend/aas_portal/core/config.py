from typing import List, Optional, Union
from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "ONG A.A.S Portal"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = ["http://localhost:5173", "http://localhost:3000"]

    @field_validator("BACKEND_CORS_ORIGINS", mode='before')
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database
    SQLALCHEMY_DATABASE_URI: str = "sqlite+aiosqlite:///./portal.db"
    SQL_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = True

    # Object storage (one directory per bucket)
    STORAGE_ROOT: str = "./storage"
    PUBLIC_STORAGE_URL: str = "/storage"
    MAX_UPLOAD_SIZE_MB: int = 200

    # Session
    SESSION_COOKIE_NAME: str = "ong_session"
    SESSION_COOKIE_SECURE: bool = False
    LOGIN_MAX_ATTEMPTS: int = 5
    LOGIN_WINDOW_SECONDS: int = 15 * 60

    # Login throttle state
    REDIS_URL: str = "redis://localhost:6379/0"

    # Keep-alive ping against the data store
    KEEP_ALIVE_ENABLED: bool = True
    KEEP_ALIVE_INTERVAL_SECONDS: int = 10 * 60

    # Staff identity service (Netlify Identity / GoTrue)
    IDENTITY_URL: str = "http://localhost:8888/.netlify/identity"

    # Homepage markdown content
    CONTENT_DIR: str = "content/homepage"

    DEFAULT_LOCALE: str = "ar"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

settings = Settings()
