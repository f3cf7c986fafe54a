from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "doccrud"
    APP_DESCRIPTION: str = "Generic document CRUD layer with ambient MongoDB transactions"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (MongoDB/motor) ---
    MONGO_HOST: str = "localhost"
    MONGO_PORT: int = 27017
    MONGO_USER: Optional[str] = None
    MONGO_PASSWORD: Optional[str] = None
    MONGO_DB: str = "app_db"
    # Transactions need a replica set (or sharded cluster)
    MONGO_REPLICA_SET: Optional[str] = "rs0"

    @property
    def MONGO_URL(self) -> str:
        # Build MongoDB connection URL
        credentials = ""
        if self.MONGO_USER:
            safe_password = quote_plus(self.MONGO_PASSWORD or "")
            credentials = f"{quote_plus(self.MONGO_USER)}:{safe_password}@"
        url = f"mongodb://{credentials}{self.MONGO_HOST}:{self.MONGO_PORT}/{self.MONGO_DB}"
        if self.MONGO_REPLICA_SET:
            url += f"?replicaSet={self.MONGO_REPLICA_SET}"
        return url

    # --- CRUD layer ---
    SESSION_CONTEXT_KEY: str = "mongo_session"
    DEFAULT_NOT_FOUND_MESSAGE: str = "Document not found"
    DEFAULT_PAGE_LIMIT: int = 20

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # --- API route prefixes ---
    API_V1_ARTICLES_PREFIX: str = "/api/v1/articles"

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
