import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel


class Settings(BaseModel):
    """
    Runtime configuration, read from environment variables.
    """
    storage_backend: Literal["memory", "json", "mongo"] = "json"
    storage_path: str = "conectajob_data.json"
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "conectajob"
    state_collection: str = "conectajob_state"

    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    admin_email: str = "admin@conectajob.com"
    admin_password: str = "admin123"

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        values = {
            "storage_backend": os.getenv("CONECTAJOB_STORAGE"),
            "storage_path": os.getenv("CONECTAJOB_STORAGE_PATH"),
            "database_url": os.getenv("DATABASE_URL"),
            "database_name": os.getenv("DATABASE_NAME"),
            "state_collection": os.getenv("CONECTAJOB_STATE_COLLECTION"),
            "jwt_secret": os.getenv("JWT_SECRET"),
            "jwt_algorithm": os.getenv("JWT_ALGORITHM"),
            "access_token_expire_minutes": os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES"),
            "admin_email": os.getenv("CONECTAJOB_ADMIN_EMAIL"),
            "admin_password": os.getenv("CONECTAJOB_ADMIN_PASSWORD"),
            "log_level": os.getenv("LOG_LEVEL"),
        }
        # Unset variables fall back to the model defaults
        return cls(**{key: value for key, value in values.items() if value is not None})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
