#config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import List
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")
    # Application Settings
    APP_NAME: str = "GemRag"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    DOCS_ENABLED: bool = True

    # Server Settings
    HOST: str = "0.0.0.0"
    PORT: int = int(os.environ.get("PORT", 8000))

    # CORS Settings (accept comma-separated strings to avoid JSON parsing in env)
    ALLOWED_ORIGINS: str = os.environ.get("ALLOWED_ORIGINS", "*")

    # Image Settings
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10MB
    IMAGE_MIME_FILTER: str = "image/*"
    PREVIEW_SIZE: tuple = (512, 512)
    # Middleware settings
    GZIP_MIN_SIZE: int = 500  # bytes

    # AI Settings
    GEMINI_API_KEY: str = os.environ.get("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_FALLBACK_MODELS: List[str] = ["gemini-2.0-flash", "gemini-flash-latest"]
    GENERATION_TIMEOUT_SECONDS: float = 60.0

    # Screen Settings
    RESULTS_PLACEHOLDER: str = "Results will appear here"
    MAX_ACTIVE_SCREENS: int = 100

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def _split_csv(self, value: str) -> List[str]:
        if value is None:
            return []
        value = value.strip()
        if value == "":
            return []
        return [item.strip() for item in value.split(",")]

    @property
    def allowed_origins_list(self) -> List[str]:
        return self._split_csv(self.ALLOWED_ORIGINS)

    @property
    def gemini_models(self) -> List[str]:
        # Primary model first, duplicates removed while preserving order
        return list(dict.fromkeys([self.GEMINI_MODEL] + self.GEMINI_FALLBACK_MODELS))


@lru_cache()
def get_settings() -> Settings:
    s = Settings()
    cors_env = os.environ.get("CORS_ORIGINS")
    if cors_env:
        s.ALLOWED_ORIGINS = cors_env
    return s

settings: Settings = get_settings()
