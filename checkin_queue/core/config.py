from datetime import time
from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    # Application Settings
    app_name: str = Field(default="Vehicle Check-in Queue API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    ENVIRONMENT: str = Field(default="development", alias="ENVIRONMENT")

    # Server Configuration
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    # Storage Configuration
    data_dir: str = Field(default="./data", alias="DATA_DIR")

    # Queue Configuration
    timezone: Optional[str] = Field(default=None, alias="TIMEZONE")  # IANA name, e.g. Asia/Shanghai
    display_limit: int = Field(default=4, ge=1, alias="DISPLAY_LIMIT")
    active_start: time = Field(default=time(8, 30), alias="ACTIVE_START")
    active_end: time = Field(default=time(18, 0), alias="ACTIVE_END")

    # Scheduler Configuration
    scheduler_enabled: bool = Field(default=True, alias="SCHEDULER_ENABLED")
    scheduler_interval_seconds: float = Field(default=60, gt=0, alias="SCHEDULER_INTERVAL_SECONDS")

    # CORS Configuration
    API_CORS_ORIGINS: Optional[str] = Field(default=None, alias="API_CORS_ORIGINS")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s", alias="LOG_FORMAT")

    @field_validator('LOG_LEVEL', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator('active_end')
    @classmethod
    def check_active_window(cls, v, info):
        start = info.data.get('active_start')
        if start is not None and v <= start:
            raise ValueError("ACTIVE_END must be later than ACTIVE_START")
        return v

    @property
    def cors_origins(self) -> List[str]:
        if not self.API_CORS_ORIGINS:
            return [
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            ]
        if self.API_CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.API_CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        populate_by_name = True


# Global settings instance
settings = Settings()
