from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # monday.com
    MONDAY_API_URL: str = "https://api.monday.com/v2"
    MONDAY_API_TOKEN: str = ""
    MONDAY_API_VERSION: str = "2024-10"
    MONDAY_REQUEST_TIMEOUT: float = 30.0

    # Live updates
    STREAM_HEARTBEAT_SECONDS: float = 20.0
    BOARD_CACHE_TTL_SECONDS: float = 30.0
    BOARD_CACHE_MAX_ENTRIES: int = 64
    STREAM_DELIVERY_TIMEOUT_SECONDS: float = 5.0

    # App
    ALLOWED_ORIGINS: str = "*"
    APP_ENV: str = "development"
    APP_URL: str = "http://localhost:8000"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
