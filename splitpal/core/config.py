from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./splitpal.db"
    LOG_LEVEL: str = "INFO"
    DB_CONNECT_RETRIES: int = 5

    DEFAULT_CURRENCY: str = "INR"
    EXCHANGE_RATE_URL: str = "https://api.exchangerate-api.com/v4/latest/"
    CURRENCY_CACHE_TTL: int = 60 * 60  # Time to live : 1 hour
    HTTP_TIMEOUT: float = 5.0

    class Config:
        env_file = ".env"

settings = Settings()
