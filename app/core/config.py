from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./database.db"
    DB_ECHO: bool = False

    # Security / JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Commission policy
    COMMISSION_RATE: float = 5.0
    COMMISSION_MAX_ORDERS: int = 3

    # Orders
    ORDER_NUMBER_PREFIX: str = "ORD"
    SLOW_ORDER_MS: float = 250.0

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
