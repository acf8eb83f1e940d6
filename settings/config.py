import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    """Configuration settings for the application."""
    PROJECT_NAME: str = "JWT Pizza Service"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    DB_NAME: str = os.getenv("DB_NAME", "pizza")

    # JWT
    SECRET_KEY: str = "MySecretKey@123"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24

    # pizza factory
    FACTORY_URL: str = "https://pizza-factory.cs329.click"
    FACTORY_API_KEY: str = ""
    FACTORY_TIMEOUT_SECONDS: float = 30.0

    # telemetry collectors, empty url disables shipping
    LOGGING_URL: str = ""
    LOGGING_USER_ID: str = ""
    LOGGING_API_KEY: str = ""
    LOGGING_SOURCE: str = "jwt-pizza-service"
    METRICS_URL: str = ""
    METRICS_API_KEY: str = ""
    METRICS_SOURCE: str = "jwt-pizza-service"
    METRICS_PERIOD_SECONDS: float = 5.0

    # seeded on startup when missing
    DEFAULT_ADMIN_NAME: str = "常用名字"
    DEFAULT_ADMIN_EMAIL: str = "a@jwt.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin"

    class Config:
        env_file = ".env"

settings = Settings()
