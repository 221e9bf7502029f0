from decouple import config, Csv

class Settings:
    # Database Configuration
    DATABASE_URL: str = config("DATABASE_URL", default="sqlite:///./pickup_queue.db")
    DATABASE_ECHO: bool = config("DATABASE_ECHO", default=False, cast=bool)
    LOG_SQL_QUERIES: bool = config("LOG_SQL_QUERIES", default=False, cast=bool)

    # Expiry Configuration
    EXPIRY_THRESHOLD_HOURS: int = config("EXPIRY_THRESHOLD_HOURS", default=24, cast=int)
    SWEEP_INTERVAL_SECONDS: int = config("SWEEP_INTERVAL_SECONDS", default=3600, cast=int)

    # Server Configuration
    HOST: str = config("HOST", default="0.0.0.0")
    PORT: int = config("PORT", default=8080, cast=int)
    CORS_ORIGINS: list = config(
        "CORS_ORIGINS",
        default="http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
        cast=Csv()
    )

    # Environment
    ENVIRONMENT: str = config("ENVIRONMENT", default="development")
    DEBUG: bool = config("DEBUG", default=True, cast=bool)

    # Logging
    LOG_LEVEL: str = config("LOG_LEVEL", default="INFO")

settings = Settings()
