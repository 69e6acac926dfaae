from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # JWT
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Banco de dados
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    # Progress resolution (seconds before falling back to "unauthenticated")
    PROGRESS_TIMEOUT_SECONDS: float = 5.0

    # logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    # match notifications: "log", "email" or "sms"
    NOTIFIER: str = "log"
    MAIL_FROM: str | None = None
    MAIL_PASSWORD: str | None = None
    MAIL_HOST: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_TIMEOUT_SECONDS: float = 10.0

    # sms notifications via Twilio
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_PHONE_NUMBER: str | None = None
    SMS_TIMEOUT_SECONDS: float = 10.0

    # album summaries
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TIMEOUT_SECONDS: float = 20.0

    class Config:
        env_file = ".env"


settings = Settings()
