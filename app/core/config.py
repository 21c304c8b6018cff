from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "forum-topics"

    DATABASE_URL: str
    REDIS_URL: str
    SQL_ECHO: bool = False

    TOPICS_PAGE_SIZE: int = 50
    TOPIC_TITLE_MIN_LENGTH: int = 3

    # Empty salt keeps ids compatible with the ones already issued.
    SHORT_ID_SALT: str = ""
    SHORT_ID_MIN_LENGTH: int = 5
    SHORT_ID_MAX_ATTEMPTS: int = 3
    SHORT_ID_LOOKUP_MIN_LENGTH: int = 5

    CELERY_TASK_ALWAYS_EAGER: bool = False
    CELERY_TIMEZONE: str = "UTC"

settings = Settings()
