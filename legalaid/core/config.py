"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # Database (storage collaborator for scoped queries and lifecycle writes)
    DATABASE_URL: str = "sqlite+pysqlite:///:memory:"

    # Audit sink
    AUDIT_LOG_DENIALS: bool = True  # Notify the sink of every denied access
    AUDIT_SINK_LOGGER: str = "legalaid.audit"

    @property
    def is_dev(self) -> bool:
        return self.ENV == "dev"


settings = Settings()
