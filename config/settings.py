"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    default_cpi: float = 0.0
    max_income: float = 180000.0
    max_debt: float = 174998.0
    schedules_file: str = "schedules.yaml"
    auth_username: str = ""
    auth_password: str = ""
    log_level: str = "INFO"

    @property
    def auth_enabled(self) -> bool:
        """Basic Auth is only enforced when both credentials are set."""
        return bool(self.auth_username and self.auth_password)

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
