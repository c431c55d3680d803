from typing import Optional
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
# Try multiple paths to find .env file
import pathlib
project_root = pathlib.Path(__file__).parent.parent.parent.parent
env_paths = [
    project_root / ".env",
    pathlib.Path.cwd() / ".env",
    pathlib.Path(".env")
]

for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path)
        break

DEV_SESSION_SECRET = "dev-only-insecure-secret"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=[str(p) for p in env_paths if p.exists()],
        case_sensitive=False,
        extra="ignore",  # Allow extra environment variables
    )

    database_url: str = Field(default="sqlite+aiosqlite:///./.session-data/sessions.db")
    legacy_session_file: str = Field(default=".session-data/sessions.json")

    # Signs the session reference and account registry cookies
    session_secret: str = Field(default=DEV_SESSION_SECRET)

    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: Optional[str] = Field(default=None)

    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000)

    # Upstream Riot auth calls
    upstream_timeout_seconds: float = Field(default=15.0)
    upstream_max_retries: int = Field(default=1)
    upstream_retry_base_delay: float = Field(default=0.5)

    @model_validator(mode="after")
    def _require_secret_in_production(self) -> "Settings":
        if self.is_production and self.session_secret == DEV_SESSION_SECRET:
            raise ValueError(
                "Missing required environment variable: SESSION_SECRET. "
                "Set it in your environment or .env file before deploying."
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cookie_secure(self) -> bool:
        return self.is_production


settings = Settings()
