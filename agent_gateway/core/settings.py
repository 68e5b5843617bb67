from functools import lru_cache
import os
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseSettings):
    """Runtime configuration loaded from env vars and local env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = Field(default="local", alias="APP_ENV")
    log_level: str | None = Field(default=None, alias="LOG_LEVEL")
    debug: bool = Field(default=False, alias="DEBUG")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, gt=0, alias="PORT")
    project_root: str = Field(default_factory=os.getcwd, alias="PROJECT_ROOT")

    openai_api_key: str = Field(..., min_length=1, alias="OPENAI_API_KEY")
    openai_base_url: str = Field(..., min_length=1, alias="OPENAI_BASE_URL")
    openai_model: str = Field(..., min_length=1, alias="OPENAI_MODEL")

    mcp_config_path_raw: str = Field(default="./mcp.config.yaml", alias="MCP_CONFIG_PATH")
    mcp_enabled_servers_raw: str = Field(default="", alias="MCP_ENABLED_SERVERS")
    mcp_disabled_servers_raw: str = Field(default="", alias="MCP_DISABLED_SERVERS")
    skills_dirs_raw: str = Field(default="", alias="SKILLS_DIRS")
    remote_skills_enabled: bool = Field(default=False, alias="REMOTE_SKILLS_ENABLED")

    api_auth_token: str | None = Field(default=None, alias="API_AUTH_TOKEN")
    heartbeat_interval_seconds: float = Field(default=15.0, gt=0, alias="HEARTBEAT_INTERVAL_SECONDS")

    @field_validator("api_auth_token")
    @classmethod
    def _blank_token_is_unset(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @property
    def enable_swagger(self) -> bool:
        return self.app_env.lower() == "local"

    @property
    def effective_log_level(self) -> str:
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.debug else "INFO"

    @property
    def mcp_config_path(self) -> str:
        return str(Path(self.project_root, self.mcp_config_path_raw).resolve())

    @property
    def mcp_enabled_servers(self) -> list[str]:
        return parse_csv(self.mcp_enabled_servers_raw)

    @property
    def mcp_disabled_servers(self) -> list[str]:
        return parse_csv(self.mcp_disabled_servers_raw)

    @property
    def skills_dirs(self) -> list[str]:
        return parse_csv(self.skills_dirs_raw) or ["./skills"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
