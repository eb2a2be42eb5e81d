from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TREEPLATE_", case_sensitive=False)

    workspace_path: Path = Field(default_factory=Path.cwd)
    base_url: str | None = None
    file_mode: int | None = None
    log_format: str = "[%(levelname)s] %(message)s"

    @field_validator("file_mode", mode="before")
    @classmethod
    def _parse_octal_mode(cls, value: Any) -> Any:
        # Modes arrive from the environment as octal text such as "0644"
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            try:
                return int(value, 8)
            except ValueError as e:
                raise ValueError(f"file_mode must be an octal mode, got {value!r}") from e
        return value

    def resolved_base_url(self) -> str:
        """Return the base URL, defaulting to the current directory."""
        if self.base_url:
            return self.base_url
        return Path.cwd().as_uri() + "/"
