"""Runtime settings for hostmon, read from HOSTMON_* environment variables."""

from functools import lru_cache, partial
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostmon.exceptions import ConfigError
from hostmon.monitor import DEFAULT_POLL_RATE
from hostmon.probes import DEFAULT_MEMORY_PROBE_COMMAND, probe_memory_type
from hostmon.sampler import MAX_PROCESSES, Sampler


class Settings(BaseSettings):
    # Sampling
    poll_interval: float = DEFAULT_POLL_RATE
    max_processes: int = MAX_PROCESSES
    root_path: str = "/"
    memory_probe_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MEMORY_PROBE_COMMAND)
    )
    memory_probe_timeout: float = 5.0

    # HTTP transport
    host: str = "0.0.0.0"
    port: int = 8993

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_file: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="HOSTMON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("poll_interval", "memory_probe_timeout")
    @classmethod
    def _positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("max_processes")
    @classmethod
    def _process_cap(cls, v: int) -> int:
        if not 1 <= v <= MAX_PROCESSES:
            raise ValueError(f"max_processes must be between 1 and {MAX_PROCESSES}")
        return v

    @field_validator("memory_probe_command")
    @classmethod
    def _command_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("memory_probe_command must name an executable")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    def build_sampler(self) -> Sampler:
        """Sampler configured from these settings."""
        return Sampler(
            memory_type_probe=partial(
                probe_memory_type,
                command=tuple(self.memory_probe_command),
                timeout=self.memory_probe_timeout,
            ),
            root_path=self.root_path,
            max_processes=self.max_processes,
        )


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
