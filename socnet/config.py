"""Engine defaults, overridable through ``SOCNET_*`` environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SOCNET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Relations ---
    default_relation: str = "default"

    # --- Canvas (layout geometry) ---
    canvas_width: float = Field(default=800.0, gt=0)
    canvas_height: float = Field(default=600.0, gt=0)

    # --- Randomness ---
    random_seed: int | None = None

    # --- Notifications ---
    history_enabled: bool = True
    history_limit: int | None = Field(default=10_000, ge=1)  # None keeps every event
    progress_every: int = Field(default=1, ge=1)

    # --- Numerics ---
    pagerank_damping: float = 0.85
    power_iteration_max: int = Field(default=500, ge=1)
    power_iteration_tol: float = Field(default=1e-9, gt=0)
    singular_tol: float = Field(default=1e-12, gt=0)

    # --- Layout ---
    layout_iterations: int = Field(default=100, ge=1)

    @field_validator("pagerank_damping")
    @classmethod
    def _damping_in_unit_interval(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError("pagerank_damping must lie strictly between 0 and 1")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
