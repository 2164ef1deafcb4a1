"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="LOGIROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Logiroute Delivery Optimizer API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root logging level applied when the app starts.")
    data_root: Path = Field(default=Path("data"), description="Root directory for persisted run outputs.")
    network_file: Optional[Path] = Field(
        default=None,
        description="JSON road network ({nodes: [...], edges: [...]}). The built-in demo map is used when unset.",
    )
    depot_id: str = Field(default="warehouse-a", description="Central depot for the consolidated strategy.")
    truck_capacity: int = Field(default=10, ge=1, description="Maximum item count carried by one truck.")
    cost_per_km: float = Field(default=1.5, ge=0.0)
    cost_per_truck_fixed: float = Field(default=50.0, ge=0.0)
    strategy_workers: int = Field(
        default=4,
        ge=1,
        description="Worker threads used to compute strategies side by side. 1 runs them sequentially.",
    )
    capacity_seed: int = Field(default=7, description="Seed for demo edge capacities.")
    min_edge_capacity: int = Field(default=5, ge=1)
    max_edge_capacity: int = Field(default=15, ge=1)
    traffic_min_factor: float = Field(default=0.8, gt=0.0)
    traffic_max_factor: float = Field(default=2.0, gt=0.0)
    average_speed_kmh: float = Field(default=50.0, gt=0.0)
    stop_service_minutes: float = Field(default=10.0, ge=0.0)
    advisor_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the text-generation advisor service (e.g., http://localhost:3400).",
    )
    advisor_timeout_seconds: float = Field(default=30.0, gt=0.0)
    advisor_max_retries: int = Field(default=2, ge=0)
    advisor_backoff_seconds: float = Field(default=1.0, ge=0.0)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:9002",
            "http://127.0.0.1:9002",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", "network_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any, info) -> Optional[Path]:
        if value is None or value == "":
            return Path("data").resolve() if info.field_name == "data_root" else None
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("max_edge_capacity")
    @classmethod
    def _check_capacity_range(cls, value: int, info) -> int:
        lower = info.data.get("min_edge_capacity")
        if lower is not None and value < lower:
            raise ValueError("max_edge_capacity must be >= min_edge_capacity")
        return value

    @field_validator("traffic_max_factor")
    @classmethod
    def _check_traffic_range(cls, value: float, info) -> float:
        lower = info.data.get("traffic_min_factor")
        if lower is not None and value < lower:
            raise ValueError("traffic_max_factor must be >= traffic_min_factor")
        return value


settings = Settings()
