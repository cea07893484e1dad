"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any
import tomllib
from urllib.parse import urlsplit, urlunsplit

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .constants import (
    BSC_MAINNET,
    BSC_TESTNET,
    DEFAULT_CACHE_CHECK_PERIOD,
    DEFAULT_CACHE_TTL,
    DEFAULT_REFERENCE_TOKEN,
    MULTICALL_BATCH_SIZE,
    NetworkDefaults,
)

load_dotenv()


class Network(str, Enum):
    BSC = "bsc"
    BSC_TESTNET = "bsc-testnet"


NETWORK_DEFAULTS: dict[Network, NetworkDefaults] = {
    Network.BSC: BSC_MAINNET,
    Network.BSC_TESTNET: BSC_TESTNET,
}


class MetricsSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with UP_METRICS_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- network ---
    network: Network = Network.BSC
    rpc_url: str | None = None

    # --- protocol data ---
    data_dir: Path = Path("json")
    config_suffix: str = ""
    reference_token: str = DEFAULT_REFERENCE_TOKEN

    # --- RPC settings ---
    multicall_batch_size: int = Field(
        default=MULTICALL_BATCH_SIZE,
        ge=1,
        le=MULTICALL_BATCH_SIZE,
        description="Maximum number of calls sent in one multicall request.",
    )
    preflight_retries: int = 2
    preflight_interval: float = 3.0

    # --- result cache ---
    cache_ttl: float = DEFAULT_CACHE_TTL
    cache_check_period: float = DEFAULT_CACHE_CHECK_PERIOD

    # --- logging ---
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="UP_METRICS_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("cache_ttl", "cache_check_period")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("cache durations must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get("UP_METRICS_CONFIG")
        cfg_path = Path(env_cfg) if env_cfg else None

        class TomlConfigSource(PydanticBaseSettingsSource):
            def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
                super().__init__(settings_cls)
                self._path = path

            def get_field_value(
                self, field: Any, field_name: str
            ) -> tuple[Any, str, bool]:
                return None, "", False

            def __call__(self) -> dict[str, Any]:
                if not self._path:
                    local_config = Path("up-metrics.toml")
                    user_config = Path.home() / ".config" / "up-metrics" / "config.toml"
                    if local_config.exists():
                        self._path = local_config
                    elif user_config.exists():
                        self._path = user_config
                    else:
                        return {}

                if not self._path.exists():
                    return {}

                with self._path.open("rb") as f:
                    data = tomllib.load(f)  # supports top-level or [up_metrics]
                body = data.get("up_metrics", data)
                if not isinstance(body, dict):
                    return {}
                return body

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,
        )

    @property
    def chain_id(self) -> int:
        return NETWORK_DEFAULTS[self.network]["chain_id"]

    @property
    def rpc_url_resolved(self) -> str:
        """Configured RPC URL, or the public endpoint of the network."""
        if self.rpc_url:
            return self.rpc_url
        return NETWORK_DEFAULTS[self.network]["rpc_url"]

    @property
    def network_data_dir(self) -> Path:
        """Directory holding tokenlist.json and config.json for this network."""
        return self.data_dir / f"{self.chain_id}{self.config_suffix}"

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with RPC credentials redacted."""
        data = self.model_dump(mode="json")
        data["rpc_url"] = _redact_url(self.rpc_url_resolved)
        data["chain_id"] = self.chain_id
        return data


def _redact_url(url: str) -> str:
    """Hide userinfo and path tokens (API keys) of an RPC URL."""
    parts = urlsplit(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    path = parts.path if parts.path in ("", "/") else "/***redacted***"
    return urlunsplit((parts.scheme, netloc, path, "", ""))
