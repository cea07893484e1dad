"""Loader for the per-network token list and protocol configuration.

Both files live in ``<data_dir>/<chain_id><suffix>/``:

- ``tokenlist.json``: ``{"tokens": [{"address", "decimals", "symbol", "name"}, ...]}``
- ``config.json``: multicall address, oracles, price helpers, pools, stakings,
  local farms and the fixed-supply exclusion list.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import PROTOCOL_CONFIG_FILENAME, TOKEN_LIST_FILENAME
from .domain import Pool, Staking, Token
from .errors import ConfigurationError, UnknownTokenError
from .logger import get_logger
from .settings import MetricsSettings

logger = get_logger(__name__)


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class OracleConfig(_ConfigModel):
    token: str
    address: str


class PriceHelperConfig(_ConfigModel):
    address: str
    base_token: str = Field(alias="baseToken")
    quote_token: str = Field(alias="quoteToken")


class PoolConfig(_ConfigModel):
    alias: str
    want_token: str = Field(alias="wantToken")
    base_token: str = Field(alias="baseToken")
    quote_token: str = Field(alias="quoteToken")
    strategy: str

    def to_position(self) -> Pool:
        return Pool(
            alias=self.alias,
            want_address=self.want_token,
            base_symbol=self.base_token,
            quote_symbol=self.quote_token,
            strategy_address=self.strategy,
        )


class StakingConfig(_ConfigModel):
    alias: str
    want_token: str = Field(alias="wantToken")
    base_token: str = Field(alias="baseToken")
    quote_token: str = Field(alias="quoteToken")
    local_farm: str = Field(alias="localFarm")
    local_farm_pid: int = Field(default=0, alias="localFarmPid")

    def to_position(self) -> Staking:
        return Staking(
            alias=self.alias,
            want_address=self.want_token,
            base_symbol=self.base_token,
            quote_symbol=self.quote_token,
            local_farm=self.local_farm,
            local_farm_pid=self.local_farm_pid,
        )


class LocalFarmConfig(_ConfigModel):
    name: str
    address: str


class ProtocolConfig(_ConfigModel):
    """Read-only protocol configuration for one network."""

    multicall_address: str = Field(alias="multiCall")
    oracles: tuple[OracleConfig, ...] = ()
    price_helpers: tuple[PriceHelperConfig, ...] = Field(
        default=(), alias="priceHelper"
    )
    pools: tuple[PoolConfig, ...] = ()
    stakings: tuple[StakingConfig, ...] = ()
    local_farms: tuple[LocalFarmConfig, ...] = Field(default=(), alias="localFarms")
    fix_supply_addresses: tuple[str, ...] = Field(
        default=(), alias="fixSupplyAddresses"
    )

    @field_validator("fix_supply_addresses")
    @classmethod
    def reject_duplicate_addresses(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        lowered = [address.lower() for address in v]
        if len(set(lowered)) != len(lowered):
            raise ValueError("fixSupplyAddresses contains duplicate addresses")
        return v

    @field_validator("oracles")
    @classmethod
    def reject_duplicate_oracles(
        cls, v: tuple[OracleConfig, ...]
    ) -> tuple[OracleConfig, ...]:
        tokens = [oracle.token.lower() for oracle in v]
        if len(set(tokens)) != len(tokens):
            raise ValueError("oracles lists the same token more than once")
        return v

    @field_validator("price_helpers")
    @classmethod
    def reject_duplicate_helpers(
        cls, v: tuple[PriceHelperConfig, ...]
    ) -> tuple[PriceHelperConfig, ...]:
        addresses = [helper.address.lower() for helper in v]
        if len(set(addresses)) != len(addresses):
            raise ValueError("priceHelper lists the same pair address more than once")
        return v

    def local_farm_address(self, name: str) -> str:
        for farm in self.local_farms:
            if farm.name == name:
                return farm.address
        raise ConfigurationError(f"Local farm '{name}' is not configured")


class TokenRegistry:
    """Case-insensitive symbol -> Token lookup."""

    def __init__(self, tokens: Mapping[str, Token]):
        self._tokens = {symbol.lower(): token for symbol, token in tokens.items()}

    @classmethod
    def from_list(cls, raw_tokens: list[dict[str, Any]]) -> TokenRegistry:
        tokens: dict[str, Token] = {}
        for raw in raw_tokens:
            try:
                token = Token(
                    address=str(raw["address"]),
                    decimals=int(raw["decimals"]),
                    symbol=str(raw["symbol"]),
                    name=str(raw.get("name", "")),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid token entry {raw!r}: {e}") from e
            tokens[token.symbol.lower()] = token
        return cls(tokens)

    def get(self, symbol: str) -> Token:
        try:
            return self._tokens[symbol.lower()]
        except KeyError:
            raise UnknownTokenError(symbol) from None

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.lower() in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")
    with path.open() as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e


def load_token_registry(path: Path) -> TokenRegistry:
    data = _read_json(path)
    raw_tokens = data.get("tokens") if isinstance(data, dict) else None
    if not isinstance(raw_tokens, list):
        raise ConfigurationError(f"{path} must contain a 'tokens' list")
    return TokenRegistry.from_list(raw_tokens)


def load_protocol_config(path: Path) -> ProtocolConfig:
    data = _read_json(path)
    try:
        return ProtocolConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid protocol config {path}: {e}") from e


def load_protocol(settings: MetricsSettings) -> tuple[TokenRegistry, ProtocolConfig]:
    """Load the token registry and protocol config for the configured network.

    Raises:
        ConfigurationError: If either file is missing or malformed.
    """
    base = settings.network_data_dir
    tokens = load_token_registry(base / TOKEN_LIST_FILENAME)
    config = load_protocol_config(base / PROTOCOL_CONFIG_FILENAME)
    logger.debug(
        "Loaded %d tokens, %d pools, %d stakings from %s",
        len(tokens),
        len(config.pools),
        len(config.stakings),
        base,
    )
    return tokens, config
