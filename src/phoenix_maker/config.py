"""Static configuration and process settings for the Phoenix maker bot."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Final, Mapping

from .errors import ConfigError

REFRESH_SECONDS: Final[float] = 2.0
MAX_ITERATIONS: Final[int] = 3
EDGE: Final[float] = 0.5  # quote units each side of the reference price
ORDER_LIFETIME_SECONDS: Final[int] = 7
ORDER_SIZE_BASE_UNITS: Final[float] = 1.0

RPC_ENDPOINT: Final[str] = "https://api.mainnet-beta.solana.com"
MARKET_ADDRESS: Final[str] = "4DoNfFBfF7UokCC2FQzriy7yHK6DY6NVdYpuekQ5pRgg"  # SOL/USDC

PHOENIX_PROGRAM_ID: Final[str] = "PhoeNiXZ8ByJGLkxNfZRnkUfjvmuYqLR89jjFHGqdXY"
SEAT_MANAGER_PROGRAM_ID: Final[str] = "PSMxQbAoDWDbvd9ezQJgARyq6R9L5kJAasaLDVcZwf1"

PRICE_SYMBOL: Final[str] = "SOL-USD"
PRICE_BASE_URL: Final[str] = "https://api.coinbase.com"
HTTP_TIMEOUT_SECONDS: Final[float] = 5.0

CONFIRM_POLL_SECONDS: Final[float] = 0.5
TX_LINK_PREFIX: Final[str] = "https://solscan.io/tx/"

PRIVATE_KEY_ENV: Final[str] = "PRIVATE_KEY"
MARKET_ADDRESS_ENV: Final[str] = "MARKET_ADDRESS"
RPC_ENDPOINT_ENV: Final[str] = "RPC_ENDPOINT"
PRICE_SYMBOL_ENV: Final[str] = "PRICE_SYMBOL"
LOG_LEVEL_ENV: Final[str] = "LOG_LEVEL"

SECRET_KEY_LENGTH: Final[int] = 64


@dataclass(frozen=True)
class LoopConfig:
    """Immutable parameters of the quoting loop."""

    edge: float = EDGE
    order_lifetime_seconds: int = ORDER_LIFETIME_SECONDS
    order_size: float = ORDER_SIZE_BASE_UNITS
    max_iterations: int = MAX_ITERATIONS
    refresh_seconds: float = REFRESH_SECONDS
    require_withdrawal_confirmation: bool = False

    def __post_init__(self) -> None:
        if not self.edge >= 0:
            raise ConfigError(f"edge must be >= 0, got {self.edge}")
        if self.order_lifetime_seconds <= 0:
            raise ConfigError(
                f"order lifetime must be positive, got {self.order_lifetime_seconds}"
            )
        if not self.order_size > 0:
            raise ConfigError(f"order size must be positive, got {self.order_size}")
        if self.max_iterations < 0:
            raise ConfigError(f"max iterations must be >= 0, got {self.max_iterations}")
        if not self.refresh_seconds >= 0:
            raise ConfigError(f"refresh delay must be >= 0, got {self.refresh_seconds}")


@dataclass(frozen=True)
class Settings:
    private_key: bytes = field(repr=False)
    market_address: str = MARKET_ADDRESS
    rpc_endpoint: str = RPC_ENDPOINT
    price_base_url: str = PRICE_BASE_URL
    price_symbol: str = PRICE_SYMBOL
    loop: LoopConfig = field(default_factory=LoopConfig)


def parse_private_key(raw: str | None) -> bytes:
    """Decode a JSON array of byte values into secret key bytes."""

    if not raw:
        raise ConfigError(f"{PRIVATE_KEY_ENV} is required (JSON array of {SECRET_KEY_LENGTH} bytes)")
    try:
        values = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{PRIVATE_KEY_ENV} is not valid JSON: {exc}") from exc
    if not isinstance(values, list) or len(values) != SECRET_KEY_LENGTH:
        raise ConfigError(f"{PRIVATE_KEY_ENV} must be a JSON array of {SECRET_KEY_LENGTH} integers")
    if not all(isinstance(v, int) and not isinstance(v, bool) and 0 <= v <= 255 for v in values):
        raise ConfigError(f"{PRIVATE_KEY_ENV} entries must be integers in 0..255")
    return bytes(values)


def _env_value(env: Mapping[str, str], name: str, cast, default):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"invalid value for {name}: {raw!r}") from exc


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)


def parse_log_level(raw: str | None) -> int:
    if not raw:
        return logging.INFO
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ConfigError(f"invalid value for {LOG_LEVEL_ENV}: {raw!r}")
    return level


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build settings from the environment; raises ConfigError on bad input."""

    env = os.environ if env is None else env
    loop = LoopConfig(
        edge=_env_value(env, "EDGE", float, EDGE),
        order_lifetime_seconds=_env_value(
            env, "ORDER_LIFETIME_SECONDS", int, ORDER_LIFETIME_SECONDS
        ),
        order_size=_env_value(env, "ORDER_SIZE", float, ORDER_SIZE_BASE_UNITS),
        max_iterations=_env_value(env, "MAX_ITERATIONS", int, MAX_ITERATIONS),
        refresh_seconds=_env_value(env, "REFRESH_SECONDS", float, REFRESH_SECONDS),
        require_withdrawal_confirmation=_env_value(env, "REQUIRE_WITHDRAWAL", _parse_bool, False),
    )
    return Settings(
        private_key=parse_private_key(env.get(PRIVATE_KEY_ENV)),
        market_address=env.get(MARKET_ADDRESS_ENV) or MARKET_ADDRESS,
        rpc_endpoint=env.get(RPC_ENDPOINT_ENV) or RPC_ENDPOINT,
        price_symbol=env.get(PRICE_SYMBOL_ENV) or PRICE_SYMBOL,
        loop=loop,
    )


__all__ = ["LoopConfig", "Settings", "load_settings", "parse_log_level", "parse_private_key"]
