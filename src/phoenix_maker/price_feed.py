"""Spot reference price from the Coinbase public API."""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import httpx

from . import config
from .errors import PriceFetchError

_LOGGER = logging.getLogger(__name__)


def parse_spot_price(payload: Any) -> float:
    """Extract ``data.amount`` as a finite, positive float."""

    try:
        amount = payload["data"]["amount"]
    except (KeyError, TypeError) as exc:
        raise PriceFetchError(f"spot price missing from response: {payload!r}") from exc
    if isinstance(amount, bool):
        raise PriceFetchError(f"unparseable spot price {amount!r}")
    try:
        price = float(amount)
    except (TypeError, ValueError) as exc:
        raise PriceFetchError(f"unparseable spot price {amount!r}") from exc
    if not math.isfinite(price) or price <= 0:
        raise PriceFetchError(f"invalid spot price {amount!r}")
    return price


class CoinbasePriceFeed:
    def __init__(
        self,
        base_url: str = config.PRICE_BASE_URL,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._http = http or httpx.AsyncClient(
            base_url=base_url,
            timeout=config.HTTP_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> "CoinbasePriceFeed":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self._http.aclose()

    async def fetch_reference_price(self, symbol: str) -> float:
        try:
            response = await self._http.get(f"/v2/prices/{symbol}/spot")
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise PriceFetchError(f"{symbol} price request failed: {exc}") from exc
        except ValueError as exc:
            raise PriceFetchError(f"{symbol} price response is not JSON: {exc}") from exc
        price = parse_spot_price(payload)
        _LOGGER.debug("%s spot=%s", symbol, price)
        return price


__all__ = ["CoinbasePriceFeed", "parse_spot_price"]
