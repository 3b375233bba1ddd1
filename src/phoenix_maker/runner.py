"""Entrypoint for launching the Phoenix maker bot."""

from __future__ import annotations

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv
from solders.keypair import Keypair

from . import config
from .errors import ConfigError, MakerError
from .exchange import PhoenixClient
from .models import RunSummary
from .price_feed import CoinbasePriceFeed
from .strategy import QuotingLoop
from .submitter import ActionSubmitter

_LOGGER = logging.getLogger(__name__)


def load_keypair(secret: bytes) -> Keypair:
    try:
        return Keypair.from_bytes(secret)
    except ValueError as exc:
        raise ConfigError(f"invalid trader keypair: {exc}") from exc


async def main(settings: config.Settings) -> RunSummary:
    trader = load_keypair(settings.private_key)
    _LOGGER.info("trader %s market %s", trader.pubkey(), settings.market_address)
    async with CoinbasePriceFeed(settings.price_base_url) as price_feed:
        async with PhoenixClient.connect(
            settings.rpc_endpoint, trader, settings.market_address
        ) as exchange:
            submitter = ActionSubmitter(exchange.rpc, trader)
            loop = QuotingLoop(
                exchange,
                submitter,
                price_feed,
                settings.loop,
                settings.price_symbol,
            )
            return await loop.run()


def cli() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    try:
        logging.getLogger().setLevel(config.parse_log_level(os.getenv(config.LOG_LEVEL_ENV)))
        settings = config.load_settings()
        asyncio.run(main(settings))
    except MakerError as exc:
        _LOGGER.error("fatal: %s", exc)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    cli()
