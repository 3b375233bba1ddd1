"""One-time maker setup before quoting starts."""

from __future__ import annotations

import logging

from .errors import SetupError, SubmissionError
from .exchange import PhoenixClient
from .models import SetupOutcome
from .submitter import ActionSubmitter, tx_link

_LOGGER = logging.getLogger(__name__)


async def ensure_maker_setup(exchange: PhoenixClient, submitter: ActionSubmitter) -> SetupOutcome:
    """Load the market and submit any missing maker setup as one bundle.

    Raises ``MarketDataError`` when the market is unavailable and
    ``SetupError`` when the setup bundle is not confirmed.
    """

    await exchange.load_market()
    instructions = await exchange.maker_setup_instructions()
    _LOGGER.info("maker setup actions required: %d", len(instructions))
    if not instructions:
        _LOGGER.info("No setup required. Continuing...")
        return SetupOutcome(actions=0)
    try:
        signature = await submitter.submit(instructions, "setup")
    except SubmissionError as exc:
        raise SetupError(str(exc)) from exc
    _LOGGER.info("Setup tx link: %s", tx_link(signature))
    return SetupOutcome(actions=len(instructions), signature=signature)


__all__ = ["ensure_maker_setup"]
