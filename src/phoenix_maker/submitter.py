"""Atomic, confirmed submission of instruction bundles."""

from __future__ import annotations

import logging
from typing import Sequence

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from . import config
from .errors import SubmissionError

_LOGGER = logging.getLogger(__name__)


def tx_link(signature: str) -> str:
    return f"{config.TX_LINK_PREFIX}{signature}"


class ActionSubmitter:
    """Signs every bundle with the trader keypair and waits for confirmation."""

    def __init__(self, rpc: AsyncClient, trader: Keypair) -> None:
        self.rpc = rpc
        self.trader = trader
        self._opts = TxOpts(skip_preflight=True, preflight_commitment=Confirmed)

    async def submit(self, instructions: Sequence[Instruction], label: str) -> str:
        """Send ``instructions`` as one transaction; returns the signature.

        Any failure while building, signing, sending or confirming is raised
        as ``SubmissionError`` so the caller can decide what to do with it.
        """

        try:
            blockhash_resp = await self.rpc.get_latest_blockhash(Confirmed)
            blockhash = blockhash_resp.value.blockhash
            message = Message(list(instructions), self.trader.pubkey())
            transaction = Transaction([self.trader], message, blockhash)
            send_resp = await self.rpc.send_transaction(transaction, opts=self._opts)
            signature = send_resp.value
            _LOGGER.debug("%s sent: %s", label, signature)
            confirm_resp = await self.rpc.confirm_transaction(
                signature,
                Confirmed,
                sleep_seconds=config.CONFIRM_POLL_SECONDS,
                last_valid_block_height=blockhash_resp.value.last_valid_block_height,
            )
        except Exception as exc:
            raise SubmissionError(label, exc) from exc

        statuses = confirm_resp.value
        status = statuses[0] if statuses else None
        if status is None:
            raise SubmissionError(label, f"no status for {signature}")
        if status.err is not None:
            raise SubmissionError(label, f"transaction {signature} failed: {status.err}")
        return str(signature)


__all__ = ["ActionSubmitter", "tx_link"]
