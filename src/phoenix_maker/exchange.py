"""Solana RPC session for a single Phoenix market."""

from __future__ import annotations

import logging
from typing import List, Optional, Type

from solana.exceptions import SolanaRpcException
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import create_associated_token_account

from . import phoenix
from .errors import MakerError, MarketDataError, SetupError
from .models import LimitOrderTemplate, MarketMetadata, WithdrawParams

_LOGGER = logging.getLogger(__name__)


class PhoenixClient:
    """Bridges the RPC node and the Phoenix instruction layer for one trader."""

    def __init__(self, rpc: AsyncClient, trader: Keypair, market_address: str) -> None:
        self.rpc = rpc
        self.trader = trader
        try:
            self.market_address = Pubkey.from_string(market_address)
        except ValueError as exc:
            raise MarketDataError(f"invalid market address {market_address!r}") from exc
        self._market: Optional[MarketMetadata] = None

    @classmethod
    def connect(cls, endpoint: str, trader: Keypair, market_address: str) -> "PhoenixClient":
        return cls(AsyncClient(endpoint, commitment=Confirmed), trader, market_address)

    async def __aenter__(self) -> "PhoenixClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.rpc.close()

    @property
    def trader_pubkey(self) -> Pubkey:
        return self.trader.pubkey()

    @property
    def market(self) -> MarketMetadata:
        if self._market is None:
            raise MarketDataError("market metadata not loaded; call load_market() first")
        return self._market

    async def load_market(self) -> MarketMetadata:
        account = await self._get_account(self.market_address, MarketDataError, "load market")
        if account is None:
            raise MarketDataError(f"market {self.market_address} not found")
        if account.owner != phoenix.PROGRAM_ID:
            raise MarketDataError(
                f"market {self.market_address} is owned by {account.owner}, not Phoenix"
            )
        self._market = phoenix.decode_market_header(self.market_address, bytes(account.data))
        _LOGGER.info(
            "loaded market %s base_lot=%s quote_lot=%s tick=%s",
            self.market_address,
            self._market.base_lot_size,
            self._market.quote_lot_size,
            self._market.tick_size_in_quote_atoms_per_base_unit,
        )
        return self._market

    async def maker_setup_instructions(self) -> List[Instruction]:
        """Actions still needed before the trader can rest orders on the market."""

        market = self.market
        trader = self.trader_pubkey
        instructions: List[Instruction] = []
        base_account, quote_account = phoenix.trader_token_accounts(market, trader)
        for mint, token_account in (
            (market.base_mint, base_account),
            (market.quote_mint, quote_account),
        ):
            if not await self._account_exists(token_account):
                _LOGGER.info("token account %s for mint %s missing", token_account, mint)
                instructions.append(create_associated_token_account(trader, trader, mint))
        seat = phoenix.seat_address(market.address, trader)
        seat_data = await self._account_data(seat)
        if not phoenix.seat_is_approved(seat_data):
            _LOGGER.info("seat %s missing or not approved", seat)
            instructions.append(phoenix.claim_seat(market, trader))
        return instructions

    def cancel_all_instruction(self) -> Instruction:
        return phoenix.cancel_all_orders(self.market, self.trader_pubkey)

    def limit_order_instruction(self, template: LimitOrderTemplate) -> Instruction:
        return phoenix.place_limit_order(self.market, self.trader_pubkey, template)

    def withdraw_instruction(self, params: WithdrawParams) -> Instruction:
        return phoenix.withdraw_funds(self.market, self.trader_pubkey, params)

    async def _get_account(self, address: Pubkey, error: Type[MakerError], step: str):
        try:
            response = await self.rpc.get_account_info(address, commitment=Confirmed)
        except (SolanaRpcException, RPCException) as exc:
            raise error(f"{step}: lookup of account {address} failed: {exc}") from exc
        return response.value

    async def _account_data(self, address: Pubkey) -> Optional[bytes]:
        account = await self._get_account(address, SetupError, "maker setup")
        if account is None:
            return None
        return bytes(account.data)

    async def _account_exists(self, address: Pubkey) -> bool:
        return await self._account_data(address) is not None


__all__ = ["PhoenixClient"]
