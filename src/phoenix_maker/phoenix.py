"""Phoenix program accounts, market header decoding and instruction encoding.

Instruction data is the one-byte instruction tag followed by little-endian,
borsh-style fields: ``Option<T>`` is a one-byte presence flag and the value,
``bool`` is a single byte, and ``u128`` is sixteen bytes.
"""

from __future__ import annotations

import struct
from typing import Final, Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import get_associated_token_address

from . import config
from .errors import MarketDataError
from .models import (
    LimitOrderTemplate,
    MarketMetadata,
    SelfTradeBehavior,
    Side,
    WithdrawParams,
)

PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(config.PHOENIX_PROGRAM_ID)
SEAT_MANAGER_PROGRAM_ID: Final[Pubkey] = Pubkey.from_string(config.SEAT_MANAGER_PROGRAM_ID)

PLACE_LIMIT_ORDER: Final[int] = 2
CANCEL_ALL_ORDERS: Final[int] = 6
WITHDRAW_FUNDS: Final[int] = 12
CLAIM_SEAT: Final[int] = 1  # seat manager program

ORDER_PACKET_LIMIT: Final[int] = 1

SIDE_CODES: Final[dict[Side, int]] = {Side.BID: 0, Side.ASK: 1}
SELF_TRADE_CODES: Final[dict[SelfTradeBehavior, int]] = {
    SelfTradeBehavior.ABORT: 0,
    SelfTradeBehavior.CANCEL_PROVIDE: 1,
    SelfTradeBehavior.DECREMENT_TAKE: 2,
}

MARKET_HEADER_SIZE: Final[int] = 576
# discriminant, status, bids/asks/seats sizes, base params, base lot size,
# quote params, quote lot size, tick size, authority, fee recipient,
# sequence number, successor, raw base units per base unit
_MARKET_HEADER_FMT: Final[str] = "<5Q II32s32s Q II32s32s Q Q 32s32s Q 32s I"
_SEAT_FMT: Final[str] = "<Q32s32sQ"
SEAT_APPROVED: Final[int] = 1


def log_authority() -> Pubkey:
    return Pubkey.find_program_address([b"log"], PROGRAM_ID)[0]


def seat_address(market: Pubkey, trader: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([b"seat", bytes(market), bytes(trader)], PROGRAM_ID)[0]


def seat_manager_address(market: Pubkey) -> Pubkey:
    return Pubkey.find_program_address([bytes(market)], SEAT_MANAGER_PROGRAM_ID)[0]


def seat_deposit_collector_address(market: Pubkey) -> Pubkey:
    return Pubkey.find_program_address(
        [bytes(market), b"deposit"], SEAT_MANAGER_PROGRAM_ID
    )[0]


def trader_token_accounts(market: MarketMetadata, trader: Pubkey) -> tuple[Pubkey, Pubkey]:
    return (
        get_associated_token_address(trader, market.base_mint),
        get_associated_token_address(trader, market.quote_mint),
    )


def decode_market_header(address: Pubkey, data: bytes) -> MarketMetadata:
    """Decode the fixed-size header at the start of a market account."""

    if len(data) < MARKET_HEADER_SIZE:
        raise MarketDataError(
            f"market {address} account too short: {len(data)} < {MARKET_HEADER_SIZE} bytes"
        )
    fields = struct.unpack_from(_MARKET_HEADER_FMT, data)
    (
        _discriminant,
        status,
        _bids_size,
        _asks_size,
        _num_seats,
        base_decimals,
        _base_vault_bump,
        base_mint,
        base_vault,
        base_lot_size,
        quote_decimals,
        _quote_vault_bump,
        quote_mint,
        quote_vault,
        quote_lot_size,
        tick_size,
        _authority,
        _fee_recipient,
        _sequence_number,
        _successor,
        raw_base_units_per_base_unit,
    ) = fields
    if status == 0:
        raise MarketDataError(f"market {address} is not initialized")
    if base_lot_size == 0 or quote_lot_size == 0 or tick_size == 0:
        raise MarketDataError(f"market {address} has zero lot or tick size")
    return MarketMetadata(
        address=address,
        base_mint=Pubkey.from_bytes(base_mint),
        quote_mint=Pubkey.from_bytes(quote_mint),
        base_vault=Pubkey.from_bytes(base_vault),
        quote_vault=Pubkey.from_bytes(quote_vault),
        base_decimals=base_decimals,
        quote_decimals=quote_decimals,
        base_lot_size=base_lot_size,
        quote_lot_size=quote_lot_size,
        tick_size_in_quote_atoms_per_base_unit=tick_size,
        raw_base_units_per_base_unit=raw_base_units_per_base_unit or 1,
    )


def seat_is_approved(data: Optional[bytes]) -> bool:
    if data is None or len(data) < struct.calcsize(_SEAT_FMT):
        return False
    _discriminant, _market, _trader, approval_status = struct.unpack_from(_SEAT_FMT, data)
    return approval_status == SEAT_APPROVED


def _option_u64(value: Optional[int]) -> bytes:
    if value is None:
        return b"\x00"
    return b"\x01" + struct.pack("<Q", value)


def _bool(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def _funds_accounts(market: MarketMetadata, trader: Pubkey) -> list[AccountMeta]:
    base_account, quote_account = trader_token_accounts(market, trader)
    return [
        AccountMeta(base_account, is_signer=False, is_writable=True),
        AccountMeta(quote_account, is_signer=False, is_writable=True),
        AccountMeta(market.base_vault, is_signer=False, is_writable=True),
        AccountMeta(market.quote_vault, is_signer=False, is_writable=True),
        AccountMeta(TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
    ]


def _header_accounts(market: MarketMetadata, trader: Pubkey) -> list[AccountMeta]:
    return [
        AccountMeta(PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(log_authority(), is_signer=False, is_writable=False),
        AccountMeta(market.address, is_signer=False, is_writable=True),
        AccountMeta(trader, is_signer=True, is_writable=False),
    ]


def cancel_all_orders(market: MarketMetadata, trader: Pubkey) -> Instruction:
    accounts = _header_accounts(market, trader) + _funds_accounts(market, trader)
    return Instruction(PROGRAM_ID, bytes([CANCEL_ALL_ORDERS]), accounts)


def encode_limit_order(market: MarketMetadata, template: LimitOrderTemplate) -> bytes:
    return b"".join(
        [
            bytes([PLACE_LIMIT_ORDER, ORDER_PACKET_LIMIT, SIDE_CODES[template.side]]),
            struct.pack(
                "<QQ",
                market.float_price_to_ticks(template.price),
                market.base_units_to_base_lots(template.size_in_base_units),
            ),
            bytes([SELF_TRADE_CODES[template.self_trade_behavior]]),
            _option_u64(None),  # match limit
            template.client_order_id.to_bytes(16, "little"),
            _bool(template.use_only_deposited_funds),
            _option_u64(template.last_valid_slot),
            _option_u64(template.last_valid_unix_timestamp_in_seconds),
            _bool(False),  # fail silently on insufficient funds
        ]
    )


def place_limit_order(
    market: MarketMetadata, trader: Pubkey, template: LimitOrderTemplate
) -> Instruction:
    accounts = _header_accounts(market, trader)
    accounts.append(
        AccountMeta(seat_address(market.address, trader), is_signer=False, is_writable=False)
    )
    accounts.extend(_funds_accounts(market, trader))
    return Instruction(PROGRAM_ID, encode_limit_order(market, template), accounts)


def encode_withdraw(params: WithdrawParams) -> bytes:
    return (
        bytes([WITHDRAW_FUNDS])
        + _option_u64(params.quote_lots_to_withdraw)
        + _option_u64(params.base_lots_to_withdraw)
    )


def withdraw_funds(market: MarketMetadata, trader: Pubkey, params: WithdrawParams) -> Instruction:
    accounts = _header_accounts(market, trader) + _funds_accounts(market, trader)
    return Instruction(PROGRAM_ID, encode_withdraw(params), accounts)


def claim_seat(market: MarketMetadata, trader: Pubkey) -> Instruction:
    accounts = [
        AccountMeta(PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(log_authority(), is_signer=False, is_writable=False),
        AccountMeta(market.address, is_signer=False, is_writable=True),
        AccountMeta(seat_manager_address(market.address), is_signer=False, is_writable=True),
        AccountMeta(
            seat_deposit_collector_address(market.address), is_signer=False, is_writable=True
        ),
        AccountMeta(trader, is_signer=True, is_writable=False),
        AccountMeta(trader, is_signer=True, is_writable=True),  # payer
        AccountMeta(seat_address(market.address, trader), is_signer=False, is_writable=True),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(SEAT_MANAGER_PROGRAM_ID, bytes([CLAIM_SEAT]), accounts)


__all__ = [
    "PROGRAM_ID",
    "decode_market_header",
    "seat_is_approved",
    "seat_address",
    "trader_token_accounts",
    "cancel_all_orders",
    "place_limit_order",
    "withdraw_funds",
    "claim_seat",
    "encode_limit_order",
    "encode_withdraw",
]
