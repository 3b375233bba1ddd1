"""Dataclasses and helper types for the Phoenix maker bot."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from solders.pubkey import Pubkey


class Side(str, Enum):
    BID = "bid"
    ASK = "ask"


class SelfTradeBehavior(str, Enum):
    ABORT = "abort"
    CANCEL_PROVIDE = "cancel_provide"
    DECREMENT_TAKE = "decrement_take"


@dataclass(frozen=True)
class Quote:
    reference: float
    bid: float
    ask: float


@dataclass(frozen=True)
class LimitOrderTemplate:
    """A single order placement request, built fresh every cycle."""

    side: Side
    price: float
    size_in_base_units: float
    self_trade_behavior: SelfTradeBehavior
    client_order_id: int
    use_only_deposited_funds: bool
    last_valid_slot: Optional[int]
    last_valid_unix_timestamp_in_seconds: Optional[int]


@dataclass(frozen=True)
class WithdrawParams:
    """Amounts to withdraw; ``None`` withdraws everything on that side."""

    quote_lots_to_withdraw: Optional[int] = None
    base_lots_to_withdraw: Optional[int] = None


@dataclass(frozen=True)
class MarketMetadata:
    address: Pubkey
    base_mint: Pubkey
    quote_mint: Pubkey
    base_vault: Pubkey
    quote_vault: Pubkey
    base_decimals: int
    quote_decimals: int
    base_lot_size: int
    quote_lot_size: int
    tick_size_in_quote_atoms_per_base_unit: int
    raw_base_units_per_base_unit: int = 1

    def float_price_to_ticks(self, price: float) -> int:
        quote_atoms = price * self.raw_base_units_per_base_unit * 10**self.quote_decimals
        return int(round(quote_atoms / self.tick_size_in_quote_atoms_per_base_unit))

    def base_units_to_base_lots(self, size: float) -> int:
        base_atoms = size * self.raw_base_units_per_base_unit * 10**self.base_decimals
        return math.floor(base_atoms / self.base_lot_size)

    def price_decimal_places(self) -> int:
        tick = Decimal(self.tick_size_in_quote_atoms_per_base_unit) / (
            Decimal(10) ** self.quote_decimals * self.raw_base_units_per_base_unit
        )
        exponent = tick.normalize().as_tuple().exponent
        return max(0, -exponent) if isinstance(exponent, int) else 0

    def format_price(self, price: float) -> str:
        return f"{price:.{self.price_decimal_places()}f}"


@dataclass(frozen=True)
class SetupOutcome:
    actions: int
    signature: Optional[str] = None

    @property
    def required(self) -> bool:
        return self.actions > 0


class CycleStep(str, Enum):
    CANCEL_ALL = "cancel_all"
    FETCH_PRICE = "fetch_price"
    BUILD_QUOTES = "build_quotes"
    SUBMIT = "submit"


class CycleStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CycleOutcome:
    status: CycleStatus
    step: Optional[CycleStep] = None
    reason: str = ""
    signature: Optional[str] = None

    @classmethod
    def completed(cls, signature: Optional[str] = None) -> "CycleOutcome":
        return cls(CycleStatus.COMPLETED, signature=signature)

    @classmethod
    def skipped(cls, step: CycleStep, reason: str) -> "CycleOutcome":
        return cls(CycleStatus.SKIPPED, step=step, reason=reason)

    @property
    def is_completed(self) -> bool:
        return self.status is CycleStatus.COMPLETED


class LoopState(str, Enum):
    BOOTSTRAPPING = "bootstrapping"
    ITERATING = "iterating"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class RunSummary:
    iteration: int
    cycles_completed: int
    cycles_skipped: int
    withdrawal_confirmed: bool
