"""Two-sided quote generation around a reference price."""

from __future__ import annotations

import itertools
from typing import Iterator

from .models import LimitOrderTemplate, Quote, SelfTradeBehavior, Side, WithdrawParams


def client_order_ids(start: int = 1) -> Iterator[int]:
    return itertools.count(start)


def compute_quote(reference: float, edge: float) -> Quote:
    return Quote(reference=reference, bid=reference - edge, ask=reference + edge)


def build_order(
    side: Side,
    price: float,
    size: float,
    client_order_id: int,
    expires_at: int,
) -> LimitOrderTemplate:
    return LimitOrderTemplate(
        side=side,
        price=price,
        size_in_base_units=size,
        self_trade_behavior=SelfTradeBehavior.ABORT,
        client_order_id=client_order_id,
        use_only_deposited_funds=False,
        last_valid_slot=None,
        last_valid_unix_timestamp_in_seconds=expires_at,
    )


def build_orders(
    quote: Quote,
    size: float,
    lifetime_seconds: int,
    now: float,
    order_ids: Iterator[int],
) -> tuple[LimitOrderTemplate, LimitOrderTemplate]:
    """Bid and ask requests that expire ``lifetime_seconds`` after ``now``."""

    expires_at = int(now) + lifetime_seconds
    bid = build_order(Side.BID, quote.bid, size, next(order_ids), expires_at)
    ask = build_order(Side.ASK, quote.ask, size, next(order_ids), expires_at)
    return bid, ask


def build_withdrawal() -> WithdrawParams:
    return WithdrawParams(quote_lots_to_withdraw=None, base_lots_to_withdraw=None)


__all__ = [
    "client_order_ids",
    "compute_quote",
    "build_order",
    "build_orders",
    "build_withdrawal",
]
