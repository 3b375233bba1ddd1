"""Bounded two-sided quoting bot for a Phoenix on-chain order book."""

__all__ = [
    "bootstrap",
    "config",
    "errors",
    "exchange",
    "models",
    "phoenix",
    "price_feed",
    "quote_engine",
    "runner",
    "strategy",
    "submitter",
]
