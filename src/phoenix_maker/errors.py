"""Exception types raised by the Phoenix maker bot."""

from __future__ import annotations


class MakerError(Exception):
    """Base class for all bot errors."""


class ConfigError(MakerError):
    pass


class MarketDataError(MakerError):
    """Market account is missing or could not be decoded."""


class SetupError(MakerError):
    """Maker setup could not be confirmed; quoting must not start."""


class PriceFetchError(MakerError):
    """Reference price was unavailable or invalid."""


class SubmissionError(MakerError):
    """A bundle of actions failed to land with confirmed status."""

    def __init__(self, label: str, cause: BaseException | str) -> None:
        super().__init__(f"{label} submission failed: {cause}")
        self.label = label
        self.cause = cause


__all__ = [
    "MakerError",
    "ConfigError",
    "MarketDataError",
    "SetupError",
    "PriceFetchError",
    "SubmissionError",
]
