"""Core quoting loop: cancel, price, quote, submit, repeat, withdraw."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List

from solders.instruction import Instruction

from .bootstrap import ensure_maker_setup
from .config import LoopConfig
from .errors import PriceFetchError, SubmissionError
from .exchange import PhoenixClient
from .models import CycleOutcome, CycleStep, LoopState, Quote, RunSummary
from .price_feed import CoinbasePriceFeed
from .quote_engine import build_orders, build_withdrawal, client_order_ids, compute_quote
from .submitter import ActionSubmitter, tx_link


class QuotingLoop:
    """Runs a bounded number of quoting cycles and then withdraws all funds.

    The iteration counter is the only state carried between cycles. It
    advances only when a cycle's cancel and submit steps both confirm; a
    skipped cycle is retried from the top with no delay.
    """

    def __init__(
        self,
        exchange: PhoenixClient,
        submitter: ActionSubmitter,
        price_feed: CoinbasePriceFeed,
        loop_config: LoopConfig,
        price_symbol: str,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.exchange = exchange
        self.submitter = submitter
        self.price_feed = price_feed
        self.config = loop_config
        self.price_symbol = price_symbol
        self.state = LoopState.BOOTSTRAPPING
        self.iteration = 0
        self.cycles_completed = 0
        self.cycles_skipped = 0
        self.withdrawal_confirmed = False
        self._clock = clock
        self._sleep = sleep
        self._order_ids = client_order_ids()
        self._logger = logging.getLogger(__name__)

    @property
    def is_terminal_cycle(self) -> bool:
        return self.iteration == self.config.max_iterations

    async def run(self) -> RunSummary:
        self.state = LoopState.BOOTSTRAPPING
        await ensure_maker_setup(self.exchange, self.submitter)
        self.state = LoopState.ITERATING
        while self.state is LoopState.ITERATING:
            terminal = self.is_terminal_cycle
            outcome = await self.run_cycle()
            self._advance(outcome, terminal)
            if self.state is LoopState.ITERATING and outcome.is_completed:
                await self._sleep(self.config.refresh_seconds)
        self._logger.info(
            "quoting finished iteration=%d completed=%d skipped=%d withdrawal_confirmed=%s",
            self.iteration,
            self.cycles_completed,
            self.cycles_skipped,
            self.withdrawal_confirmed,
        )
        return RunSummary(
            iteration=self.iteration,
            cycles_completed=self.cycles_completed,
            cycles_skipped=self.cycles_skipped,
            withdrawal_confirmed=self.withdrawal_confirmed,
        )

    async def run_cycle(self) -> CycleOutcome:
        """Execute one pass of the cycle body for the current iteration."""

        try:
            cancel_sig = await self.submitter.submit(
                [self.exchange.cancel_all_instruction()], "cancel"
            )
        except SubmissionError as exc:
            return CycleOutcome.skipped(CycleStep.CANCEL_ALL, str(exc))
        self._logger.info("Cancel tx link: %s", tx_link(cancel_sig))

        if self.is_terminal_cycle:
            label = "withdraw"
            instructions = [self.exchange.withdraw_instruction(build_withdrawal())]
        else:
            try:
                reference = await self.price_feed.fetch_reference_price(self.price_symbol)
            except PriceFetchError as exc:
                return CycleOutcome.skipped(CycleStep.FETCH_PRICE, str(exc))
            quote = compute_quote(reference, self.config.edge)
            if quote.bid <= 0:
                return CycleOutcome.skipped(
                    CycleStep.BUILD_QUOTES,
                    f"bid {quote.bid} not positive for reference {reference}",
                )
            label = "place quotes"
            instructions = self._quote_instructions(quote)

        try:
            signature = await self.submitter.submit(instructions, label)
        except SubmissionError as exc:
            return CycleOutcome.skipped(CycleStep.SUBMIT, str(exc))
        self._logger.info("%s tx link: %s", label.capitalize(), tx_link(signature))
        return CycleOutcome.completed(signature)

    def _quote_instructions(self, quote: Quote) -> List[Instruction]:
        market = self.exchange.market
        self._logger.info("%s price: %s", self.price_symbol, quote.reference)
        self._logger.info("Placing bid (buy) order at: %s", market.format_price(quote.bid))
        self._logger.info("Placing ask (sell) order at: %s", market.format_price(quote.ask))
        bid, ask = build_orders(
            quote,
            size=self.config.order_size,
            lifetime_seconds=self.config.order_lifetime_seconds,
            now=self._clock(),
            order_ids=self._order_ids,
        )
        return [
            self.exchange.limit_order_instruction(bid),
            self.exchange.limit_order_instruction(ask),
        ]

    def _advance(self, outcome: CycleOutcome, terminal: bool) -> None:
        if outcome.is_completed:
            self.cycles_completed += 1
            self.iteration += 1
            if terminal:
                self.withdrawal_confirmed = True
        else:
            self.cycles_skipped += 1
            self._logger.warning(
                "cycle %d skipped at %s: %s",
                self.iteration,
                outcome.step.value if outcome.step else "unknown",
                outcome.reason,
            )

        if self.iteration > self.config.max_iterations:
            self.state = LoopState.TERMINATED
        elif terminal and not outcome.is_completed and not self.config.require_withdrawal_confirmation:
            self._logger.error("withdrawal not confirmed; exiting without retry")
            self.state = LoopState.TERMINATED


__all__ = ["QuotingLoop"]
