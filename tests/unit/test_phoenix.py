"""Tests for Phoenix instruction encoding and market header decoding."""

import struct

import pytest
from solders.pubkey import Pubkey

from phoenix_maker import phoenix
from phoenix_maker.errors import MarketDataError
from phoenix_maker.models import LimitOrderTemplate, SelfTradeBehavior, Side, WithdrawParams
from tests.unit.fakes import market_header_bytes, sol_usdc_market


class TestDecodeMarketHeader:
    def test_decodes_lot_sizes_and_mints(self):
        address = Pubkey.new_unique()
        data, base_mint, quote_mint = market_header_bytes()

        market = phoenix.decode_market_header(address, data)

        assert market.address == address
        assert market.base_mint == base_mint
        assert market.quote_mint == quote_mint
        assert market.base_decimals == 9
        assert market.quote_decimals == 6
        assert market.base_lot_size == 1_000_000
        assert market.tick_size_in_quote_atoms_per_base_unit == 1_000

    def test_zero_raw_units_defaults_to_one(self):
        data, _, _ = market_header_bytes(raw=0)

        assert phoenix.decode_market_header(Pubkey.new_unique(), data).raw_base_units_per_base_unit == 1

    def test_short_account_rejected(self):
        data, _, _ = market_header_bytes(size=100)

        with pytest.raises(MarketDataError):
            phoenix.decode_market_header(Pubkey.new_unique(), data)

    def test_uninitialized_market_rejected(self):
        data, _, _ = market_header_bytes(status=0)

        with pytest.raises(MarketDataError):
            phoenix.decode_market_header(Pubkey.new_unique(), data)

    def test_zero_tick_rejected(self):
        data, _, _ = market_header_bytes(tick=0)

        with pytest.raises(MarketDataError):
            phoenix.decode_market_header(Pubkey.new_unique(), data)


class TestInstructionEncoding:
    def test_limit_order_layout(self):
        market = sol_usdc_market()
        template = LimitOrderTemplate(
            side=Side.ASK,
            price=100.5,
            size_in_base_units=1.0,
            self_trade_behavior=SelfTradeBehavior.ABORT,
            client_order_id=258,
            use_only_deposited_funds=False,
            last_valid_slot=None,
            last_valid_unix_timestamp_in_seconds=1_700_000_007,
        )

        data = phoenix.encode_limit_order(market, template)

        assert data[:3] == bytes([phoenix.PLACE_LIMIT_ORDER, phoenix.ORDER_PACKET_LIMIT, 1])
        assert struct.unpack_from("<QQ", data, 3) == (100_500, 1_000)
        assert data[19] == 0  # abort
        assert data[20] == 0  # no match limit
        assert int.from_bytes(data[21:37], "little") == 258
        assert data[37] == 0  # external funds allowed
        assert data[38] == 0  # no slot expiry
        assert data[39] == 1
        assert struct.unpack_from("<Q", data, 40) == (1_700_000_007,)
        assert data[48:] == b"\x00"

    def test_withdraw_all(self):
        assert phoenix.encode_withdraw(WithdrawParams()) == bytes([phoenix.WITHDRAW_FUNDS, 0, 0])

    def test_withdraw_amounts(self):
        data = phoenix.encode_withdraw(WithdrawParams(quote_lots_to_withdraw=5, base_lots_to_withdraw=None))

        assert data[:2] == bytes([phoenix.WITHDRAW_FUNDS, 1])
        assert struct.unpack_from("<Q", data, 2) == (5,)
        assert data[10:] == b"\x00"

    def test_cancel_all_signed_by_trader(self):
        market = sol_usdc_market()
        trader = Pubkey.new_unique()

        ix = phoenix.cancel_all_orders(market, trader)

        assert ix.program_id == phoenix.PROGRAM_ID
        assert bytes(ix.data) == bytes([phoenix.CANCEL_ALL_ORDERS])
        signers = [meta.pubkey for meta in ix.accounts if meta.is_signer]
        assert signers == [trader]
        assert ix.accounts[2].pubkey == market.address

    def test_place_order_includes_seat(self):
        market = sol_usdc_market()
        trader = Pubkey.new_unique()
        template = LimitOrderTemplate(Side.BID, 99.5, 1.0, SelfTradeBehavior.ABORT, 1, False, None, 10)

        ix = phoenix.place_limit_order(market, trader, template)

        assert ix.accounts[4].pubkey == phoenix.seat_address(market.address, trader)


class TestSeatStatus:
    def test_missing_seat(self):
        assert not phoenix.seat_is_approved(None)

    def test_approved_seat(self):
        data = struct.pack("<Q32s32sQ", 0, bytes(32), bytes(32), phoenix.SEAT_APPROVED)

        assert phoenix.seat_is_approved(data)

    def test_unapproved_seat(self):
        data = struct.pack("<Q32s32sQ", 0, bytes(32), bytes(32), 0)

        assert not phoenix.seat_is_approved(data)
