"""Discrete-inventory pricing.

Items are priced from the pool's currency reserve T and item count N, not
from a continuous curve:

    sell (item in, currency out):  gross_out = floor(T / (N + 1))
    buy  (currency in, item out):  net_in    = floor(T / (N - 1))

Fees are asymmetric. Selling floors the fee from the gross amount:

    fee = floor(gross_out * fee_bps / 10000), net_out = gross_out - fee

Buying grosses the net price up, also with floor division:

    gross_in = floor(net_in * 10000 / (10000 - fee_bps)), fee = gross_in - net_in

Both formulas are kept as-is; unifying them would change prices.
"""

from __future__ import annotations

from dataclasses import dataclass

from royalty_amm.constants import BPS_DENOMINATOR
from royalty_amm.errors import (
    ArithmeticDegeneracy,
    ErrorReason,
    PreconditionError,
    SlippageExceeded,
)
from royalty_amm.safe_int import S


@dataclass(frozen=True)
class SellQuote:
    """Result of pricing one item sold into the pool."""

    gross_out: int
    fee: int
    net_out: int
    reserve_before: int
    items_before: int

    @property
    def reserve_after(self) -> int:
        # Net leaves the pool, the fee moves to the fee pool
        return self.reserve_before - self.gross_out


@dataclass(frozen=True)
class BuyQuote:
    """Result of pricing one item bought out of the pool."""

    net_in: int
    gross_in: int
    fee: int
    reserve_before: int
    items_before: int

    @property
    def reserve_after(self) -> int:
        return self.reserve_before + self.net_in


@dataclass(frozen=True)
class BatchSellQuote:
    """Sequential pricing of several items sold in one operation."""

    quotes: tuple[SellQuote, ...]

    @property
    def total_gross(self) -> int:
        return sum(q.gross_out for q in self.quotes)

    @property
    def total_fee(self) -> int:
        return sum(q.fee for q in self.quotes)

    @property
    def total_net(self) -> int:
        return sum(q.net_out for q in self.quotes)


def validate_fee_bps(fee_bps: int) -> int:
    """Check a fee rate is within [0, 10000] basis points."""
    if isinstance(fee_bps, bool) or not isinstance(fee_bps, int):
        raise PreconditionError(f"Fee must be an integer, got {fee_bps!r}", ErrorReason.INVALID_FEE)
    if not 0 <= fee_bps <= BPS_DENOMINATOR:
        raise PreconditionError(
            f"Fee must be between 0 and {BPS_DENOMINATOR} bps: {fee_bps}", ErrorReason.INVALID_FEE
        )
    return fee_bps


class DiscreteInventoryPricing:
    """Prices single, batched and quoted swaps for a given fee rate."""

    def __init__(self, fee_bps: int) -> None:
        self.fee_bps = validate_fee_bps(fee_bps)

    def quote_sell(self, currency_reserve: int, item_count: int) -> SellQuote:
        """Price selling one item into a pool holding item_count items.

        Raises:
            ArithmeticDegeneracy: If the reserve is empty or the gross amount rounds to zero
        """
        if currency_reserve == 0:
            raise ArithmeticDegeneracy("Pool has no currency reserve", ErrorReason.ZERO_RESERVE)

        gross_out = (S(currency_reserve) // (item_count + 1)).value
        if gross_out == 0:
            raise ArithmeticDegeneracy(
                f"Sell price rounds to zero (reserve={currency_reserve}, items={item_count})"
            )

        fee = S(gross_out).mul_div(self.fee_bps, BPS_DENOMINATOR).value
        # A fee at or above gross is a zero-payout trade, not a rejection
        net_out = S(gross_out).saturating_sub(fee).value
        return SellQuote(
            gross_out=gross_out,
            fee=fee,
            net_out=net_out,
            reserve_before=currency_reserve,
            items_before=item_count,
        )

    def quote_buy(self, currency_reserve: int, item_count: int) -> BuyQuote:
        """Price buying one item out of a pool holding item_count items.

        Raises:
            ArithmeticDegeneracy: If fewer than two items are held, the price
                rounds to zero, or the fee rate leaves no room for a gross-up
        """
        if item_count <= 1:
            raise ArithmeticDegeneracy(
                f"Buying needs at least 2 items in the pool, found {item_count}",
                ErrorReason.INSUFFICIENT_INVENTORY,
            )
        if self.fee_bps >= BPS_DENOMINATOR:
            raise ArithmeticDegeneracy(
                f"Cannot gross up a buy at {self.fee_bps} bps", ErrorReason.INVALID_FEE
            )

        net_in = (S(currency_reserve) // (item_count - 1)).value
        if net_in == 0:
            raise ArithmeticDegeneracy(
                f"Buy price rounds to zero (reserve={currency_reserve}, items={item_count})"
            )

        gross_in = S(net_in).mul_div(BPS_DENOMINATOR, BPS_DENOMINATOR - self.fee_bps).value
        return BuyQuote(
            net_in=net_in,
            gross_in=gross_in,
            fee=gross_in - net_in,
            reserve_before=currency_reserve,
            items_before=item_count,
        )

    def quote_batch_sell(
        self,
        currency_reserve: int,
        item_count: int,
        batch_size: int,
        min_total_out: int = 0,
    ) -> BatchSellQuote:
        """Price batch_size sequential sells, each on the reserves left by the last.

        Raises:
            PreconditionError: If batch_size is not positive
            ArithmeticDegeneracy: If any sell in the sequence is degenerate
            SlippageExceeded: If the aggregate net is below min_total_out
        """
        if batch_size <= 0:
            raise PreconditionError(
                "Batch must contain at least one item", ErrorReason.EMPTY_ITEM_LIST
            )

        quotes: list[SellQuote] = []
        reserve, count = currency_reserve, item_count
        for _ in range(batch_size):
            quote = self.quote_sell(reserve, count)
            quotes.append(quote)
            reserve, count = quote.reserve_after, count + 1

        batch = BatchSellQuote(quotes=tuple(quotes))
        if batch.total_net < min_total_out:
            raise SlippageExceeded(
                f"Batch output {batch.total_net} below minimum {min_total_out}"
            )
        return batch

    @staticmethod
    def spot_prices(currency_reserve: int, item_count: int) -> tuple[int | None, int | None]:
        """Pre-fee (buy_price, sell_price); None where the formula is undefined."""
        buy_price = currency_reserve // (item_count - 1) if item_count > 1 else None
        sell_price = currency_reserve // (item_count + 1) if currency_reserve > 0 else None
        return buy_price, sell_price
