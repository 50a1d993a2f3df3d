"""Pydantic request and response models for the HTTP API.

Amounts are accepted as integers or decimal strings and returned as decimal
strings, so values beyond 2^53 survive JSON clients.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from royalty_amm.constants import BPS_DENOMINATOR
from royalty_amm.models.types import Address, ItemId, Uint256

_CONFIG = {"populate_by_name": True}


# =============================================================================
# Requests
# =============================================================================


class PoolRef(BaseModel):
    """Identifies a pool by its (collection, currency) pair."""

    collection: Address
    currency: Address = Field(description="Currency address; the zero address is native currency")

    model_config = _CONFIG


class CreatePoolRequest(PoolRef):
    item_ids: list[ItemId] = Field(alias="itemIds", min_length=1)
    amount: Uint256 = 0
    provider: Address


class AddLiquidityRequest(PoolRef):
    amount: Uint256
    provider: Address


class DepositItemsRequest(PoolRef):
    item_ids: list[ItemId] = Field(alias="itemIds", min_length=1)
    depositor: Address


class RemoveLiquidityRequest(PoolRef):
    share_amount: Uint256 = Field(alias="shareAmount")
    provider: Address


class WithdrawFeesRequest(PoolRef):
    provider: Address


class SellItemRequest(PoolRef):
    item_id: ItemId = Field(alias="itemId")
    seller: Address


class BuyItemRequest(PoolRef):
    item_id: ItemId = Field(alias="itemId")
    buyer: Address
    value: Uint256 | None = Field(
        default=None, description="Native currency attached; the excess over the price is refunded"
    )


class BatchSellRequest(PoolRef):
    item_ids: list[ItemId] = Field(alias="itemIds", min_length=1)
    seller: Address
    min_total_out: Uint256 = Field(default=0, alias="minTotalOut")


class RoyaltyEntryModel(BaseModel):
    recipient: Address
    basis_points: int = Field(alias="basisPoints", ge=0, le=BPS_DENOMINATOR)

    model_config = _CONFIG


class SetRoyaltyRequest(BaseModel):
    caller: Address
    collection: Address
    item_id: ItemId = Field(alias="itemId")
    entries: list[RoyaltyEntryModel]
    context: str | None = Field(default=None, description="Optional sale context id")

    model_config = _CONFIG


class CreditRoyaltyRequest(PoolRef):
    item_id: ItemId = Field(alias="itemId")
    amount: Uint256
    payer: Address
    value: Uint256 | None = None
    context: str | None = None


class WithdrawRoyaltyRequest(BaseModel):
    recipient: Address
    currency: Address

    model_config = _CONFIG


class SetSwapFeeRequest(BaseModel):
    caller: Address
    fee_bps: int = Field(alias="feeBps", ge=0, le=BPS_DENOMINATOR)

    model_config = _CONFIG


class GrantAdminRequest(BaseModel):
    caller: Address
    account: Address


class MintCurrencyRequest(BaseModel):
    caller: Address
    currency: Address = Field(description="Currency address; the zero address is native currency")
    account: Address
    amount: Uint256


class MintItemsRequest(BaseModel):
    caller: Address
    collection: Address
    item_ids: list[ItemId] = Field(alias="itemIds", min_length=1)
    owner: Address

    model_config = _CONFIG


# =============================================================================
# Responses
# =============================================================================


class SharesResponse(BaseModel):
    shares: Uint256


class ItemCountResponse(BaseModel):
    item_reserve_count: int = Field(alias="itemReserveCount")

    model_config = _CONFIG


class WithdrawalResponse(BaseModel):
    currency_amount: Uint256 = Field(alias="currencyAmount")
    fee_amount: Uint256 = Field(alias="feeAmount")

    model_config = _CONFIG


class FeeResponse(BaseModel):
    fee_amount: Uint256 = Field(alias="feeAmount")

    model_config = _CONFIG


class SellResponse(BaseModel):
    item_id: ItemId = Field(alias="itemId")
    gross_out: Uint256 = Field(alias="grossOut")
    fee: Uint256
    net_out: Uint256 = Field(alias="netOut")

    model_config = _CONFIG


class BuyResponse(BaseModel):
    item_id: ItemId = Field(alias="itemId")
    net_in: Uint256 = Field(alias="netIn")
    gross_in: Uint256 = Field(alias="grossIn")
    fee: Uint256
    refund: Uint256

    model_config = _CONFIG


class BatchSellResponse(BaseModel):
    item_ids: list[ItemId] = Field(alias="itemIds")
    total_gross: Uint256 = Field(alias="totalGross")
    total_fee: Uint256 = Field(alias="totalFee")
    total_net: Uint256 = Field(alias="totalNet")

    model_config = _CONFIG


class PoolInfoResponse(PoolRef):
    currency_reserve: Uint256 = Field(alias="currencyReserve")
    item_reserve_count: int = Field(alias="itemReserveCount")
    total_shares: Uint256 = Field(alias="totalShares")
    accumulated_fees: Uint256 = Field(alias="accumulatedFees")


class PoolListResponse(BaseModel):
    pools: list[PoolInfoResponse]
    total: int


class PoolItemsResponse(PoolRef):
    item_ids: list[ItemId] = Field(alias="itemIds")


class PriceQuoteResponse(PoolRef):
    fee_bps: int = Field(alias="feeBps")
    buy_price: Uint256 | None = Field(alias="buyPrice", description="Pre-fee buy price")
    sell_price: Uint256 | None = Field(alias="sellPrice", description="Pre-fee sell price")
    buy_gross_in: Uint256 | None = Field(alias="buyGrossIn")
    sell_net_out: Uint256 | None = Field(alias="sellNetOut")


class RoyaltyPaymentModel(BaseModel):
    recipient: Address
    amount: Uint256


class RoyaltyResponse(BaseModel):
    payments: list[RoyaltyPaymentModel]


class RoyaltyCreditResponse(BaseModel):
    payments: list[RoyaltyPaymentModel]
    reserve_credit: Uint256 = Field(alias="reserveCredit")

    model_config = _CONFIG


class AmountResponse(BaseModel):
    amount: Uint256


class BalanceResponse(BaseModel):
    currency: Address
    account: Address
    balance: Uint256


class CollectionStatsResponse(BaseModel):
    total_trading_volume: Uint256 = Field(alias="totalTradingVolume")
    total_fees_collected: Uint256 = Field(alias="totalFeesCollected")
    trade_count: int = Field(alias="tradeCount")

    model_config = _CONFIG


class ErrorResponse(BaseModel):
    reason: str
    detail: str
