"""API endpoints for the royalty AMM.

Endpoints are async and call the engine without awaiting, so requests are
handled one at a time on the event loop. The engine is never entered from
two threads.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query

from royalty_amm.config import EngineConfig
from royalty_amm.custody import InMemoryCustody
from royalty_amm.models.api import (
    AddLiquidityRequest,
    AmountResponse,
    BalanceResponse,
    BatchSellRequest,
    BatchSellResponse,
    BuyItemRequest,
    BuyResponse,
    CollectionStatsResponse,
    CreatePoolRequest,
    CreditRoyaltyRequest,
    DepositItemsRequest,
    FeeResponse,
    GrantAdminRequest,
    ItemCountResponse,
    MintCurrencyRequest,
    MintItemsRequest,
    PoolInfoResponse,
    PoolItemsResponse,
    PoolListResponse,
    PriceQuoteResponse,
    RemoveLiquidityRequest,
    RoyaltyCreditResponse,
    RoyaltyPaymentModel,
    RoyaltyResponse,
    SellItemRequest,
    SellResponse,
    SetRoyaltyRequest,
    SetSwapFeeRequest,
    SharesResponse,
    WithdrawalResponse,
    WithdrawFeesRequest,
    WithdrawRoyaltyRequest,
)
from royalty_amm.pools import PoolInfo, PoolRegistry

logger = structlog.get_logger()

router = APIRouter()

_default_registry: PoolRegistry | None = None


def get_default_registry() -> PoolRegistry:
    """Process-wide engine backed by in-memory custody, configured from AMM_* env vars."""
    global _default_registry
    if _default_registry is None:
        config = EngineConfig.from_env()
        _default_registry = PoolRegistry(InMemoryCustody(), config)
        logger.info(
            "engine_initialized",
            swap_fee_bps=config.swap_fee_bps,
            royalty_mode=config.royalty_mode.value,
            royalty_payout=config.royalty_payout.value,
            admins=len(config.admins),
        )
    return _default_registry


def get_engine() -> PoolRegistry:
    """Dependency provider for the engine instance.

    Override this in tests to inject a prepared engine:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    return get_default_registry()


def _pool_response(info: PoolInfo) -> PoolInfoResponse:
    return PoolInfoResponse(
        collection=info.collection,
        currency=info.currency,
        currency_reserve=info.currency_reserve,
        item_reserve_count=info.item_reserve_count,
        total_shares=info.total_shares,
        accumulated_fees=info.accumulated_fees,
    )


# =============================================================================
# Pools and liquidity
# =============================================================================


@router.post("/pools", response_model=SharesResponse)
async def create_pool(request: CreatePoolRequest, engine: PoolRegistry = Depends(get_engine)):
    shares = engine.create_pool(
        request.collection, request.currency, request.item_ids, request.amount, request.provider
    )
    return SharesResponse(shares=shares)


@router.get("/pools", response_model=PoolListResponse)
async def list_pools(
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1),
    engine: PoolRegistry = Depends(get_engine),
):
    pools = engine.get_pools(offset=offset, limit=limit)
    return PoolListResponse(pools=[_pool_response(p) for p in pools], total=engine.pool_count)


@router.get("/pools/{collection}/{currency}", response_model=PoolInfoResponse)
async def get_pool(collection: str, currency: str, engine: PoolRegistry = Depends(get_engine)):
    return _pool_response(engine.get_pool_info(collection, currency))


@router.get("/pools/{collection}/{currency}/items", response_model=PoolItemsResponse)
async def get_pool_items(
    collection: str, currency: str, engine: PoolRegistry = Depends(get_engine)
):
    info = engine.get_pool_info(collection, currency)
    return PoolItemsResponse(
        collection=info.collection,
        currency=info.currency,
        item_ids=engine.get_pool_items(collection, currency),
    )


@router.get("/pools/{collection}/{currency}/quote", response_model=PriceQuoteResponse)
async def get_price_quote(
    collection: str, currency: str, engine: PoolRegistry = Depends(get_engine)
):
    quote = engine.get_price_quote(collection, currency)
    return PriceQuoteResponse(
        collection=quote.collection,
        currency=quote.currency,
        fee_bps=quote.fee_bps,
        buy_price=quote.buy_price,
        sell_price=quote.sell_price,
        buy_gross_in=quote.buy.gross_in if quote.buy else None,
        sell_net_out=quote.sell.net_out if quote.sell else None,
    )


@router.get("/pools/{collection}/{currency}/shares/{provider}", response_model=SharesResponse)
async def get_provider_shares(
    collection: str, currency: str, provider: str, engine: PoolRegistry = Depends(get_engine)
):
    return SharesResponse(shares=engine.get_provider_shares(collection, currency, provider))


@router.post("/liquidity/add", response_model=SharesResponse)
async def add_liquidity(request: AddLiquidityRequest, engine: PoolRegistry = Depends(get_engine)):
    shares = engine.add_liquidity(
        request.collection, request.currency, request.amount, request.provider
    )
    return SharesResponse(shares=shares)


@router.post("/liquidity/remove", response_model=WithdrawalResponse)
async def remove_liquidity(
    request: RemoveLiquidityRequest, engine: PoolRegistry = Depends(get_engine)
):
    result = engine.remove_liquidity(
        request.collection, request.currency, request.share_amount, request.provider
    )
    return WithdrawalResponse(currency_amount=result.currency_amount, fee_amount=result.fee_amount)


@router.post("/liquidity/fees", response_model=FeeResponse)
async def withdraw_fees(request: WithdrawFeesRequest, engine: PoolRegistry = Depends(get_engine)):
    fee_amount = engine.withdraw_fees(request.collection, request.currency, request.provider)
    return FeeResponse(fee_amount=fee_amount)


@router.post("/items/deposit", response_model=ItemCountResponse)
async def deposit_items(request: DepositItemsRequest, engine: PoolRegistry = Depends(get_engine)):
    count = engine.deposit_items(
        request.collection, request.currency, request.item_ids, request.depositor
    )
    return ItemCountResponse(item_reserve_count=count)


# =============================================================================
# Swaps
# =============================================================================


@router.post("/swap/sell", response_model=SellResponse)
async def sell_item(request: SellItemRequest, engine: PoolRegistry = Depends(get_engine)):
    result = engine.sell_item(request.collection, request.currency, request.item_id, request.seller)
    return SellResponse(
        item_id=result.item_id, gross_out=result.gross_out, fee=result.fee, net_out=result.net_out
    )


@router.post("/swap/buy", response_model=BuyResponse)
async def buy_item(request: BuyItemRequest, engine: PoolRegistry = Depends(get_engine)):
    result = engine.buy_item(
        request.collection, request.currency, request.item_id, request.buyer, request.value
    )
    return BuyResponse(
        item_id=result.item_id,
        net_in=result.net_in,
        gross_in=result.gross_in,
        fee=result.fee,
        refund=result.refund,
    )


@router.post("/swap/batch-sell", response_model=BatchSellResponse)
async def batch_sell_items(request: BatchSellRequest, engine: PoolRegistry = Depends(get_engine)):
    result = engine.batch_sell_items(
        request.collection,
        request.currency,
        request.item_ids,
        request.seller,
        request.min_total_out,
    )
    return BatchSellResponse(
        item_ids=list(result.item_ids),
        total_gross=result.total_gross,
        total_fee=result.total_fee,
        total_net=result.total_net,
    )


# =============================================================================
# Royalties
# =============================================================================


@router.post("/royalties", status_code=204)
async def set_royalty(
    request: SetRoyaltyRequest, engine: PoolRegistry = Depends(get_engine)
) -> None:
    entries = [(e.recipient, e.basis_points) for e in request.entries]
    engine.set_royalty(
        request.caller, request.collection, request.item_id, entries, request.context
    )


@router.post("/royalties/admin", status_code=204)
async def admin_set_royalty(
    request: SetRoyaltyRequest, engine: PoolRegistry = Depends(get_engine)
) -> None:
    entries = [(e.recipient, e.basis_points) for e in request.entries]
    engine.admin_set_royalty(
        request.caller, request.collection, request.item_id, entries, request.context
    )


@router.get("/royalties/{collection}/{item_id}", response_model=RoyaltyResponse)
async def get_royalty(
    collection: str,
    item_id: int,
    sale_value: int = Query(alias="saleValue", ge=0),
    context: str | None = None,
    engine: PoolRegistry = Depends(get_engine),
):
    payments = engine.get_royalty(collection, item_id, sale_value, context)
    return RoyaltyResponse(
        payments=[RoyaltyPaymentModel(recipient=p.recipient, amount=p.amount) for p in payments]
    )


@router.get("/royalties/{collection}/{item_id}/info", response_model=RoyaltyPaymentModel)
async def royalty_info(
    collection: str,
    item_id: int,
    sale_value: int = Query(alias="saleValue", ge=0),
    engine: PoolRegistry = Depends(get_engine),
):
    """Single-recipient royalty view; the zero address when nothing is owed."""
    recipient, amount = engine.royalty_info(collection, item_id, sale_value)
    return RoyaltyPaymentModel(recipient=recipient, amount=amount)


@router.post("/royalties/credit", response_model=RoyaltyCreditResponse)
async def credit_royalty(request: CreditRoyaltyRequest, engine: PoolRegistry = Depends(get_engine)):
    credit = engine.credit_royalty_as_liquidity(
        request.collection,
        request.currency,
        request.item_id,
        request.amount,
        request.payer,
        value=request.value,
        context=request.context,
    )
    return RoyaltyCreditResponse(
        payments=[
            RoyaltyPaymentModel(recipient=p.recipient, amount=p.amount) for p in credit.payments
        ],
        reserve_credit=credit.reserve_credit,
    )


@router.post("/royalties/withdraw", response_model=AmountResponse)
async def withdraw_royalty(
    request: WithdrawRoyaltyRequest, engine: PoolRegistry = Depends(get_engine)
):
    return AmountResponse(amount=engine.withdraw_royalty(request.recipient, request.currency))


@router.get("/royalties/pending/{recipient}/{currency}", response_model=AmountResponse)
async def get_pending_royalty(
    recipient: str, currency: str, engine: PoolRegistry = Depends(get_engine)
):
    return AmountResponse(amount=engine.get_pending_royalty(recipient, currency))


@router.get("/collections/{collection}/stats", response_model=CollectionStatsResponse)
async def get_collection_stats(collection: str, engine: PoolRegistry = Depends(get_engine)):
    stats = engine.get_collection_stats(collection)
    return CollectionStatsResponse(
        total_trading_volume=stats.total_trading_volume,
        total_fees_collected=stats.total_fees_collected,
        trade_count=stats.trade_count,
    )


# =============================================================================
# Admin
# =============================================================================


@router.post("/admin/swap-fee", status_code=204)
async def set_swap_fee(
    request: SetSwapFeeRequest, engine: PoolRegistry = Depends(get_engine)
) -> None:
    engine.set_swap_fee_bps(request.caller, request.fee_bps)


@router.post("/admin/grant", status_code=204)
async def grant_admin(
    request: GrantAdminRequest, engine: PoolRegistry = Depends(get_engine)
) -> None:
    engine.grant_admin(request.caller, request.account)


@router.post("/admin/mint-currency", response_model=BalanceResponse)
async def mint_currency(request: MintCurrencyRequest, engine: PoolRegistry = Depends(get_engine)):
    """Seed an account with currency held by the engine's custody."""
    balance = engine.mint_currency(
        request.caller, request.currency, request.account, request.amount
    )
    return BalanceResponse(currency=request.currency, account=request.account, balance=balance)


@router.post("/admin/mint-items", status_code=204)
async def mint_items(
    request: MintItemsRequest, engine: PoolRegistry = Depends(get_engine)
) -> None:
    engine.mint_items(request.caller, request.collection, request.item_ids, request.owner)
