"""Pool registry: the accounting engine behind every pool operation.

PoolRegistry indexes one PoolLedger per (collection, currency) pair and runs
each state-changing operation in three phases:

1. validate inputs and ownership against current state,
2. mutate the ledger, inventory, pending royalties and stats,
3. move currency and items through the custody collaborator.

Each operation runs inside `_transaction()`, which holds the reentrancy
guard and, if anything raises, replays undo journals kept by the touched
ledger, by the registry and by custody when it supports rollback.
Price-history notifications are sent only after the transaction commits,
and their failures are logged, not raised.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from functools import partial
from typing import Any

import structlog

from royalty_amm.amm.pricing import (
    BuyQuote,
    DiscreteInventoryPricing,
    SellQuote,
    validate_fee_bps,
)
from royalty_amm.config import DEFAULT_ENGINE_CONFIG, EngineConfig, RoyaltyPayout
from royalty_amm.constants import NATIVE_CURRENCY
from royalty_amm.custody import (
    CurrencyCustody,
    ItemCustody,
    PriceRecorder,
    SupportsMint,
    SupportsRollback,
)
from royalty_amm.errors import (
    AMMError,
    ArithmeticDegeneracy,
    ErrorReason,
    InvariantViolation,
    PoolAlreadyExists,
    PoolNotFound,
    PreconditionError,
    ReentrancyError,
    TransferFailed,
    Unauthorized,
)
from royalty_amm.models.types import normalize_address, require_address
from royalty_amm.pools import shares
from royalty_amm.pools.ledger import PoolKey, PoolLedger
from royalty_amm.pools.shares import Withdrawal
from royalty_amm.royalty import (
    ExternalRoyaltyResolver,
    RoyaltyPayment,
    RoyaltyResolver,
    RoyaltyTable,
)
from royalty_amm.safe_int import DivisionByZero, SafeIntError

logger = structlog.get_logger()


@dataclass
class CollectionStats:
    """Cumulative swap activity for one collection, across currencies."""

    total_trading_volume: int = 0
    total_fees_collected: int = 0
    trade_count: int = 0


@dataclass(frozen=True)
class PoolInfo:
    """Read-only view of a pool's ledger."""

    collection: str
    currency: str
    currency_reserve: int
    item_reserve_count: int
    total_shares: int
    accumulated_fees: int

    @classmethod
    def from_ledger(cls, ledger: PoolLedger) -> PoolInfo:
        return cls(
            collection=ledger.collection,
            currency=ledger.currency,
            currency_reserve=ledger.currency_reserve,
            item_reserve_count=ledger.item_reserve_count,
            total_shares=ledger.total_shares,
            accumulated_fees=ledger.accumulated_fees,
        )


@dataclass(frozen=True)
class PriceQuote:
    """Current prices for a pool. Fields are None where a swap is not possible."""

    collection: str
    currency: str
    fee_bps: int
    buy_price: int | None
    sell_price: int | None
    buy: BuyQuote | None
    sell: SellQuote | None


@dataclass(frozen=True)
class SellResult:
    item_id: int
    gross_out: int
    fee: int
    net_out: int


@dataclass(frozen=True)
class BuyResult:
    item_id: int
    net_in: int
    gross_in: int
    fee: int
    refund: int


@dataclass(frozen=True)
class BatchSellResult:
    item_ids: tuple[int, ...]
    total_gross: int
    total_fee: int
    total_net: int


@dataclass(frozen=True)
class RoyaltyCredit:
    """How a credited royalty payment was split."""

    payments: tuple[RoyaltyPayment, ...]
    reserve_credit: int


class PoolRegistry:
    """Registry and accounting engine for (collection, currency) item pools.

    Args:
        custody: Currency and item custody collaborator
        config: Engine configuration (fee rate, royalty strategy, admins)
        royalty_resolver: Royalty resolver; built from config when None
        price_recorder: Optional price-history sink
    """

    def __init__(
        self,
        custody: Any,
        config: EngineConfig | None = None,
        royalty_resolver: RoyaltyResolver | None = None,
        price_recorder: PriceRecorder | None = None,
    ) -> None:
        if not isinstance(custody, CurrencyCustody) or not isinstance(custody, ItemCustody):
            raise TypeError(f"Custody must implement currency and item transfers: {type(custody)}")

        self.config = config or DEFAULT_ENGINE_CONFIG
        self.custody = custody
        self.engine_address = self.config.engine_address.lower()
        self.pricing = DiscreteInventoryPricing(self.config.swap_fee_bps)
        self.royalties = royalty_resolver or RoyaltyResolver(RoyaltyTable(self.config.royalty_mode))
        self.price_recorder = price_recorder

        self._pools: dict[PoolKey, PoolLedger] = {}
        # Creation order, for stable enumeration
        self._pool_keys: list[PoolKey] = []
        self._pending_royalties: dict[tuple[str, str], int] = {}
        self._stats: dict[str, CollectionStats] = {}
        self._admins: set[str] = {normalize_address(a) for a in self.config.admins}
        self._locked = False
        # Undo steps for registry-level state touched by the current operation
        self._undo: list[Callable[[], None]] = []

    # =========================================================================
    # Transaction machinery
    # =========================================================================

    @contextmanager
    def _transaction(self, operation: str, key: PoolKey | None = None) -> Iterator[None]:
        """Run one operation atomically under the reentrancy guard.

        Rollback replays journals, so its cost follows what the operation
        changed and not the size of the pool or of custody.
        """
        if self._locked:
            raise ReentrancyError(f"{operation} called while another operation is in progress")
        self._locked = True
        self._undo = []
        journaled: list[Any] = []
        ledger: PoolLedger | None = None
        try:
            if isinstance(self.custody, SupportsRollback):
                self.custody.begin()
                journaled.append(self.custody)
            if key is not None and key in self._pools:
                ledger = self._pools[key]
                ledger.begin()
                journaled.append(ledger)

            yield

            if ledger is not None:
                ledger.check_touched()
            elif key is not None and key in self._pools:
                # Created by this operation
                self._pools[key].check_invariants()
        except Exception as err:
            for journal in reversed(journaled):
                journal.rollback()
            for undo in reversed(self._undo):
                undo()
            logger.warning(
                "operation_rolled_back",
                operation=operation,
                reason=err.reason.value if isinstance(err, AMMError) else type(err).__name__,
                error=str(err),
            )
            if isinstance(err, SafeIntError):
                raise self._map_arithmetic_error(err) from err
            raise
        else:
            for journal in journaled:
                journal.commit()
        finally:
            self._undo = []
            self._locked = False

    @staticmethod
    def _map_arithmetic_error(err: SafeIntError) -> AMMError:
        if isinstance(err, DivisionByZero):
            return ArithmeticDegeneracy(str(err), ErrorReason.ZERO_RESERVE)
        return InvariantViolation(str(err))

    def _remember(self, mapping: dict[Any, Any], key: Any) -> None:
        """Record how to put mapping[key] back the way it is now."""
        if key in mapping:
            self._undo.append(partial(mapping.__setitem__, key, mapping[key]))
        else:
            self._undo.append(partial(mapping.pop, key, None))

    # =========================================================================
    # Validation helpers
    # =========================================================================

    def _pool_key(self, collection: str, currency: str) -> PoolKey:
        return (
            require_address("collection", collection),
            require_address("currency", currency, allow_zero=True),
        )

    def _require_pool(self, key: PoolKey) -> PoolLedger:
        ledger = self._pools.get(key)
        if ledger is None:
            raise PoolNotFound(f"No pool for collection {key[0]} and currency {key[1]}")
        return ledger

    @staticmethod
    def _require_item_ids(item_ids: list[int]) -> list[int]:
        ids = list(item_ids)
        if not ids:
            raise PreconditionError("At least one item id is required", ErrorReason.EMPTY_ITEM_LIST)
        for item_id in ids:
            if isinstance(item_id, bool) or not isinstance(item_id, int) or item_id < 0:
                raise PreconditionError(f"Invalid item id: {item_id!r}", ErrorReason.INVALID_AMOUNT)
        if len(set(ids)) != len(ids):
            raise PreconditionError("Item ids must be unique", ErrorReason.DUPLICATE_ITEM)
        return ids

    def _require_owner(self, collection: str, item_id: int, owner: str) -> None:
        actual = self.custody.owner_of(collection, item_id)
        if actual != owner:
            raise PreconditionError(
                f"{owner} does not own item {item_id} of {collection}", ErrorReason.NOT_ITEM_OWNER
            )

    def _require_admin(self, caller: str) -> None:
        if not self.is_admin(caller):
            raise Unauthorized(f"{caller} lacks the admin capability")

    @staticmethod
    def _require_amount(amount: int, name: str = "amount") -> int:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            raise PreconditionError(f"Invalid {name}: {amount!r}", ErrorReason.INVALID_AMOUNT)
        return amount

    # =========================================================================
    # Custody interactions (always the last phase of an operation)
    # =========================================================================

    def _collect(self, currency: str, payer: str, amount: int) -> None:
        """Pull exactly amount of currency from payer into engine custody."""
        if amount == 0:
            return
        before = self.custody.balance_of(currency, self.engine_address)
        if not self.custody.transfer(currency, payer, self.engine_address, amount):
            raise TransferFailed(f"Could not collect {amount} of {currency} from {payer}")
        received = self.custody.balance_of(currency, self.engine_address) - before
        if received != amount:
            raise InvariantViolation(
                f"Declared {amount} but received {received} of {currency}",
                ErrorReason.RECEIPT_MISMATCH,
            )

    def _pay(self, currency: str, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        if not self.custody.transfer(currency, self.engine_address, recipient, amount):
            raise TransferFailed(f"Could not pay {amount} of {currency} to {recipient}")

    def _pull_item(self, collection: str, owner: str, item_id: int) -> None:
        if not self.custody.transfer_item(collection, owner, self.engine_address, item_id):
            raise TransferFailed(f"Could not take item {item_id} of {collection} from {owner}")

    def _send_item(self, collection: str, recipient: str, item_id: int) -> None:
        if not self.custody.transfer_item(collection, self.engine_address, recipient, item_id):
            raise TransferFailed(f"Could not send item {item_id} of {collection} to {recipient}")

    def _record_trade(self, collection: str, volume: int, fee: int, trades: int = 1) -> None:
        stats = self._stats.get(collection, CollectionStats())
        self._remember(self._stats, collection)
        self._stats[collection] = CollectionStats(
            total_trading_volume=stats.total_trading_volume + volume,
            total_fees_collected=stats.total_fees_collected + fee,
            trade_count=stats.trade_count + trades,
        )

    def _notify_price(self, collection: str, currency: str, price: int, volume: int) -> None:
        """Fire-and-forget price notification after a committed swap."""
        if self.price_recorder is None:
            return
        try:
            self.price_recorder.record(collection, currency, price, volume)
        except Exception:
            logger.exception(
                "price_recorder_failed",
                collection=collection[-8:],
                currency=currency[-8:],
                price=price,
            )

    # =========================================================================
    # Liquidity
    # =========================================================================

    def create_pool(
        self,
        collection: str,
        currency: str,
        item_ids: list[int],
        amount: int,
        provider: str,
    ) -> int:
        """Create the pool for (collection, currency) with its first items and currency.

        Returns:
            Shares issued to provider (1:1 with amount, zero if amount is 0)
        """
        key = self._pool_key(collection, currency)
        provider = require_address("provider", provider)
        ids = self._require_item_ids(item_ids)
        self._require_amount(amount)

        with self._transaction("create_pool", key):
            if key in self._pools:
                raise PoolAlreadyExists(f"Pool already exists for {key[0]} / {key[1]}")
            for item_id in ids:
                self._require_owner(key[0], item_id, provider)

            ledger = PoolLedger(collection=key[0], currency=key[1])
            for item_id in ids:
                ledger.inventory.insert(item_id)
            issued = shares.deposit(ledger, provider, amount) if amount > 0 else 0
            self._remember(self._pools, key)
            self._pools[key] = ledger
            self._pool_keys.append(key)
            self._undo.append(self._pool_keys.pop)

            for item_id in ids:
                self._pull_item(key[0], provider, item_id)
            self._collect(key[1], provider, amount)

        logger.info(
            "pool_created",
            collection=key[0][-8:],
            currency=key[1][-8:],
            items=len(ids),
            amount=amount,
            shares=issued,
        )
        return issued

    def add_liquidity(self, collection: str, currency: str, amount: int, provider: str) -> int:
        """Deposit currency into an existing pool for liquidity shares."""
        key = self._pool_key(collection, currency)
        provider = require_address("provider", provider)
        self._require_amount(amount)

        with self._transaction("add_liquidity", key):
            ledger = self._require_pool(key)
            issued = shares.deposit(ledger, provider, amount)
            self._collect(key[1], provider, amount)

        logger.info("liquidity_added", collection=key[0][-8:], amount=amount, shares=issued)
        return issued

    def deposit_items(
        self, collection: str, currency: str, item_ids: list[int], depositor: str
    ) -> int:
        """Add items to a pool's inventory. No shares are issued.

        Returns:
            The pool's item count after the deposit
        """
        key = self._pool_key(collection, currency)
        depositor = require_address("depositor", depositor)
        ids = self._require_item_ids(item_ids)

        with self._transaction("deposit_items", key):
            ledger = self._require_pool(key)
            for item_id in ids:
                self._require_owner(key[0], item_id, depositor)
            for item_id in ids:
                ledger.inventory.insert(item_id)
            for item_id in ids:
                self._pull_item(key[0], depositor, item_id)

        logger.info("items_deposited", collection=key[0][-8:], items=len(ids))
        return ledger.item_reserve_count

    def remove_liquidity(
        self, collection: str, currency: str, share_amount: int, provider: str
    ) -> Withdrawal:
        """Burn shares for the provider's slice of the reserve and fee pool."""
        key = self._pool_key(collection, currency)
        provider = require_address("provider", provider)
        self._require_amount(share_amount, "share amount")

        with self._transaction("remove_liquidity", key):
            ledger = self._require_pool(key)
            result = shares.withdraw(ledger, provider, share_amount)
            self._pay(key[1], provider, result.total)

        logger.info(
            "liquidity_removed",
            collection=key[0][-8:],
            shares=share_amount,
            currency_amount=result.currency_amount,
            fee_amount=result.fee_amount,
        )
        return result

    def withdraw_fees(self, collection: str, currency: str, provider: str) -> int:
        """Pay out the provider's share of the fee pool without burning shares."""
        key = self._pool_key(collection, currency)
        provider = require_address("provider", provider)

        with self._transaction("withdraw_fees", key):
            ledger = self._require_pool(key)
            fee_amount = shares.withdraw_fees_only(ledger, provider)
            self._pay(key[1], provider, fee_amount)

        logger.info("fees_withdrawn", collection=key[0][-8:], fee_amount=fee_amount)
        return fee_amount

    # =========================================================================
    # Swaps
    # =========================================================================

    def sell_item(self, collection: str, currency: str, item_id: int, seller: str) -> SellResult:
        """Sell one item into the pool for currency."""
        key = self._pool_key(collection, currency)
        seller = require_address("seller", seller)
        (item_id,) = self._require_item_ids([item_id])

        with self._transaction("sell_item", key):
            ledger = self._require_pool(key)
            if item_id in ledger.inventory:
                raise PreconditionError(
                    f"Item {item_id} already in pool", ErrorReason.ITEM_ALREADY_IN_POOL
                )
            self._require_owner(key[0], item_id, seller)
            quote = self.pricing.quote_sell(ledger.currency_reserve, ledger.item_reserve_count)

            ledger.debit_reserve(quote.gross_out)
            ledger.credit_fees(quote.fee)
            ledger.inventory.insert(item_id)
            self._record_trade(key[0], quote.gross_out, quote.fee)

            self._pull_item(key[0], seller, item_id)
            self._pay(key[1], seller, quote.net_out)

        logger.info(
            "item_sold",
            collection=key[0][-8:],
            item_id=item_id,
            gross_out=quote.gross_out,
            fee=quote.fee,
            net_out=quote.net_out,
        )
        self._notify_price(key[0], key[1], quote.gross_out, 1)
        return SellResult(
            item_id=item_id, gross_out=quote.gross_out, fee=quote.fee, net_out=quote.net_out
        )

    def buy_item(
        self,
        collection: str,
        currency: str,
        item_id: int,
        buyer: str,
        value: int | None = None,
    ) -> BuyResult:
        """Buy a specific item out of the pool.

        Args:
            value: Native currency attached to the call. Must cover the gross
                price; the excess is refunded. Not accepted for token pools,
                which are charged exactly the gross price.
        """
        key = self._pool_key(collection, currency)
        buyer = require_address("buyer", buyer)
        (item_id,) = self._require_item_ids([item_id])
        native = key[1] == NATIVE_CURRENCY
        if value is not None:
            self._require_amount(value, "value")
            if not native:
                raise PreconditionError(
                    "Native value sent to a token-currency pool", ErrorReason.INVALID_AMOUNT
                )

        with self._transaction("buy_item", key):
            ledger = self._require_pool(key)
            if item_id not in ledger.inventory:
                raise PreconditionError(f"Item {item_id} not in pool", ErrorReason.ITEM_NOT_IN_POOL)
            quote = self.pricing.quote_buy(ledger.currency_reserve, ledger.item_reserve_count)

            payment = quote.gross_in
            if native:
                payment = value if value is not None else quote.gross_in
                if payment < quote.gross_in:
                    raise PreconditionError(
                        f"Payment {payment} below price {quote.gross_in}",
                        ErrorReason.INSUFFICIENT_PAYMENT,
                    )
            refund = payment - quote.gross_in

            ledger.credit_reserve(quote.net_in)
            ledger.credit_fees(quote.fee)
            ledger.inventory.remove(item_id)
            self._record_trade(key[0], quote.gross_in, quote.fee)

            self._collect(key[1], buyer, payment)
            self._send_item(key[0], buyer, item_id)
            self._pay(key[1], buyer, refund)

        logger.info(
            "item_bought",
            collection=key[0][-8:],
            item_id=item_id,
            gross_in=quote.gross_in,
            fee=quote.fee,
            refund=refund,
        )
        self._notify_price(key[0], key[1], quote.gross_in, 1)
        return BuyResult(
            item_id=item_id,
            net_in=quote.net_in,
            gross_in=quote.gross_in,
            fee=quote.fee,
            refund=refund,
        )

    def batch_sell_items(
        self,
        collection: str,
        currency: str,
        item_ids: list[int],
        seller: str,
        min_total_out: int = 0,
    ) -> BatchSellResult:
        """Sell several items in one operation, priced exactly like sequential sells.

        The whole batch fails if the aggregate net output is below min_total_out.
        """
        key = self._pool_key(collection, currency)
        seller = require_address("seller", seller)
        ids = self._require_item_ids(item_ids)
        self._require_amount(min_total_out, "minimum output")

        with self._transaction("batch_sell_items", key):
            ledger = self._require_pool(key)
            for item_id in ids:
                if item_id in ledger.inventory:
                    raise PreconditionError(
                        f"Item {item_id} already in pool", ErrorReason.ITEM_ALREADY_IN_POOL
                    )
                self._require_owner(key[0], item_id, seller)
            batch = self.pricing.quote_batch_sell(
                ledger.currency_reserve, ledger.item_reserve_count, len(ids), min_total_out
            )

            for item_id, quote in zip(ids, batch.quotes, strict=True):
                ledger.debit_reserve(quote.gross_out)
                ledger.credit_fees(quote.fee)
                ledger.inventory.insert(item_id)
            self._record_trade(key[0], batch.total_gross, batch.total_fee, trades=len(ids))

            for item_id in ids:
                self._pull_item(key[0], seller, item_id)
            self._pay(key[1], seller, batch.total_net)

        logger.info(
            "items_batch_sold",
            collection=key[0][-8:],
            items=len(ids),
            total_gross=batch.total_gross,
            total_fee=batch.total_fee,
            total_net=batch.total_net,
        )
        self._notify_price(key[0], key[1], batch.total_gross // len(ids), len(ids))
        return BatchSellResult(
            item_ids=tuple(ids),
            total_gross=batch.total_gross,
            total_fee=batch.total_fee,
            total_net=batch.total_net,
        )

    # =========================================================================
    # Royalties
    # =========================================================================

    def set_royalty(
        self,
        caller: str,
        collection: str,
        item_id: int,
        entries: list[tuple[str, int]],
        context: str | None = None,
    ) -> None:
        """Set the royalty record of an item the caller currently owns."""
        collection = require_address("collection", collection)
        caller = require_address("caller", caller)
        (item_id,) = self._require_item_ids([item_id])
        with self._transaction("set_royalty"):
            self._require_owner(collection, item_id, caller)
            record = self.royalties.table.set(collection, item_id, entries, context)
        logger.info("royalty_set", collection=collection[-8:], item_id=item_id, entries=len(record))

    def admin_set_royalty(
        self,
        caller: str,
        collection: str,
        item_id: int,
        entries: list[tuple[str, int]],
        context: str | None = None,
    ) -> None:
        """Set any item's royalty record. Requires the admin capability."""
        collection = require_address("collection", collection)
        (item_id,) = self._require_item_ids([item_id])
        with self._transaction("admin_set_royalty"):
            self._require_admin(caller)
            record = self.royalties.table.set(collection, item_id, entries, context)
        logger.info(
            "royalty_set_by_admin", collection=collection[-8:], item_id=item_id, entries=len(record)
        )

    def get_royalty(
        self, collection: str, item_id: int, sale_value: int, context: str | None = None
    ) -> list[RoyaltyPayment]:
        """Royalty payments owed on a sale of sale_value."""
        collection = require_address("collection", collection)
        self._require_amount(sale_value, "sale value")
        return self.royalties.resolve(collection, item_id, sale_value, context)

    def royalty_info(self, collection: str, item_id: int, sale_value: int) -> tuple[str, int]:
        """Single-recipient royalty view: (recipient, amount)."""
        collection = require_address("collection", collection)
        self._require_amount(sale_value, "sale value")
        return self.royalties.royalty_info(collection, item_id, sale_value)

    def credit_royalty_as_liquidity(
        self,
        collection: str,
        currency: str,
        item_id: int,
        amount: int,
        payer: str,
        value: int | None = None,
        context: str | None = None,
    ) -> RoyaltyCredit:
        """Split a royalty payment between its beneficiaries and the pool.

        Beneficiary cuts accrue as pending royalties (or are paid straight
        away in push mode). The remainder is added to the currency reserve
        without minting shares, so it accrues to current providers pro rata.

        Args:
            value: For native currency, the value attached to the call; it
                must equal amount.
        """
        key = self._pool_key(collection, currency)
        payer = require_address("payer", payer)
        (item_id,) = self._require_item_ids([item_id])
        self._require_amount(amount)
        if amount == 0:
            raise PreconditionError("Royalty amount must be positive", ErrorReason.INVALID_AMOUNT)
        if value is not None and (key[1] != NATIVE_CURRENCY or value != amount):
            raise InvariantViolation(
                f"Declared {amount} but attached {value}", ErrorReason.RECEIPT_MISMATCH
            )

        push = self.config.royalty_payout is RoyaltyPayout.PUSH
        with self._transaction("credit_royalty_as_liquidity", key):
            ledger = self._require_pool(key)
            payments = [
                p for p in self.royalties.resolve(key[0], item_id, amount, context) if p.amount > 0
            ]
            distributed = sum(p.amount for p in payments)
            remainder = amount - distributed

            ledger.credit_reserve(remainder)
            if not push:
                for payment in payments:
                    pending_key = (payment.recipient, key[1])
                    self._remember(self._pending_royalties, pending_key)
                    self._pending_royalties[pending_key] = (
                        self._pending_royalties.get(pending_key, 0) + payment.amount
                    )

            self._collect(key[1], payer, amount)
            if push:
                for payment in payments:
                    self._pay(key[1], payment.recipient, payment.amount)

        logger.info(
            "royalty_credited",
            collection=key[0][-8:],
            item_id=item_id,
            amount=amount,
            distributed=distributed,
            reserve_credit=remainder,
            payout=self.config.royalty_payout.value,
        )
        return RoyaltyCredit(payments=tuple(payments), reserve_credit=remainder)

    def withdraw_royalty(self, recipient: str, currency: str) -> int:
        """Pay out and zero the recipient's full pending balance in currency."""
        recipient = require_address("recipient", recipient)
        currency = require_address("currency", currency, allow_zero=True)

        with self._transaction("withdraw_royalty"):
            amount = self._pending_royalties.get((recipient, currency), 0)
            if amount == 0:
                raise PreconditionError(
                    f"No pending royalties for {recipient}", ErrorReason.NOTHING_TO_WITHDRAW
                )
            self._remember(self._pending_royalties, (recipient, currency))
            self._pending_royalties[(recipient, currency)] = 0
            self._pay(currency, recipient, amount)

        logger.info(
            "royalty_withdrawn", recipient=recipient[-8:], currency=currency[-8:], amount=amount
        )
        return amount

    # =========================================================================
    # Admin configuration
    # =========================================================================

    def is_admin(self, account: str) -> bool:
        return isinstance(account, str) and normalize_address(account) in self._admins

    def grant_admin(self, caller: str, account: str) -> None:
        account = require_address("account", account)
        with self._transaction("grant_admin"):
            self._require_admin(caller)
            if account not in self._admins:
                self._undo.append(partial(self._admins.discard, account))
            self._admins.add(account)
        logger.info("admin_granted", account=account[-8:])

    def set_swap_fee_bps(self, caller: str, fee_bps: int) -> None:
        """Change the swap fee for all pools."""
        with self._transaction("set_swap_fee_bps"):
            self._require_admin(caller)
            validate_fee_bps(fee_bps)
            old = self.pricing.fee_bps
            self._undo.append(partial(setattr, self, "pricing", self.pricing))
            self.pricing = DiscreteInventoryPricing(fee_bps)
        logger.info("swap_fee_updated", old_fee_bps=old, new_fee_bps=fee_bps)

    def mint_currency(self, caller: str, currency: str, account: str, amount: int) -> int:
        """Create currency for account in custody. Requires the admin capability.

        Only available when custody supports minting, as the in-memory
        custody behind the HTTP service does.

        Returns:
            The account's balance after minting
        """
        currency = require_address("currency", currency, allow_zero=True)
        account = require_address("account", account)
        self._require_amount(amount)
        with self._transaction("mint_currency"):
            self._require_admin(caller)
            self._require_minter().mint(currency, account, amount)
        logger.info("currency_minted", currency=currency[-8:], account=account[-8:], amount=amount)
        return self.custody.balance_of(currency, account)

    def mint_items(self, caller: str, collection: str, item_ids: list[int], owner: str) -> None:
        """Create new items owned by owner in custody. Requires the admin capability."""
        collection = require_address("collection", collection)
        owner = require_address("owner", owner)
        ids = self._require_item_ids(item_ids)
        with self._transaction("mint_items"):
            self._require_admin(caller)
            minter = self._require_minter()
            for item_id in ids:
                if self.custody.owner_of(collection, item_id) is not None:
                    raise PreconditionError(
                        f"Item {item_id} of {collection} already exists", ErrorReason.ITEM_EXISTS
                    )
                minter.mint_item(collection, item_id, owner)
        logger.info("items_minted", collection=collection[-8:], owner=owner[-8:], items=len(ids))

    def _require_minter(self) -> SupportsMint:
        if not isinstance(self.custody, SupportsMint):
            raise PreconditionError(
                "Custody does not support minting", ErrorReason.MINT_UNSUPPORTED
            )
        return self.custody

    def set_royalty_resolver(
        self, caller: str, resolver: ExternalRoyaltyResolver | None, trusted: bool
    ) -> None:
        """Configure (or clear, with None) the external royalty resolver."""
        with self._transaction("set_royalty_resolver"):
            self._require_admin(caller)
            self.royalties.configure_delegate(resolver, trusted)
        logger.info(
            "royalty_resolver_updated",
            configured=resolver is not None,
            trusted=self.royalties.delegate_trusted,
        )

    # =========================================================================
    # Views
    # =========================================================================

    @property
    def swap_fee_bps(self) -> int:
        return self.pricing.fee_bps

    @property
    def pool_count(self) -> int:
        return len(self._pool_keys)

    def has_pool(self, collection: str, currency: str) -> bool:
        return self._pool_key(collection, currency) in self._pools

    def get_pool_info(self, collection: str, currency: str) -> PoolInfo:
        return PoolInfo.from_ledger(self._require_pool(self._pool_key(collection, currency)))

    def get_pools(self, offset: int = 0, limit: int | None = None) -> list[PoolInfo]:
        """Pools in creation order."""
        end = None if limit is None else offset + limit
        keys = self._pool_keys[offset:end]
        return [PoolInfo.from_ledger(self._pools[key]) for key in keys]

    def get_pool_items(self, collection: str, currency: str) -> list[int]:
        return self._require_pool(self._pool_key(collection, currency)).inventory.item_ids

    def get_provider_shares(self, collection: str, currency: str, provider: str) -> int:
        ledger = self._require_pool(self._pool_key(collection, currency))
        return ledger.shares_of(normalize_address(provider))

    def get_price_quote(self, collection: str, currency: str) -> PriceQuote:
        """Current pre-fee prices and full buy/sell quotes for a pool."""
        ledger = self._require_pool(self._pool_key(collection, currency))
        reserve, count = ledger.currency_reserve, ledger.item_reserve_count
        buy_price, sell_price = self.pricing.spot_prices(reserve, count)

        buy: BuyQuote | None
        sell: SellQuote | None
        try:
            buy = self.pricing.quote_buy(reserve, count)
        except ArithmeticDegeneracy:
            buy = None
        try:
            sell = self.pricing.quote_sell(reserve, count)
        except ArithmeticDegeneracy:
            sell = None

        return PriceQuote(
            collection=ledger.collection,
            currency=ledger.currency,
            fee_bps=self.pricing.fee_bps,
            buy_price=buy_price,
            sell_price=sell_price,
            buy=buy,
            sell=sell,
        )

    def get_pending_royalty(self, recipient: str, currency: str) -> int:
        return self._pending_royalties.get(
            (normalize_address(recipient), normalize_address(currency)), 0
        )

    def get_collection_stats(self, collection: str) -> CollectionStats:
        stats = self._stats.get(require_address("collection", collection))
        return replace(stats) if stats is not None else CollectionStats()

    def total_pending_royalties(self, currency: str) -> int:
        currency = currency.lower()
        return sum(amount for (_, c), amount in self._pending_royalties.items() if c == currency)

    def currency_accounted(self, currency: str) -> int:
        """Currency the engine owes: reserves, fee pools and pending royalties."""
        currency = currency.lower()
        pooled = sum(
            ledger.currency_reserve + ledger.accumulated_fees
            for (_, c), ledger in self._pools.items()
            if c == currency
        )
        return pooled + self.total_pending_royalties(currency)
