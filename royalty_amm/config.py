"""Engine configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum

from royalty_amm.constants import DEFAULT_ENGINE_ADDRESS, DEFAULT_SWAP_FEE_BPS
from royalty_amm.royalty.table import RoyaltyMode


class RoyaltyPayout(str, Enum):
    """What happens to a recipient's cut when royalties are credited."""

    PENDING = "pending"  # accrue, recipient withdraws later
    PUSH = "push"  # transfer immediately


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration for the pool engine.

    Attributes:
        engine_address: Account the engine holds currency and items under
        swap_fee_bps: Swap fee in basis points (default: 300 = 3%)
        royalty_mode: Single- or multi-recipient royalty records
        royalty_payout: Accrue royalties as pending balances or push them
        admins: Accounts holding the admin capability at start-up
    """

    engine_address: str = DEFAULT_ENGINE_ADDRESS
    swap_fee_bps: int = DEFAULT_SWAP_FEE_BPS
    royalty_mode: RoyaltyMode = RoyaltyMode.MULTI
    royalty_payout: RoyaltyPayout = RoyaltyPayout.PENDING
    admins: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from AMM_* environment variables.

        - AMM_ENGINE_ADDRESS: engine custody account
        - AMM_SWAP_FEE_BPS: swap fee in basis points (default: 300)
        - AMM_ROYALTY_MODE: "single" or "multi" (default: multi)
        - AMM_ROYALTY_PAYOUT: "pending" or "push" (default: pending)
        - AMM_ADMINS: comma-separated admin accounts
        """
        admins = os.environ.get("AMM_ADMINS", "")
        return cls(
            engine_address=os.environ.get("AMM_ENGINE_ADDRESS", DEFAULT_ENGINE_ADDRESS).lower(),
            swap_fee_bps=int(os.environ.get("AMM_SWAP_FEE_BPS", str(DEFAULT_SWAP_FEE_BPS))),
            royalty_mode=RoyaltyMode(os.environ.get("AMM_ROYALTY_MODE", "multi").lower()),
            royalty_payout=RoyaltyPayout(os.environ.get("AMM_ROYALTY_PAYOUT", "pending").lower()),
            admins=frozenset(a.strip().lower() for a in admins.split(",") if a.strip()),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
