"""Tests for engine configuration."""

import pytest

from royalty_amm.config import DEFAULT_ENGINE_CONFIG, EngineConfig, RoyaltyPayout
from royalty_amm.constants import DEFAULT_ENGINE_ADDRESS, DEFAULT_SWAP_FEE_BPS
from royalty_amm.royalty import RoyaltyMode
from tests.helpers import ADMIN, ALICE

ENV_VARS = (
    "AMM_ENGINE_ADDRESS",
    "AMM_SWAP_FEE_BPS",
    "AMM_ROYALTY_MODE",
    "AMM_ROYALTY_PAYOUT",
    "AMM_ADMINS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDefaults:
    def test_default_config(self):
        assert DEFAULT_ENGINE_CONFIG.swap_fee_bps == DEFAULT_SWAP_FEE_BPS == 300
        assert DEFAULT_ENGINE_CONFIG.royalty_mode is RoyaltyMode.MULTI
        assert DEFAULT_ENGINE_CONFIG.royalty_payout is RoyaltyPayout.PENDING
        assert DEFAULT_ENGINE_CONFIG.admins == frozenset()

    def test_config_is_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_ENGINE_CONFIG.swap_fee_bps = 1


class TestFromEnv:
    def test_empty_env_gives_defaults(self, clean_env):
        assert EngineConfig.from_env() == EngineConfig()

    def test_reads_every_variable(self, clean_env):
        clean_env.setenv("AMM_ENGINE_ADDRESS", ALICE.upper().replace("0X", "0x"))
        clean_env.setenv("AMM_SWAP_FEE_BPS", "250")
        clean_env.setenv("AMM_ROYALTY_MODE", "SINGLE")
        clean_env.setenv("AMM_ROYALTY_PAYOUT", "push")
        clean_env.setenv("AMM_ADMINS", f" {ADMIN.upper().replace('0X', '0x')} , {ALICE},")

        config = EngineConfig.from_env()
        assert config.engine_address == ALICE
        assert config.swap_fee_bps == 250
        assert config.royalty_mode is RoyaltyMode.SINGLE
        assert config.royalty_payout is RoyaltyPayout.PUSH
        assert config.admins == frozenset({ADMIN, ALICE})

    def test_engine_address_default(self, clean_env):
        assert EngineConfig.from_env().engine_address == DEFAULT_ENGINE_ADDRESS

    def test_unknown_mode_rejected(self, clean_env):
        clean_env.setenv("AMM_ROYALTY_MODE", "several")
        with pytest.raises(ValueError):
            EngineConfig.from_env()

    def test_non_integer_fee_rejected(self, clean_env):
        clean_env.setenv("AMM_SWAP_FEE_BPS", "3%")
        with pytest.raises(ValueError):
            EngineConfig.from_env()
