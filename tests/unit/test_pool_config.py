import pytest

from config.settings import Settings
from src.bc_common.errors import (
    InvalidArgumentError,
    InvalidFeeRateError,
    InvalidRecipientError,
    ZeroAmountError,
)
from src.bc_pool.domain.models import PoolConfig
from tests.factories import make_config


class TestPoolConfigValidate:
    def test_defaults_are_valid(self) -> None:
        make_config().validate()

    def test_allocations_must_partition_issuance(self) -> None:
        config = make_config(total_issuance=1)
        with pytest.raises(InvalidArgumentError, match="total issuance"):
            config.validate()

    def test_liquidity_fee_bound(self) -> None:
        with pytest.raises(InvalidFeeRateError):
            make_config(liquidity_fee_bps=501).validate()

    def test_trade_fee_below_one_hundred_percent(self) -> None:
        with pytest.raises(InvalidFeeRateError):
            make_config(trade_fee_bps=10_000).validate()

    def test_reserve_cap_positive(self) -> None:
        with pytest.raises(ZeroAmountError):
            make_config(reserve_cap=0).validate()

    def test_zero_fee_recipient(self) -> None:
        with pytest.raises(InvalidRecipientError):
            make_config(fee_recipient="0x" + "0" * 40).validate()


class TestFromSettings:
    def test_reads_settings(self) -> None:
        source = Settings(TRADE_FEE_BPS=250, RESERVE_CAP=50 * 10**18)
        config = PoolConfig.from_settings(source)
        assert config.trade_fee_bps == 250
        assert config.reserve_cap == 50 * 10**18
        assert config.trading_allocation + config.liquidity_allocation == config.total_issuance

    def test_invalid_settings_rejected(self) -> None:
        with pytest.raises(InvalidFeeRateError):
            PoolConfig.from_settings(Settings(LIQUIDITY_FEE_BPS=900))
