"""
Tests for Config defaults, validation and loading.
"""

import json

import pytest

from elastic_trading.core.config import Config, get_abi
from elastic_trading.core.exceptions import ConfigError
from elastic_trading.pricing.types import FeeAmount


class TestDefaults:

    def test_polygon_usdc_knc(self):
        config = Config()
        assert config.chain_id == 137
        assert config.token0.symbol == "USDC.e"
        assert config.token1.symbol == "KNC"
        assert config.fee_units == FeeAmount.EXOTIC
        assert config.tick_spacing == 60

    def test_operation_defaults(self):
        config = Config()
        assert config.slippage_bps == 50
        assert config.deadline_seconds == 600
        assert config.band_spacings == 3
        assert config.removal_fraction_bps == 1000
        assert config.max_fee_per_gas_gwei == 100
        assert config.max_priority_fee_per_gas_gwei == 100

    def test_gas_limit_fallback(self):
        config = Config()
        assert config.get_gas_limit("approve") == 65000
        assert config.get_gas_limit("unknown") == config.gas_limits["default"]


class TestValidation:

    @pytest.mark.parametrize("bps", [0, 10000, -5])
    def test_slippage_bounds(self, bps):
        with pytest.raises(ConfigError):
            Config(slippage_bps=bps)

    def test_removal_fraction_bounds(self):
        with pytest.raises(ConfigError):
            Config(removal_fraction_bps=0)
        assert Config(removal_fraction_bps=10000).removal_fraction_bps == 10000

    def test_same_tokens_rejected(self):
        config = Config()
        with pytest.raises(ConfigError):
            Config(token0=config.token0, token1=config.token0)


class TestFromDict:

    def test_overrides(self):
        config = Config.from_dict({
            "slippage_bps": 100,
            "fee_units": 40,
            "gas_limits": {"mint": 900000},
            "contracts": {"router": "0x0000000000000000000000000000000000000001"},
        })
        assert config.slippage_bps == 100
        assert config.tick_spacing == 8
        assert config.get_gas_limit("mint") == 900000
        assert config.get_gas_limit("approve") == 65000
        assert config.contracts.router.endswith("01")
        assert config.contracts.quoter == Config().contracts.quoter

    def test_token_definition(self):
        config = Config.from_dict({
            "token1": {"address": "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270", "decimals": 18, "symbol": "WMATIC"}
        })
        assert config.token1.symbol == "WMATIC"
        assert config.token1.decimals == 18
        assert config.token1.chain_id == 137

    def test_unknown_key(self):
        with pytest.raises(ConfigError):
            Config.from_dict({"slipage_bps": 10})

    def test_invalid_fee_tier(self):
        with pytest.raises(ConfigError):
            Config.from_dict({"fee_units": 3000})

    def test_incomplete_token(self):
        with pytest.raises(ConfigError):
            Config.from_dict({"token0": {"address": "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270"}})

    def test_unknown_contract(self):
        with pytest.raises(ConfigError):
            Config.from_dict({"contracts": {"vault": "0x0000000000000000000000000000000000000001"}})


class TestLoad:

    def test_file_and_environment(self, tmp_path, monkeypatch):
        (tmp_path / "elastic.json").write_text(json.dumps({"slippage_bps": 75, "budget_units": 2}))
        monkeypatch.setenv("RPC_URL", "http://localhost:8545")
        monkeypatch.delenv("SUBGRAPH_URL", raising=False)

        config = Config.load(tmp_path)
        assert config.slippage_bps == 75
        assert config.budget_units == 2
        assert config.rpc_url == "http://localhost:8545"

    def test_invalid_json(self, tmp_path):
        (tmp_path / "elastic.json").write_text("{not json")
        with pytest.raises(ConfigError):
            Config.load(tmp_path)

    def test_missing_env_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ELASTIC_CONFIG_DIR", str(tmp_path / "missing"))
        with pytest.raises(ConfigError):
            Config.load()


class TestAbis:

    def test_packaged_abis(self):
        names = {entry["name"] for entry in get_abi("pool")}
        assert {"getPoolState", "getLiquidityState", "swapFeeUnits"} <= names
        assert {entry["name"] for entry in get_abi("ticks_fees_reader")} == {
            "getNearestInitializedTicks", "getTotalFeesOwedToPosition"
        }

    def test_unknown_abi(self):
        with pytest.raises(ConfigError):
            get_abi("nfpm")
