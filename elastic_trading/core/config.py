"""Configuration loading and management"""

import os
import json
import logging
from functools import lru_cache
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

from dotenv import load_dotenv

from ..pricing.types import FeeAmount, Token
from .exceptions import ConfigError

logger = logging.getLogger(__name__)


DEFAULT_RPC_URL = "https://polygon.kyberengineering.io"
DEFAULT_SUBGRAPH_URL = "https://api.thegraph.com/subgraphs/name/kybernetwork/kyberswap-elastic-matic"

# Elastic pool deployment bytecode hash used by the factory's CREATE2
ELASTIC_INIT_CODE_HASH = "0x00e263aaa3a2c06a89b53217a9e7aad7e15613490a72e0f95f303c4de2dc7045"

# Read-only ABIs are inside the package (not user-configurable)
PACKAGE_ABIS = Path(__file__).parent.parent / "abis.json"


@lru_cache(maxsize=None)
def _load_abis():
    with open(PACKAGE_ABIS) as f:
        return json.load(f)


def get_abi(name):
    """Get ABI by name (erc20, pool, ticks_fees_reader)"""
    abis = _load_abis()
    if name not in abis:
        raise ConfigError(f"Unknown ABI: {name}")
    return abis[name]


@dataclass(frozen=True)
class ElasticContracts:
    """Elastic contract addresses for one deployment (Polygon by default)"""

    factory: str = "0xC7a590291e07B9fe9E64b86c58fD8fC764308C4A"
    quoter: str = "0x4d47fd5a29904Dae0Ef51b1c450C9750F15D7856"
    router: str = "0xF9c2b5746c946EF883ab2660BbbB1f10A5bdeAb4"
    position_manager: str = "0xe222fBE074A436145b255442D919E4E3A6c6a480"
    ticks_fees_reader: str = "0x8Fd8Cb948965d9305999D767A02bf79833EADbB3"


def _default_token0():
    return Token(137, "0x2791bca1f2de4661ed88a30c99a7a9449aa84174", 6, "USDC.e", "USD Coin (PoS)")


def _default_token1():
    return Token(137, "0x1c954e8fe737f99f68fa1ccda3e51ebdb291948c", 18, "KNC", "KyberNetwork Crystal v2 (PoS)")


def _default_gas_limits():
    return {
        "approve": 65000,
        "mint": 800000,
        "addLiquidity": 600000,
        "removeLiquidity": 600000,
        "swap": 400000,
        "default": 800000,
    }


@dataclass(frozen=True)
class Config:
    """
    Run configuration, loaded once and passed into every workflow.

    All fields have defaults matching the Polygon USDC.e/KNC deployment, so
    `Config()` is usable as-is. `Config.load()` overlays `elastic.json` and
    environment variables on top of these defaults.
    """

    chain_id: int = 137
    rpc_url: str = DEFAULT_RPC_URL
    subgraph_url: str = DEFAULT_SUBGRAPH_URL
    contracts: ElasticContracts = field(default_factory=ElasticContracts)
    init_code_hash: str = ELASTIC_INIT_CODE_HASH
    token0: Token = field(default_factory=_default_token0)
    token1: Token = field(default_factory=_default_token1)
    fee_units: int = FeeAmount.EXOTIC
    slippage_bps: int = 50
    deadline_seconds: int = 600
    band_spacings: int = 3
    removal_fraction_bps: int = 1000
    budget_units: int = 1
    quote_amount_units: int = 1
    max_fee_per_gas_gwei: int = 100
    max_priority_fee_per_gas_gwei: int = 100
    gas_limits: dict = field(default_factory=_default_gas_limits)
    request_timeout: int = 30
    tx_timeout: int = 120

    def __post_init__(self):
        if not 0 < self.slippage_bps < 10000:
            raise ConfigError(f"slippage_bps must be in (0, 10000): {self.slippage_bps}")
        if not 0 < self.removal_fraction_bps <= 10000:
            raise ConfigError(f"removal_fraction_bps must be in (0, 10000]: {self.removal_fraction_bps}")
        if self.band_spacings <= 0:
            raise ConfigError(f"band_spacings must be positive: {self.band_spacings}")
        if self.deadline_seconds <= 0:
            raise ConfigError(f"deadline_seconds must be positive: {self.deadline_seconds}")
        if self.token0.address == self.token1.address:
            raise ConfigError("token0 and token1 must differ")

    @property
    def tick_spacing(self):
        """Tick spacing for the configured fee tier"""
        return FeeAmount(self.fee_units).tick_spacing

    def get_gas_limit(self, operation_type):
        return self.gas_limits.get(operation_type, self.gas_limits.get("default", 800000))

    # ── loading ────────────────────────────────────────────────────────

    @staticmethod
    def _find_config_dir():
        """Find config directory (None if there is no user config)"""
        env_path = os.getenv("ELASTIC_CONFIG_DIR")
        if env_path:
            path = Path(env_path)
            if path.exists():
                return path
            raise ConfigError(f"ELASTIC_CONFIG_DIR does not exist: {env_path}")

        locations = [
            Path.cwd() / "config",
            Path(__file__).parent.parent.parent / "config",
            Path.home() / ".elastic-trading" / "config",
        ]

        for path in locations:
            if (path / "elastic.json").exists():
                return path

        return None

    @classmethod
    def from_dict(cls, data, base=None):
        """
        Build a Config from a plain dict, starting from `base` (defaults if None).

        Token entries are dicts with address, decimals, symbol and optional name.
        """
        base = base or cls()
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

        overrides = dict(data)
        chain_id = overrides.get("chain_id", base.chain_id)

        for key in ("token0", "token1"):
            if key in overrides:
                token = overrides[key]
                try:
                    overrides[key] = Token(
                        chain_id,
                        token["address"],
                        int(token["decimals"]),
                        token["symbol"],
                        token.get("name"),
                    )
                except (KeyError, TypeError, ValueError) as e:
                    raise ConfigError(f"Invalid {key} definition: {e}")

        if "contracts" in overrides:
            try:
                overrides["contracts"] = replace(base.contracts, **overrides["contracts"])
            except TypeError as e:
                raise ConfigError(f"Invalid contracts section: {e}")

        if "gas_limits" in overrides:
            overrides["gas_limits"] = {**base.gas_limits, **overrides["gas_limits"]}

        if "fee_units" in overrides:
            try:
                FeeAmount(overrides["fee_units"])
            except ValueError:
                raise ConfigError(
                    f"Invalid fee tier: {overrides['fee_units']}. Valid: {[f.value for f in FeeAmount]}"
                )

        return replace(base, **overrides)

    @classmethod
    def load(cls, config_dir=None):
        """
        Load configuration: defaults, then elastic.json, then environment.

        Args:
            config_dir: Directory holding elastic.json (searched if None)
        """
        load_dotenv()
        load_dotenv("wallet.env")

        config = cls()

        directory = Path(config_dir) if config_dir else cls._find_config_dir()
        if directory:
            config_path = directory / "elastic.json"
            if config_path.exists():
                logger.debug("Loading config from %s", config_path)
                try:
                    with open(config_path) as f:
                        data = json.load(f)
                except json.JSONDecodeError as e:
                    raise ConfigError(f"Invalid JSON in {config_path}: {e}")
                config = cls.from_dict(data, base=config)

        env = {}
        if os.getenv("RPC_URL"):
            env["rpc_url"] = os.getenv("RPC_URL")
        if os.getenv("SUBGRAPH_URL"):
            env["subgraph_url"] = os.getenv("SUBGRAPH_URL")
        if env:
            config = replace(config, **env)

        return config
