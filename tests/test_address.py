"""
Tests for CREATE2 pool address derivation and token ordering.
"""

import pytest

from elastic_trading.core.config import Config
from elastic_trading.pricing.address import compute_pool_address
from elastic_trading.pricing.types import FeeAmount, Token, sort_tokens

# Same derivation as Uniswap V3 (keccak(abi.encode(token0, token1, fee))), which
# has well known mainnet pool addresses to check against.
UNISWAP_V3_FACTORY = "0x1F98431c8aD98523631AE4a59f267346ea31F984"
UNISWAP_V3_INIT_CODE_HASH = "0xe34f199b19b2b4f47f68442619d555527d244f78a3297ea89325f843f87b8b54"
USDC_MAINNET = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"
WETH_MAINNET = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"


class TestKnownAddresses:

    def test_usdc_weth_005(self):
        address = compute_pool_address(UNISWAP_V3_FACTORY, USDC_MAINNET, WETH_MAINNET, 500,
                                       UNISWAP_V3_INIT_CODE_HASH)
        assert address == "0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640"

    def test_usdc_weth_03(self):
        address = compute_pool_address(UNISWAP_V3_FACTORY, WETH_MAINNET, USDC_MAINNET, 3000,
                                       UNISWAP_V3_INIT_CODE_HASH)
        assert address == "0x8ad599c3A0ff1De082011EFDDc58f1908eb6e6D8"


class TestElasticPool:

    def setup_method(self):
        self.config = Config()

    def derive(self, token_a, token_b, fee):
        contracts = self.config.contracts
        return compute_pool_address(contracts.factory, token_a, token_b, fee, self.config.init_code_hash)

    def test_order_independent(self):
        forward = self.derive(self.config.token0, self.config.token1, FeeAmount.EXOTIC)
        backward = self.derive(self.config.token1, self.config.token0, FeeAmount.EXOTIC)
        assert forward == backward

    def test_fee_tier_changes_address(self):
        addresses = {self.derive(self.config.token0, self.config.token1, fee) for fee in FeeAmount}
        assert len(addresses) == len(FeeAmount)

    def test_checksummed(self):
        address = self.derive(self.config.token0, self.config.token1, FeeAmount.EXOTIC)
        assert address.startswith("0x") and len(address) == 42
        assert address != address.lower()

    def test_identical_tokens_rejected(self):
        with pytest.raises(ValueError):
            self.derive(self.config.token0, self.config.token0, FeeAmount.EXOTIC)


class TestTokenOrdering:

    def test_sort_by_address_value(self):
        usdc = Token(137, "0x2791bca1f2de4661ed88a30c99a7a9449aa84174", 6, "USDC.e")
        knc = Token(137, "0x1c954e8fe737f99f68fa1ccda3e51ebdb291948c", 18, "KNC")
        assert knc.sorts_before(usdc)
        assert sort_tokens(usdc, knc) == (knc, usdc)

    def test_equality_ignores_metadata(self):
        a = Token(137, "0x1c954e8fe737f99f68fa1ccda3e51ebdb291948c", 18, "KNC")
        b = Token(137, "0x" + "1c954e8fe737f99f68fa1ccda3e51ebdb291948c".upper(), 18, "KNC v2", "Kyber")
        assert a == b
        assert hash(a) == hash(b)

    def test_address_is_checksummed(self):
        token = Token(137, "0x1c954e8fe737f99f68fa1ccda3e51ebdb291948c", 18)
        assert token.address.lower() == "0x1c954e8fe737f99f68fa1ccda3e51ebdb291948c"
        assert token.address != token.address.lower()
