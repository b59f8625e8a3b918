"""
Tests for contract wrappers, gas parameters and transaction sending.
"""

import pytest
import requests
from web3.exceptions import ContractLogicError

from elastic_trading.contracts.erc20 import ERC20
from elastic_trading.contracts.pool import ElasticPool
from elastic_trading.contracts.position_manager import PositionManager
from elastic_trading.contracts.quoter import Quoter
from elastic_trading.contracts.ticks_fees_reader import TicksFeesReader
from elastic_trading.core.exceptions import (
    ApprovalFailedError,
    QuoteError,
    RpcUnavailableError,
    TransactionRevertedError,
)
from elastic_trading.pricing.encoding import MINT_PARAMS, MethodParameters, encode_multicall, function_selector
from elastic_trading.pricing.math import MIN_TICK
from elastic_trading.utils.gas import GasManager
from elastic_trading.utils.transactions import TransactionBuilder

SPENDER = "0x00000000000000000000000000000000000000aa"


class TestGasManager:

    def test_fixed_fees_from_config(self, manager):
        params = GasManager(manager).getGasParams("mint")
        assert params["maxFeePerGas"] == 100 * 10 ** 9
        assert params["maxPriorityFeePerGas"] == 100 * 10 ** 9
        assert params["gas"] == 800000

    def test_overrides(self, manager):
        params = GasManager(manager, maxFeePerGas=50, maxPriorityFeePerGas=80).getGasParams()
        assert params["maxFeePerGas"] == 50 * 10 ** 9
        # tip is capped at the max fee
        assert params["maxPriorityFeePerGas"] == 50 * 10 ** 9

    def test_estimate_falls_back_to_limit(self, manager, monkeypatch):
        def failing(tx):
            raise ContractLogicError("execution reverted")

        monkeypatch.setattr(manager, "estimate_gas", failing)
        assert GasManager(manager).estimateGas({"to": SPENDER}, "swap") == 400000


class TestERC20:

    def test_zero_amount_needs_no_approval(self, manager, chain, config):
        token = ERC20(manager, config.token0.address)
        assert token.approve(SPENDER, 0) is None
        assert chain.sent == []

    def test_sufficient_allowance_skips_approval(self, manager, chain, config):
        token = ERC20(manager, config.token0.address)
        chain.allowances[(token.address, manager.checksum(SPENDER))] = 10 ** 6
        assert token.approve(SPENDER, 10 ** 6) is None
        assert chain.sent == []

    def test_approves_exact_amount(self, manager, chain, config):
        token = ERC20(manager, config.token0.address)
        receipt = token.approve(SPENDER, 123456)
        assert receipt["status"] == 1
        assert len(chain.sent) == 1
        assert chain.sent[0]["approve"] == (manager.checksum(SPENDER), 123456)
        assert chain.sent[0]["maxFeePerGas"] == 100 * 10 ** 9
        assert token.allowance(SPENDER) == 123456

    def test_reverted_approval(self, manager, chain, config):
        token = ERC20(manager, config.token0.address)
        chain.reverting.add(token.address)
        with pytest.raises(ApprovalFailedError):
            token.approve(SPENDER, 1)


class TestTransactionBuilder:

    def test_eip1559_call(self, manager, config):
        builder = TransactionBuilder(manager)
        tx = builder.build_call(config.contracts.router, b"\x12\x34", operation_type="swap")
        assert tx["type"] == 2
        assert tx["chainId"] == 137
        assert tx["data"] == "0x1234"
        assert tx["gas"] == int(250000 * 1.2)

    def test_revert_raises_with_hash(self, manager, chain, config):
        builder = TransactionBuilder(manager)
        chain.reverting.add(manager.checksum(config.contracts.router))
        with pytest.raises(TransactionRevertedError) as exc_info:
            builder.send_call(config.contracts.router, b"\x12\x34", operation_type="swap")
        assert exc_info.value.tx_hash.startswith("0x")


class TestPoolAndReader:

    def test_pool_state(self, manager, chain):
        pool = ElasticPool(manager, chain.pool_address)
        state = pool.get_pool_state()
        assert state["current_tick"] == chain.tick
        assert state["sqrt_price_x96"] == chain.sqrt_price_x96
        assert pool.get_liquidity_state()["base_liquidity"] == chain.base_liquidity

    def test_transport_error_is_rpc_unavailable(self, manager, chain):
        chain.pool_error = requests.exceptions.ConnectionError("connection refused")
        with pytest.raises(RpcUnavailableError):
            ElasticPool(manager, chain.pool_address).get_pool_state()

    def test_ticks_previous(self, manager, chain, config):
        reader = TicksFeesReader(manager, config.contracts.ticks_fees_reader)
        assert reader.ticks_previous(chain.pool_address, -283380, -283020) == (MIN_TICK, MIN_TICK)

    def test_fees_owed(self, manager, chain, config):
        chain.fees_owed = (5, 7)
        reader = TicksFeesReader(manager, config.contracts.ticks_fees_reader)
        assert reader.get_total_fees_owed_to_position(config.contracts.position_manager,
                                                      chain.pool_address, 3) == (5, 7)


class TestQuoter:

    def test_revert_becomes_quote_error(self, manager, chain, config):
        chain.quote_error = ContractLogicError("execution reverted: SPL")
        quoter = Quoter(manager, config.contracts.quoter)
        with pytest.raises(QuoteError):
            quoter.quote_exact_input_single(config.token0, config.token1, 10 ** 6, 300)

    def test_transport_error_not_masked(self, manager, chain, config):
        chain.quote_error = RpcUnavailableError("down")
        quoter = Quoter(manager, config.contracts.quoter)
        with pytest.raises(RpcUnavailableError):
            quoter.quote_exact_input_single(config.token0, config.token1, 10 ** 6, 300)


class TestPositionManager:

    def test_minted_token_id_from_receipt(self, manager, chain, config):
        pm = PositionManager(manager, config.contracts.position_manager)
        calldata = function_selector(f"mint({MINT_PARAMS})") + b"\x00" * 32
        receipt = pm.submit(MethodParameters(calldata=encode_multicall([calldata])), "mint")
        assert pm.minted_token_id(receipt) == chain.minted_token_id

    def test_no_mint_log(self, manager, config):
        pm = PositionManager(manager, config.contracts.position_manager)
        assert pm.minted_token_id({"logs": []}) is None
