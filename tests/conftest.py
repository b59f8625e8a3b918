"""
Shared fixtures: an in-memory Elastic deployment behind a Web3Manager-shaped fake.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from eth_abi import encode
from web3 import Web3

from elastic_trading.contracts.position_manager import TRANSFER_TOPIC
from elastic_trading.core.config import Config
from elastic_trading.operations.liquidity import LiquidityManager
from elastic_trading.operations.positions import PositionIndex
from elastic_trading.operations.swap import SwapManager
from elastic_trading.pricing.address import compute_pool_address
from elastic_trading.pricing.encoding import MINT_PARAMS, QUOTE_SINGLE_OUTPUT, function_selector
from elastic_trading.pricing.math import MIN_TICK, get_sqrt_ratio_at_tick

OWNER = "0x1234567890123456789012345678901234567890"

# KNC ~ 0.50 USDC.e
POOL_TICK = -283200

MINT_SELECTOR = function_selector(f"mint({MINT_PARAMS})")


def _call(fn):
    """Contract function stub: functions.x(*args).call() -> fn(*args)"""
    return lambda *args: SimpleNamespace(call=lambda: fn(*args))


class FakeChain:
    """State of the pool, tokens and helper contracts seen by FakeManager"""

    def __init__(self, config):
        self.config = config
        self.pool_address = compute_pool_address(
            config.contracts.factory, config.token0, config.token1, config.fee_units, config.init_code_hash
        )
        self.deployed = {self.pool_address}
        self.tick = POOL_TICK
        self.sqrt_price_x96 = get_sqrt_ratio_at_tick(POOL_TICK)
        self.base_liquidity = 10 ** 20
        self.reinvest_liquidity = 10 ** 15
        self.tick_hint = MIN_TICK
        self.fees_owed = (0, 0)
        self.allowances = {}
        self.quote_output = None
        self.quote_error = None
        self.pool_error = None
        self.reverting = set()
        self.minted_token_id = 42
        self.sent = []
        self.receipts = {}

    def read_pool_state(self):
        if self.pool_error:
            raise self.pool_error
        return self.sqrt_price_x96, self.tick, self.tick, False

    def sent_to(self, address):
        return [tx for tx in self.sent if tx["to"] == Web3.to_checksum_address(address)]


class FakeManager:
    """Stands in for Web3Manager with a signer"""

    def __init__(self, config, chain):
        self.config = config
        self.chain = chain
        self.account = Mock(address=OWNER)

    @property
    def address(self):
        return OWNER

    @property
    def chain_id(self):
        return self.config.chain_id

    def checksum(self, address):
        return Web3.to_checksum_address(address)

    def get_nonce(self, address=None):
        return len(self.chain.sent)

    def has_code(self, address):
        return Web3.to_checksum_address(address) in self.chain.deployed

    def get_contract(self, address, abi_name):
        address = Web3.to_checksum_address(address)
        chain = self.chain

        if abi_name == "erc20":
            functions = SimpleNamespace(
                allowance=_call(lambda owner, spender: chain.allowances.get((address, spender), 0)),
                approve=lambda spender, amount: SimpleNamespace(
                    build_transaction=lambda tx: {
                        **tx, "to": address, "data": "0x095ea7b3", "approve": (spender, amount)
                    }
                ),
            )
        elif abi_name == "pool":
            functions = SimpleNamespace(
                getPoolState=_call(chain.read_pool_state),
                getLiquidityState=_call(lambda: (chain.base_liquidity, chain.reinvest_liquidity, 0)),
                swapFeeUnits=_call(lambda: int(chain.config.fee_units)),
            )
        elif abi_name == "ticks_fees_reader":
            functions = SimpleNamespace(
                getNearestInitializedTicks=_call(lambda pool, tick: (chain.tick_hint, -chain.tick_hint)),
                getTotalFeesOwedToPosition=_call(lambda pm, pool, token_id: chain.fees_owed),
            )
        else:
            raise ValueError(abi_name)

        return SimpleNamespace(address=address, functions=functions)

    def call(self, to, data):
        assert Web3.to_checksum_address(to) == Web3.to_checksum_address(self.config.contracts.quoter)
        if self.chain.quote_error:
            raise self.chain.quote_error
        return encode([QUOTE_SINGLE_OUTPUT], [self.chain.quote_output])

    def estimate_gas(self, tx):
        return 250000

    def send_transaction(self, tx):
        chain = self.chain
        tx_hash = Web3.keccak(text=f"tx-{len(chain.sent)}")
        chain.sent.append(tx)

        status = 0 if tx["to"] in chain.reverting else 1
        logs = []
        if status == 1 and "approve" in tx:
            spender, amount = tx["approve"]
            chain.allowances[(tx["to"], spender)] = amount
        if (
            status == 1
            and tx["to"] == Web3.to_checksum_address(self.config.contracts.position_manager)
            and tx["data"][2:10] == MINT_SELECTOR.hex()
        ):
            logs.append({
                "address": tx["to"],
                "topics": [
                    TRANSFER_TOPIC,
                    (0).to_bytes(32, "big"),
                    bytes.fromhex(OWNER[2:]).rjust(32, b"\x00"),
                    chain.minted_token_id.to_bytes(32, "big"),
                ],
            })

        chain.receipts[tx_hash] = {
            "status": status,
            "transactionHash": tx_hash,
            "blockNumber": 1000 + len(chain.sent),
            "gasUsed": 210000,
            "logs": logs,
        }
        return tx_hash

    def wait_for_receipt(self, tx_hash):
        return self.chain.receipts[tx_hash]


class FakeSession:
    """requests.Session stand-in for the subgraph"""

    def __init__(self):
        self.positions = []
        self.payload = None
        self.error = None
        self.queries = []

    def post(self, url, json=None, timeout=None):
        self.queries.append(json["query"])
        if self.error:
            raise self.error
        response = Mock()
        response.raise_for_status = Mock()
        payload = self.payload if self.payload is not None else {"data": {"positions": self.positions}}
        response.json = Mock(return_value=payload)
        return response


def position_item(position_id, liquidity, tick_lower, tick_upper):
    """Subgraph position entry (numbers are strings, as the subgraph returns them)"""
    return {
        "id": str(position_id),
        "liquidity": str(liquidity),
        "tickLower": {"tickIdx": str(tick_lower)},
        "tickUpper": {"tickIdx": str(tick_upper)},
    }


@pytest.fixture
def config():
    return Config()


@pytest.fixture
def chain(config):
    return FakeChain(config)


@pytest.fixture
def manager(config, chain):
    return FakeManager(config, chain)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def liquidity(manager, config, session):
    return LiquidityManager(manager, config, PositionIndex(config, session))


@pytest.fixture
def swaps(manager, config):
    return SwapManager(manager, config)
