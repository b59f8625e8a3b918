"""Pool discovery and state snapshots"""

import logging

from ..contracts.pool import ElasticPool
from ..core.exceptions import PoolNotFoundError
from ..pricing.address import compute_pool_address
from ..pricing.types import PoolState

logger = logging.getLogger(__name__)


class PoolStateReader:
    """Derives the configured pool's address and reads its on-chain state"""

    def __init__(self, manager, config=None):
        """
        Args:
            manager: Web3Manager instance
            config: Config instance (manager.config if None)
        """
        self.manager = manager
        self.config = config or manager.config

    def pool_address(self, token_a=None, token_b=None, fee_units=None):
        """CREATE2 address of the pool for a pair (configured pair if omitted)"""
        return compute_pool_address(
            self.config.contracts.factory,
            token_a or self.config.token0,
            token_b or self.config.token1,
            fee_units if fee_units is not None else self.config.fee_units,
            self.config.init_code_hash,
        )

    def read_pool_state(self, address=None, token_a=None, token_b=None, fee_units=None):
        """
        Snapshot of the pool's price, tick and liquidity.

        Raises:
            PoolNotFoundError: If the address holds no initialized pool of this fee tier
        """
        token_a = token_a or self.config.token0
        token_b = token_b or self.config.token1
        fee_units = fee_units if fee_units is not None else self.config.fee_units
        address = address or self.pool_address(token_a, token_b, fee_units)

        if not self.manager.has_code(address):
            raise PoolNotFoundError(
                f"No Elastic pool for {token_a.symbol}/{token_b.symbol} fee {fee_units} at {address}"
            )

        pool = ElasticPool(self.manager, address)
        onchain_fee = pool.swap_fee_units()
        if onchain_fee != fee_units:
            raise PoolNotFoundError(f"Pool at {address} charges {onchain_fee} fee units, expected {fee_units}")
        liquidity_state = pool.get_liquidity_state()
        pool_state = pool.get_pool_state()
        if pool_state["sqrt_price_x96"] == 0:
            raise PoolNotFoundError(f"Pool at {address} is not initialized")

        state = PoolState.from_tokens(
            token_a,
            token_b,
            fee_units=fee_units,
            sqrt_price_x96=pool_state["sqrt_price_x96"],
            base_liquidity=liquidity_state["base_liquidity"],
            reinvest_liquidity=liquidity_state["reinvest_liquidity"],
            tick=pool_state["current_tick"],
            address=pool.address,
        )
        logger.info(
            "Pool %s: tick=%d sqrtP=%d baseL=%d reinvestL=%d",
            pool.address, state.tick, state.sqrt_price_x96, state.base_liquidity, state.reinvest_liquidity,
        )
        return state

    def get_pool(self):
        """(address, PoolState) for the configured pair and fee tier"""
        address = self.pool_address()
        return address, self.read_pool_state(address)
