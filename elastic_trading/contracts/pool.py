"""Elastic pool contract wrapper"""

from ..core.connection import rpc_errors


class ElasticPool:
    """Read-only wrapper for an Elastic pool"""

    def __init__(self, manager, address):
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "pool")

    def get_pool_state(self):
        """
        Returns:
            dict with sqrt_price_x96, current_tick, nearest_current_tick, locked
        """
        with rpc_errors(f"read pool state of {self.address}"):
            sqrt_p, current_tick, nearest_tick, locked = self.contract.functions.getPoolState().call()
        return {
            "sqrt_price_x96": sqrt_p,
            "current_tick": current_tick,
            "nearest_current_tick": nearest_tick,
            "locked": locked,
        }

    def get_liquidity_state(self):
        """
        Returns:
            dict with base_liquidity, reinvest_liquidity, reinvest_liquidity_last
        """
        with rpc_errors(f"read liquidity state of {self.address}"):
            base_l, reinvest_l, reinvest_l_last = self.contract.functions.getLiquidityState().call()
        return {
            "base_liquidity": base_l,
            "reinvest_liquidity": reinvest_l,
            "reinvest_liquidity_last": reinvest_l_last,
        }

    def swap_fee_units(self):
        with rpc_errors(f"read fee of {self.address}"):
            return self.contract.functions.swapFeeUnits().call()
