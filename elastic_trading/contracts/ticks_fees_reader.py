"""TicksFeesReader contract wrapper"""

from ..core.connection import rpc_errors


class TicksFeesReader:
    """Helper contract exposing initialized tick hints and owed fees"""

    def __init__(self, manager, address):
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "ticks_fees_reader")

    def get_nearest_initialized_ticks(self, pool_address, tick):
        """
        Initialized ticks around `tick`.

        Returns:
            (previous, next) where previous <= tick
        """
        with rpc_errors(f"read initialized ticks near {tick}"):
            previous, nxt = self.contract.functions.getNearestInitializedTicks(
                self.manager.checksum(pool_address), tick
            ).call()
        return previous, nxt

    def ticks_previous(self, pool_address, tick_lower, tick_upper):
        """Insertion hints for a position's lower and upper ticks"""
        return (
            self.get_nearest_initialized_ticks(pool_address, tick_lower)[0],
            self.get_nearest_initialized_ticks(pool_address, tick_upper)[0],
        )

    def get_total_fees_owed_to_position(self, position_manager, pool_address, token_id):
        """
        Returns:
            (fee0, fee1) owed to the position, in raw token units
        """
        with rpc_errors(f"read fees owed to position {token_id}"):
            fee0, fee1 = self.contract.functions.getTotalFeesOwedToPosition(
                self.manager.checksum(position_manager),
                self.manager.checksum(pool_address),
                token_id,
            ).call()
        return fee0, fee1
