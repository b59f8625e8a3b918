"""Elastic swap router wrapper"""

from ..utils.transactions import TransactionBuilder


class Router:
    """Submits encoded swap calldata to the Elastic router"""

    def __init__(self, manager, address, tx_builder=None):
        self.manager = manager
        self.address = manager.checksum(address)
        self.tx_builder = tx_builder or TransactionBuilder(manager)

    def submit(self, method_parameters, operation_type="swap"):
        return self.tx_builder.send_call(
            self.address,
            method_parameters.calldata,
            value=method_parameters.value,
            operation_type=operation_type,
        )
