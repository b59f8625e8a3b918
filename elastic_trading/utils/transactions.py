"""Transaction utilities with EIP-1559 support"""

import logging

from web3 import Web3

from ..core.connection import rpc_errors
from ..core.exceptions import TransactionRevertedError
from .gas import GasManager

logger = logging.getLogger(__name__)


class TransactionBuilder:
    """Build and send EIP-1559 transactions with unified gas management"""

    def __init__(self, manager, gas_manager=None):
        """
        Args:
            manager: Web3Manager instance
            gas_manager: GasManager instance (created from manager.config if None)
        """
        self.manager = manager
        self.gas_manager = gas_manager or GasManager(manager)

    def _base_tx(self, operation_type):
        gas_params = self.gas_manager.getGasParams(operation_type)
        return {
            "from": self.manager.address,
            "nonce": self.manager.get_nonce(),
            "maxFeePerGas": gas_params["maxFeePerGas"],
            "maxPriorityFeePerGas": gas_params["maxPriorityFeePerGas"],
            "chainId": self.manager.chain_id,
            "type": 2,  # EIP-1559 transaction type
        }

    def build_call(self, to, data, value=0, operation_type=None, gas_buffer=1.2):
        """
        Build an EIP-1559 transaction from raw calldata.

        Args:
            to: Target contract address
            data: Calldata bytes
            value: Native value in wei
            operation_type: Type of operation for gas limit fallback
            gas_buffer: Multiplier for estimated gas (default 1.2 = +20%)

        Returns:
            Transaction dictionary ready for signing
        """
        tx = self._base_tx(operation_type)
        tx["to"] = Web3.to_checksum_address(to)
        tx["data"] = Web3.to_hex(data)
        tx["value"] = value

        estimated_gas = self.gas_manager.estimateGas(tx, operation_type)
        tx["gas"] = int(estimated_gas * gas_buffer)
        return tx

    def build(self, contract_func, operation_type=None, gas_buffer=1.2, value=0):
        """Build an EIP-1559 transaction for a web3 contract function"""
        tx = self._base_tx(operation_type)
        if value > 0:
            tx["value"] = value
        tx["gas"] = self.gas_manager.getGasLimit(operation_type)

        with rpc_errors("build transaction"):
            tx = contract_func.build_transaction(tx)
        estimated_gas = self.gas_manager.estimateGas(tx, operation_type)
        tx["gas"] = int(estimated_gas * gas_buffer)
        return tx

    def send(self, tx, description="transaction"):
        """
        Sign, send and wait for a transaction.

        Returns:
            Transaction receipt

        Raises:
            TransactionRevertedError: If the receipt status is not 1
        """
        tx_hash = self.manager.send_transaction(tx)
        logger.info("Sent %s: %s", description, Web3.to_hex(tx_hash))

        receipt = self.manager.wait_for_receipt(tx_hash)
        if receipt["status"] != 1:
            raise TransactionRevertedError(
                f"{description} reverted: {Web3.to_hex(tx_hash)}", tx_hash=Web3.to_hex(tx_hash)
            )

        logger.info("%s mined in block %s (gas used %s)", description, receipt.get("blockNumber"),
                    receipt.get("gasUsed"))
        return receipt

    def build_and_send(self, contract_func, operation_type=None, gas_buffer=1.2, value=0):
        tx = self.build(contract_func, operation_type, gas_buffer, value)
        return self.send(tx, operation_type or "transaction")

    def send_call(self, to, data, value=0, operation_type=None, gas_buffer=1.2):
        tx = self.build_call(to, data, value, operation_type, gas_buffer)
        return self.send(tx, operation_type or "transaction")