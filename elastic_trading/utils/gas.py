"""EIP-1559 gas parameters with fixed, configured fees"""

import logging

from web3 import Web3

logger = logging.getLogger(__name__)


class GasManager:
    """
    EIP-1559 gas management.

    Fees are fixed by configuration rather than read from the latest block:
    - maxFeePerGas: Maximum total fee per gas unit (Gwei)
    - maxPriorityFeePerGas: Tip to validators (Gwei)
    - gasLimit: Fallback gas units per operation type when estimation fails
    """

    def __init__(self, manager, config=None, maxFeePerGas=None, maxPriorityFeePerGas=None):
        """
        Args:
            manager: Web3Manager instance
            config: Config instance (manager.config if None)
            maxFeePerGas: Max fee per gas in Gwei (overrides config)
            maxPriorityFeePerGas: Priority fee in Gwei (overrides config)
        """
        self.manager = manager
        self.config = config or manager.config

        # CLI overrides take precedence over config
        self._maxFeePerGas = maxFeePerGas
        self._maxPriorityFeePerGas = maxPriorityFeePerGas

    @property
    def maxFeePerGas(self):
        """maxFeePerGas in Gwei (override > config)"""
        if self._maxFeePerGas is not None:
            return self._maxFeePerGas
        return self.config.max_fee_per_gas_gwei

    @property
    def maxPriorityFeePerGas(self):
        """maxPriorityFeePerGas in Gwei (override > config)"""
        if self._maxPriorityFeePerGas is not None:
            return self._maxPriorityFeePerGas
        return self.config.max_priority_fee_per_gas_gwei

    def getGasLimit(self, operation_type=None):
        """Get gas limit for operation type"""
        return self.config.get_gas_limit(operation_type or "default")

    def getGasParams(self, operation_type=None, gas_buffer=1.0):
        """
        Get EIP-1559 gas parameters for a transaction.

        Returns:
            Dict with maxFeePerGas, maxPriorityFeePerGas, gas (all in Wei / units)
        """
        max_fee_wei = Web3.to_wei(self.maxFeePerGas, "gwei")
        priority_fee_wei = Web3.to_wei(self.maxPriorityFeePerGas, "gwei")
        if priority_fee_wei > max_fee_wei:
            priority_fee_wei = max_fee_wei

        return {
            "maxFeePerGas": max_fee_wei,
            "maxPriorityFeePerGas": priority_fee_wei,
            "gas": int(self.getGasLimit(operation_type) * gas_buffer),
        }

    def estimateGas(self, tx, operation_type=None):
        """
        Estimate gas for a transaction dict.

        Falls back to the configured limit for the operation when the node
        cannot estimate (e.g. an approval in the same run is not mined yet).
        """
        fallback = self.getGasLimit(operation_type)
        call = {key: tx[key] for key in ("from", "to", "data", "value") if key in tx}

        try:
            return self.manager.estimate_gas(call)
        except Exception as e:
            logger.debug("Gas estimation failed for %s, using %d: %s", operation_type, fallback, e)
            return fallback
