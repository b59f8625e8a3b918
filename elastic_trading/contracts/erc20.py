"""ERC20 token contract wrapper"""

import logging

from ..core.connection import rpc_errors
from ..core.exceptions import ApprovalFailedError, RpcUnavailableError, TransactionError
from ..utils.transactions import TransactionBuilder

logger = logging.getLogger(__name__)


class ERC20:
    """Wrapper for ERC20 token interactions"""

    def __init__(self, manager, address, tx_builder=None):
        """
        Args:
            manager: Web3Manager instance
            address: Token contract address
            tx_builder: TransactionBuilder used for approvals (created if None)
        """
        self.manager = manager
        self.address = manager.checksum(address)
        self.contract = manager.get_contract(self.address, "erc20")
        self.tx_builder = tx_builder or TransactionBuilder(manager)

    def allowance(self, spender, owner=None):
        """Get allowance for spender"""
        owner_addr = owner or self.manager.address
        with rpc_errors(f"read allowance of {self.address}"):
            return self.contract.functions.allowance(owner_addr, self.manager.checksum(spender)).call()

    def approve(self, spender, amount):
        """
        Approve spender for exactly `amount`. Returns tx receipt or None if
        the current allowance already covers it.

        Raises:
            ApprovalFailedError: If the approval could not be sent or reverted
        """
        spender = self.manager.checksum(spender)
        current_allowance = self.allowance(spender)
        if current_allowance >= amount:
            logger.info("Allowance of %s for %s already sufficient (%d >= %d)",
                        self.address, spender, current_allowance, amount)
            return None  # Already approved

        logger.info("Approving %s to spend %d of %s", spender, amount, self.address)
        contract_func = self.contract.functions.approve(spender, amount)
        try:
            receipt = self.tx_builder.build_and_send(contract_func, operation_type="approve")
        except RpcUnavailableError:
            raise
        except TransactionError as e:
            raise ApprovalFailedError(f"Approval of {self.address} for {spender} failed: {e}") from e

        logger.info("New allowance of %s for %s: %d", self.address, spender, self.allowance(spender))
        return receipt
