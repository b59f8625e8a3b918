"""Elastic AntiSnipAttackPositionManager wrapper"""

import logging

from web3 import Web3

from ..utils.transactions import TransactionBuilder

logger = logging.getLogger(__name__)

# ERC721 Transfer(address,address,uint256)
TRANSFER_TOPIC = Web3.keccak(text="Transfer(address,address,uint256)")


class PositionManager:
    """Submits encoded position calldata to the Elastic position manager"""

    def __init__(self, manager, address, tx_builder=None):
        self.manager = manager
        self.address = manager.checksum(address)
        self.tx_builder = tx_builder or TransactionBuilder(manager)

    def submit(self, method_parameters, operation_type):
        """Send calldata to the position manager, returns the mined receipt"""
        return self.tx_builder.send_call(
            self.address,
            method_parameters.calldata,
            value=method_parameters.value,
            operation_type=operation_type,
        )

    def minted_token_id(self, receipt):
        """Position NFT id minted in `receipt`, or None"""
        for log in receipt.get("logs", []):
            topics = log["topics"]
            if (
                self.manager.checksum(log["address"]) == self.address
                and len(topics) == 4
                and bytes(topics[0]) == bytes(TRANSFER_TOPIC)
                and int.from_bytes(bytes(topics[1]), "big") == 0
            ):
                return int.from_bytes(bytes(topics[3]), "big")
        return None
