"""Web3 connection management"""

import os
import logging
from contextlib import contextmanager

import requests
from web3 import Web3
from web3.exceptions import ContractLogicError, TimeExhausted, Web3RPCError
from dotenv import load_dotenv

from .config import Config, get_abi
from .exceptions import ConfigError, RpcUnavailableError, TransactionError

logger = logging.getLogger(__name__)


@contextmanager
def rpc_errors(action):
    """Translate transport failures and node errors into RpcUnavailableError"""
    try:
        yield
    except ContractLogicError:
        raise
    except (requests.exceptions.RequestException, ConnectionError, Web3RPCError) as e:
        raise RpcUnavailableError(f"RPC unavailable while trying to {action}: {e}") from e


class Web3Manager:
    """Manages Web3 connection and account"""

    def __init__(self, config=None, require_signer=False):
        """
        Initialize Web3 connection.

        Args:
            config: Config instance (Config.load() if None)
            require_signer: If True, loads private key for signing transactions
        """
        load_dotenv()
        load_dotenv("wallet.env")

        self.config = config or Config.load()
        self._setup_web3()

        self.account = None
        if require_signer:
            self._setup_account()

    def _setup_web3(self):
        """Setup Web3 connection"""
        rpc_url = self.config.rpc_url
        if not rpc_url:
            raise ConfigError("RPC URL not configured (set RPC_URL)")

        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": self.config.request_timeout}))

        with rpc_errors("connect"):
            connected = self.w3.is_connected()
        if not connected:
            raise RpcUnavailableError(f"Failed to connect to {rpc_url}")

        with rpc_errors("read chain id"):
            chain_id = self.w3.eth.chain_id
        if chain_id != self.config.chain_id:
            raise ConfigError(f"RPC is on chain {chain_id}, expected {self.config.chain_id}")

        logger.debug("Connected to %s (chain %s)", rpc_url, chain_id)

    def _setup_account(self):
        """Setup signing account from private key"""
        private_key = os.getenv("PRIVATE_KEY")
        if not private_key:
            raise ConfigError("PRIVATE_KEY not found in wallet.env")

        self.account = self.w3.eth.account.from_key(private_key)
        logger.info("Using signer %s", self.account.address)

    @property
    def address(self):
        """Get account address (from signer or PUBLIC_KEY in wallet.env)"""
        if self.account:
            return self.account.address
        # Fall back to PUBLIC_KEY for read-only operations
        public_key = os.getenv("PUBLIC_KEY")
        return Web3.to_checksum_address(public_key) if public_key else None

    @property
    def chain_id(self):
        return self.config.chain_id

    def get_nonce(self, address=None):
        """Get transaction count (nonce)"""
        addr = address or self.address
        if not addr:
            raise ValueError("No address provided")
        with rpc_errors("read nonce"):
            return self.w3.eth.get_transaction_count(addr)

    def get_contract(self, address, abi_name):
        """Create contract instance"""
        return self.w3.eth.contract(
            address=Web3.to_checksum_address(address),
            abi=get_abi(abi_name)
        )

    def checksum(self, address):
        """Convert address to checksum format"""
        return Web3.to_checksum_address(address)

    def has_code(self, address):
        """True if a contract is deployed at address"""
        with rpc_errors(f"read code at {address}"):
            code = self.w3.eth.get_code(Web3.to_checksum_address(address))
        return len(code) > 0

    def call(self, to, data):
        """eth_call with raw calldata, returns the raw return bytes"""
        with rpc_errors(f"call {to}"):
            return self.w3.eth.call({"to": Web3.to_checksum_address(to), "data": Web3.to_hex(data)})

    def estimate_gas(self, tx):
        with rpc_errors("estimate gas"):
            return self.w3.eth.estimate_gas(tx)

    def send_transaction(self, tx):
        """Sign and broadcast a transaction, returns the tx hash"""
        if not self.account:
            raise ConfigError("A signer is required to send transactions")
        signed = self.account.sign_transaction(tx)
        with rpc_errors("send transaction"):
            try:
                return self.w3.eth.send_raw_transaction(signed.raw_transaction)
            except Web3RPCError as e:
                raise TransactionError(f"Transaction rejected by node: {e}") from e

    def wait_for_receipt(self, tx_hash):
        with rpc_errors("wait for receipt"):
            try:
                return self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.config.tx_timeout)
            except TimeExhausted as e:
                raise RpcUnavailableError(f"Transaction {Web3.to_hex(tx_hash)} not mined in time") from e
