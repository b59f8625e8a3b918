"""Deterministic (CREATE2) Elastic pool address derivation"""

from eth_abi import encode
from web3 import Web3

from .types import Token


def _address_of(token):
    return token.address if isinstance(token, Token) else Web3.to_checksum_address(token)


def compute_pool_address(factory, token_a, token_b, fee_units, init_code_hash):
    """
    Address of the Elastic pool for a token pair and fee tier.

    Args:
        factory: Factory address
        token_a: Token (or address) of either side
        token_b: Token (or address) of the other side
        fee_units: Fee tier in fee units
        init_code_hash: Pool init code hash (hex string)

    Returns:
        Checksummed pool address
    """
    address_a = _address_of(token_a)
    address_b = _address_of(token_b)
    if address_a == address_b:
        raise ValueError(f"Identical token addresses: {address_a}")

    token0, token1 = sorted((address_a, address_b), key=lambda a: int(a, 16))
    salt = Web3.keccak(encode(["address", "address", "uint24"], [token0, token1, int(fee_units)]))

    raw = Web3.keccak(
        b"\xff"
        + Web3.to_bytes(hexstr=Web3.to_checksum_address(factory))
        + salt
        + Web3.to_bytes(hexstr=init_code_hash)
    )
    return Web3.to_checksum_address(raw[12:])
