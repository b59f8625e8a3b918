"""Elastic type definitions: tokens, fee tiers and pool snapshots"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from fractions import Fraction
from typing import NamedTuple, Optional, Tuple

from web3 import Web3

from .math import Q192

# Elastic fees are expressed in 1/100000 ("fee units"), not Uniswap's 1/1000000
FEE_UNITS = 100000


class FeeAmount(IntEnum):
    """Elastic fee tiers (fee units)"""

    VERY_STABLE = 8      # 0.008%
    STABLE = 10          # 0.01%
    MOST_PAIR = 40       # 0.04%
    EXOTIC = 300         # 0.3%
    VOLATILE = 1000      # 1%

    @property
    def tick_spacing(self) -> int:
        return TICK_SPACINGS[self]


TICK_SPACINGS = {
    FeeAmount.VERY_STABLE: 1,
    FeeAmount.STABLE: 1,
    FeeAmount.MOST_PAIR: 8,
    FeeAmount.EXOTIC: 60,
    FeeAmount.VOLATILE: 200,
}


@dataclass(frozen=True, eq=False)
class Token:
    """
    An ERC20 token on a given chain.

    Equality and hashing only consider (chain_id, address); the address is
    stored checksummed.
    """

    chain_id: int
    address: str
    decimals: int
    symbol: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.decimals < 255:
            raise ValueError(f"Invalid decimals for {self.address}: {self.decimals}")
        object.__setattr__(self, "address", Web3.to_checksum_address(self.address))

    def __eq__(self, other):
        if not isinstance(other, Token):
            return NotImplemented
        return self.chain_id == other.chain_id and self.address == other.address

    def __hash__(self):
        return hash((self.chain_id, self.address))

    def sorts_before(self, other: "Token") -> bool:
        """True if this token is token0 of a pair with `other`"""
        if self.address == other.address:
            raise ValueError(f"Cannot sort identical tokens: {self.address}")
        return int(self.address, 16) < int(other.address, 16)

    def __repr__(self):
        return f"Token({self.symbol or '?'} {self.address})"


def sort_tokens(token_a: Token, token_b: Token) -> Tuple[Token, Token]:
    """Return (token0, token1) ordered by address"""
    if token_a.sorts_before(token_b):
        return token_a, token_b
    return token_b, token_a


class TokenAmounts(NamedTuple):
    """Raw (integer) amounts of token0 and token1"""

    amount0: int
    amount1: int


@dataclass(frozen=True)
class PoolState:
    """
    Immutable snapshot of an Elastic pool.

    token0 must sort before token1; use `PoolState.from_tokens` to build
    one from an unordered pair.

    Attributes:
        token0: Lower address token
        token1: Higher address token
        fee_units: Swap fee in fee units (see FeeAmount)
        sqrt_price_x96: Current sqrt price, Q64.96
        base_liquidity: Active base liquidity
        reinvest_liquidity: Reinvestment liquidity
        tick: Current tick
        tick_spacing: Tick spacing (derived from the fee tier when omitted)
        address: Pool contract address, if known
    """

    token0: Token
    token1: Token
    fee_units: int
    sqrt_price_x96: int
    base_liquidity: int
    reinvest_liquidity: int
    tick: int
    tick_spacing: Optional[int] = None
    address: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if not self.token0.sorts_before(self.token1):
            raise ValueError(
                f"token0 must sort before token1. Got: {self.token0.address} > {self.token1.address}"
            )
        if self.tick_spacing is None:
            object.__setattr__(self, "tick_spacing", FeeAmount(self.fee_units).tick_spacing)
        if self.tick_spacing <= 0:
            raise ValueError(f"Invalid tick spacing: {self.tick_spacing}")

    @classmethod
    def from_tokens(cls, token_a, token_b, fee_units, sqrt_price_x96, base_liquidity,
                    reinvest_liquidity, tick, tick_spacing=None, address=None):
        token0, token1 = sort_tokens(token_a, token_b)
        return cls(token0, token1, fee_units, sqrt_price_x96, base_liquidity,
                   reinvest_liquidity, tick, tick_spacing, address)

    @property
    def token0_price(self) -> Fraction:
        """Raw token1 per raw token0"""
        return Fraction(self.sqrt_price_x96 ** 2, Q192)

    @property
    def token1_price(self) -> Fraction:
        """Raw token0 per raw token1"""
        return Fraction(Q192, self.sqrt_price_x96 ** 2)

    def involves_token(self, token: Token) -> bool:
        return token == self.token0 or token == self.token1

    def with_price(self, sqrt_price_x96: int, tick: int) -> "PoolState":
        """Same pool at another price, with no active liquidity"""
        return replace(
            self,
            sqrt_price_x96=sqrt_price_x96,
            tick=tick,
            base_liquidity=0,
            reinvest_liquidity=0,
        )
