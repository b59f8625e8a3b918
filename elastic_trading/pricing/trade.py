"""Single-pool route, quote and trade types"""

from __future__ import annotations

from dataclasses import dataclass

from .math import BPS
from .types import PoolState, Token


@dataclass(frozen=True)
class Route:
    """Single-hop route through one pool"""

    pool: PoolState
    token_in: Token
    token_out: Token

    def __post_init__(self):
        if self.token_in == self.token_out:
            raise ValueError("token_in and token_out must differ")
        if not (self.pool.involves_token(self.token_in) and self.pool.involves_token(self.token_out)):
            raise ValueError(f"Route tokens not in pool {self.pool.address}")


@dataclass(frozen=True)
class QuoteOutput:
    """Decoded QuoterV2.quoteExactInputSingle result"""

    used_amount: int
    returned_amount: int
    after_sqrt_p: int
    initialized_ticks_crossed: int
    gas_estimate: int


@dataclass(frozen=True)
class Quote:
    """A quote for swapping `amount_in` along `route`"""

    route: Route
    amount_in: int
    output: QuoteOutput

    @property
    def input_amount(self) -> int:
        """Input the pool actually consumes (may be below amount_in)"""
        return self.output.used_amount

    @property
    def output_amount(self) -> int:
        return self.output.returned_amount


@dataclass(frozen=True)
class Trade:
    """Exact-input trade built from a quote, without re-simulating the pool"""

    route: Route
    input_amount: int
    output_amount: int

    def __post_init__(self):
        if self.input_amount <= 0:
            raise ValueError(f"Trade input must be positive: {self.input_amount}")
        if self.output_amount < 0:
            raise ValueError(f"Trade output must be non-negative: {self.output_amount}")

    @classmethod
    def from_quote(cls, quote: Quote) -> "Trade":
        return cls(quote.route, quote.input_amount, quote.output_amount)

    def minimum_amount_out(self, slippage_bps) -> int:
        """output / (1 + slippage), rounded down"""
        return self.output_amount * BPS // (BPS + slippage_bps)
