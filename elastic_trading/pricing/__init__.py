"""Elastic pricing engine: tick math, positions, trades and calldata"""

from .types import FeeAmount, Token, TokenAmounts, PoolState, sort_tokens
from .position import Position
from .trade import Route, Quote, QuoteOutput, Trade
from .address import compute_pool_address
from .math import (
    nearest_usable_tick,
    tick_range_around,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    format_units,
)

__all__ = [
    "FeeAmount",
    "Token",
    "TokenAmounts",
    "PoolState",
    "sort_tokens",
    "Position",
    "Route",
    "Quote",
    "QuoteOutput",
    "Trade",
    "compute_pool_address",
    "nearest_usable_tick",
    "tick_range_around",
    "get_sqrt_ratio_at_tick",
    "get_tick_at_sqrt_ratio",
    "format_units",
]
