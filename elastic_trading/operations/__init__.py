"""Elastic workflows: pool state, open positions, liquidity and swaps"""

from .pools import PoolStateReader
from .positions import PositionIndex, PositionRecord
from .liquidity import LiquidityManager, target_amount0
from .swap import SwapManager

__all__ = [
    "PoolStateReader",
    "PositionIndex",
    "PositionRecord",
    "LiquidityManager",
    "target_amount0",
    "SwapManager",
]
