"""Contract wrappers for ERC20, pools, quoter, router and position manager"""

from .erc20 import ERC20
from .pool import ElasticPool
from .position_manager import PositionManager
from .quoter import Quoter
from .router import Router
from .ticks_fees_reader import TicksFeesReader

__all__ = ["ERC20", "ElasticPool", "PositionManager", "Quoter", "Router", "TicksFeesReader"]
