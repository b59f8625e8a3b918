"""Gas and transaction utilities"""

from .gas import GasManager
from .transactions import TransactionBuilder

__all__ = ["GasManager", "TransactionBuilder"]
