"""
Elastic Trading - scripted quote, swap and liquidity operations for KyberSwap Elastic
"""

from .core.config import Config
from .core.connection import Web3Manager
from .core.exceptions import ElasticError, ConfigError, TransactionError
from .core.result import ErrorKind, OperationResult

__version__ = "0.1.0"
__all__ = [
    "Config",
    "Web3Manager",
    "ElasticError",
    "ConfigError",
    "TransactionError",
    "ErrorKind",
    "OperationResult",
]
