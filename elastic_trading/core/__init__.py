"""Core modules: configuration, connection, exceptions and results"""

from .config import Config, ElasticContracts, get_abi
from .connection import Web3Manager
from .exceptions import (
    ElasticError,
    ConfigError,
    RpcUnavailableError,
    PoolNotFoundError,
    PositionError,
    NoOpenPositionError,
    TransactionError,
    TransactionRevertedError,
    ApprovalFailedError,
    QuoteError,
    SubgraphError,
)
from .result import ErrorKind, OperationResult

__all__ = [
    "Config",
    "ElasticContracts",
    "get_abi",
    "Web3Manager",
    "ElasticError",
    "ConfigError",
    "RpcUnavailableError",
    "PoolNotFoundError",
    "PositionError",
    "NoOpenPositionError",
    "TransactionError",
    "TransactionRevertedError",
    "ApprovalFailedError",
    "QuoteError",
    "SubgraphError",
    "ErrorKind",
    "OperationResult",
]
