"""Custom exceptions for Elastic Trading"""


class ElasticError(Exception):
    """Base exception for all Elastic errors"""
    pass


class ConfigError(ElasticError):
    """Configuration-related errors"""
    pass


class RpcUnavailableError(ElasticError):
    """JSON-RPC node unreachable or returned a transport error"""
    pass


class PoolNotFoundError(ElasticError):
    """No pool contract deployed at the derived address"""
    pass


class PositionError(ElasticError):
    """Position-related errors (not found, not owned, etc.)"""
    pass


class NoOpenPositionError(PositionError):
    """Position index returned no open position for the owner and pool"""
    pass


class TransactionError(ElasticError):
    """Transaction execution errors"""
    pass


class TransactionRevertedError(TransactionError):
    """Transaction was mined with status 0"""

    def __init__(self, message, tx_hash=None):
        super().__init__(message)
        self.tx_hash = tx_hash


class ApprovalFailedError(TransactionError):
    """ERC20 approval could not be submitted or was reverted"""
    pass


class QuoteError(ElasticError):
    """Quote-related errors (failed to get quote, etc.)"""
    pass


class SubgraphError(ElasticError):
    """Position index query failed"""
    pass
