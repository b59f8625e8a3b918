"""Typed outcome returned by every workflow operation"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from .exceptions import (
    ApprovalFailedError,
    ElasticError,
    NoOpenPositionError,
    PoolNotFoundError,
    QuoteError,
    RpcUnavailableError,
    SubgraphError,
    TransactionError,
    TransactionRevertedError,
)


class ErrorKind(str, Enum):
    POOL_NOT_FOUND = "pool_not_found"
    NO_OPEN_POSITION = "no_open_position"
    APPROVAL_FAILED = "approval_failed"
    TRANSACTION_REVERTED = "transaction_reverted"
    RPC_UNAVAILABLE = "rpc_unavailable"
    QUOTE_FAILED = "quote_failed"
    INDEX_UNAVAILABLE = "index_unavailable"
    CONFIG = "config"


# Most specific first; isinstance walks this in order
_ERROR_KINDS = (
    (PoolNotFoundError, ErrorKind.POOL_NOT_FOUND),
    (NoOpenPositionError, ErrorKind.NO_OPEN_POSITION),
    (ApprovalFailedError, ErrorKind.APPROVAL_FAILED),
    (TransactionRevertedError, ErrorKind.TRANSACTION_REVERTED),
    (TransactionError, ErrorKind.TRANSACTION_REVERTED),
    (RpcUnavailableError, ErrorKind.RPC_UNAVAILABLE),
    (QuoteError, ErrorKind.QUOTE_FAILED),
    (SubgraphError, ErrorKind.INDEX_UNAVAILABLE),
)


def error_kind_for(error: ElasticError) -> ErrorKind:
    """Map an exception to the ErrorKind reported to callers"""
    for exc_type, kind in _ERROR_KINDS:
        if isinstance(error, exc_type):
            return kind
    return ErrorKind.CONFIG


@dataclass
class OperationResult:
    """
    Outcome of a workflow operation.

    Exactly one of (tx_hash / details) or (error_kind / error) is meaningful:
    use `ok` to tell them apart.

    Attributes:
        operation: Operation name ("create", "swap", ...)
        tx_hash: Hash of the lifecycle transaction (None on dry run or error)
        details: Operation specific report (amounts, ticks, calldata, ...)
        error_kind: Category of failure
        error: Human-readable failure detail
    """

    operation: str
    tx_hash: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    error_kind: Optional[ErrorKind] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, operation: str, tx_hash: Optional[str] = None, **details) -> "OperationResult":
        return cls(operation=operation, tx_hash=tx_hash, details=details)

    @classmethod
    def failure(cls, operation: str, error: ElasticError, **details) -> "OperationResult":
        return cls(
            operation=operation,
            tx_hash=getattr(error, "tx_hash", None),
            details=details,
            error_kind=error_kind_for(error),
            error=str(error),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly view used by the CLI"""
        return {
            "operation": self.operation,
            "ok": self.ok,
            "tx_hash": self.tx_hash,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "error": self.error,
            "details": self.details,
        }
