"""
txmock Core Package

Token identifiers, transaction descriptors, codec and errors shared by the
engine and the scenario layer.
"""
from .errors import (
    CardinalityError,
    ExecutionFailure,
    FungibilityError,
    InterpretationError,
    ReturnCode,
    TxMockError,
    VerificationError,
)
from .token_identifier import MOAX_REPRESENTATION, TokenIdentifierOrNative
from .types import CallType, DctTokenType, TokenTransfer, TransactionDescriptor, TransactionLog

__all__ = [
    "CardinalityError",
    "ExecutionFailure",
    "FungibilityError",
    "InterpretationError",
    "ReturnCode",
    "TxMockError",
    "VerificationError",
    "MOAX_REPRESENTATION",
    "TokenIdentifierOrNative",
    "CallType",
    "DctTokenType",
    "TokenTransfer",
    "TransactionDescriptor",
    "TransactionLog",
]
