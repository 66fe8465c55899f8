"""
txmock VM Package

In-process mock of the host VM: value transfers, nested calls and rollback.
"""
from .config import EngineConfig
from .contract import Contract, ContractRegistry, callback, endpoint
from .engine import MockExecutionEngine
from .result import AsyncCallRecord, CallResult, TransactionResult
from .world_state import Account, WorldState

__all__ = [
    "EngineConfig",
    "Contract",
    "ContractRegistry",
    "callback",
    "endpoint",
    "MockExecutionEngine",
    "AsyncCallRecord",
    "CallResult",
    "TransactionResult",
    "Account",
    "WorldState",
]
