"""
txmock VM: Transaction Result

Outcome of executing one top-level transaction, including the async calls
it spawned and their callbacks.
"""
from dataclasses import dataclass, field
from typing import List, Optional
from ..core.errors import ReturnCode
from ..core.types import TransactionLog

@dataclass
class CallResult:
    """
    Outcome of a nested call whose failure the caller chose to handle.
    Also the value delivered to async callbacks.
    """
    status: ReturnCode
    message: str = ""
    return_data: List[bytes] = field(default_factory=list)

    @classmethod
    def ok(cls, return_data: List[bytes]) -> "CallResult":
        return cls(status=ReturnCode.OK, return_data=list(return_data))

    @classmethod
    def failed(cls, status: ReturnCode, message: str) -> "CallResult":
        return cls(status=ReturnCode(status), message=message)

    def is_success(self) -> bool:
        return self.status == ReturnCode.OK

@dataclass
class AsyncCallRecord:
    destination: bytes
    function: str
    result: CallResult
    callback: Optional[str] = None
    callback_result: Optional[CallResult] = None

@dataclass
class TransactionResult:
    status: ReturnCode
    message: str = ""
    return_data: List[bytes] = field(default_factory=list)
    logs: List[TransactionLog] = field(default_factory=list)
    gas_remaining: int = 0
    gas_used: int = 0
    async_calls: List[AsyncCallRecord] = field(default_factory=list)

    @classmethod
    def failure(cls, status: ReturnCode, message: str, gas_limit: int) -> "TransactionResult":
        # a failed transaction consumes its whole gas limit
        return cls(status=ReturnCode(status), message=message, gas_remaining=0, gas_used=gas_limit)

    def is_success(self) -> bool:
        return self.status == ReturnCode.OK

    def summary(self) -> str:
        if self.is_success():
            return f"OK: {len(self.return_data)} results, {len(self.logs)} logs, gas used {self.gas_used}"
        return f"FAILED ({int(self.status)}): {self.message}"
