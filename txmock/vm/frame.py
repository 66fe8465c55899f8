"""
txmock VM: Call Frames

One frame per executed TransactionDescriptor. A frame owns its world
snapshot, handle table, gas meter, and the logs and async calls it
produced; on commit those are merged into the parent, on rollback they
are discarded.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple
from ..core.types import TransactionDescriptor, TransactionLog
from .gas import GasMeter
from .handles import HandleTable

class FrameState(str, Enum):
    ENTERED = "ENTERED"
    RUNNING = "RUNNING"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"

@dataclass
class PendingAsyncCall:
    """
    Deferred call, run after the synchronous part of the transaction.
    """
    tx: TransactionDescriptor
    gas: GasMeter                      # reserved from the issuing frame
    async_depth: int
    callback: Optional[str] = None
    callback_args: Tuple[bytes, ...] = ()

@dataclass
class CallFrame:
    tx: TransactionDescriptor
    depth: int
    async_depth: int
    gas: GasMeter
    snapshot: Dict
    handles: HandleTable
    state: FrameState = FrameState.ENTERED
    logs: List[TransactionLog] = field(default_factory=list)
    return_data: List[bytes] = field(default_factory=list)
    async_calls: List[PendingAsyncCall] = field(default_factory=list)

    @property
    def address(self) -> bytes:
        return self.tx.to_address

    def merge_child(self, child: "CallFrame"):
        """Pending effects of a committed child become pending effects of this frame."""
        self.logs.extend(child.logs)
        self.async_calls.extend(child.async_calls)

    def discard_pending(self):
        self.logs.clear()
        self.async_calls.clear()
        self.return_data = []
