"""
txmock VM: Handle Table

Contract code never touches host values directly. The host stores them in a
per-frame table and hands out small integer handles; the table is released
when the frame exits.
"""
from typing import Any, Dict

# Reserved handles for call value data, negative so they never collide
# with handles allocated by new().
UNINITIALIZED_HANDLE = 0
CALL_VALUE_MOAX = -10
CALL_VALUE_MULTI_DCT = -11
CALL_VALUE_SINGLE_DCT = -12

class ReleasedHandleError(RuntimeError):
    pass

class HandleTable:
    def __init__(self, owner: str = ""):
        self.owner = owner
        self._values: Dict[int, Any] = {}
        self._next = 1
        self._released = False

    def new(self, value: Any) -> int:
        self._check_live()
        handle = self._next
        self._next += 1
        self._values[handle] = value
        return handle

    def set(self, handle: int, value: Any):
        self._check_live()
        self._values[handle] = value

    def get(self, handle: int) -> Any:
        self._check_live()
        try:
            return self._values[handle]
        except KeyError:
            raise KeyError(f"unknown handle {handle} in frame {self.owner}") from None

    def contains(self, handle: int) -> bool:
        return not self._released and handle in self._values

    def release(self):
        self._values.clear()
        self._released = True

    def __len__(self) -> int:
        return len(self._values)

    def _check_live(self):
        if self._released:
            raise ReleasedHandleError(f"handle table of frame {self.owner} already released")
