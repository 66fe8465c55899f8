"""
txmock VM: Contract-Facing API

The CallContext is the capability struct handed to every endpoint. Each
concern (call value, storage, blockchain queries, direct sends) is a
separate object bound to the current frame; nested calls go back through
the engine.
"""
from typing import Iterable, List, NoReturn, Optional, Sequence, Union
from ..core.codec import top_decode_uint, top_encode
from ..core.errors import ExecutionFailure
from ..core.token_identifier import TokenIdentifierOrNative
from ..core.types import CallType, TokenTransfer, TransactionLog
from .call_value import CallValue, CallValueHost
from .result import CallResult

Key = Union[bytes, str]

def _key(key: Key) -> bytes:
    return key.encode("utf-8") if isinstance(key, str) else bytes(key)

class Storage:
    """Storage of the contract executing in the frame."""
    def __init__(self, engine, frame):
        self._engine = engine
        self._frame = frame

    def get(self, key: Key) -> bytes:
        return self._engine.world.storage_get(self._frame.address, _key(key))

    def get_uint(self, key: Key) -> int:
        return top_decode_uint(self.get(key))

    def set(self, key: Key, value):
        self._frame.gas.charge(self._engine.config.storage_write_gas_cost)
        self._engine.world.storage_set(self._frame.address, _key(key), top_encode(value))

    def clear(self, key: Key):
        self.set(key, b"")

    def is_empty(self, key: Key) -> bool:
        return self.get(key) == b""

class Blockchain:
    """Read-only queries about accounts and the current call."""
    def __init__(self, engine, frame):
        self._engine = engine
        self._frame = frame

    def get_sc_address(self) -> bytes:
        return self._frame.tx.to_address

    def get_caller(self) -> bytes:
        return self._frame.tx.from_address

    def get_tx_hash(self) -> bytes:
        return self._frame.tx.tx_hash

    def get_gas_left(self) -> int:
        return self._frame.gas.remaining

    def get_balance(self, address: bytes, token: Optional[TokenIdentifierOrNative] = None,
                    nonce: int = 0) -> int:
        if token is None or token.is_native():
            return self._engine.world.get_balance(address)
        return self._engine.world.get_dct_balance(address, token.unwrap_token(), nonce)

    def get_owner_address(self, address: Optional[bytes] = None) -> Optional[bytes]:
        acc = self._engine.world.get_account(address or self._frame.address)
        return acc.owner if acc else None

class Send:
    """Direct value transfers from the executing contract."""
    def __init__(self, engine, frame):
        self._engine = engine
        self._frame = frame

    def direct(self, to: bytes, token: TokenIdentifierOrNative, nonce: int, amount: int):
        self._engine.world.transfer(self._frame.address, to, token, nonce, amount)

    def direct_moax(self, to: bytes, amount: int):
        self._engine.world.transfer_moax(self._frame.address, to, amount)

class CallContext:
    """
    Everything an endpoint may do, for one call frame.
    """
    def __init__(self, engine, frame, async_result: Optional[CallResult] = None):
        self._engine = engine
        self._frame = frame
        self.tx = frame.tx
        self.call_value = CallValue(CallValueHost(frame.tx, frame.handles))
        self.storage = Storage(engine, frame)
        self.blockchain = Blockchain(engine, frame)
        self.send = Send(engine, frame)
        # set only inside async callbacks
        self.async_result = async_result

    @property
    def self_address(self) -> bytes:
        return self._frame.tx.to_address

    @property
    def caller(self) -> bytes:
        return self._frame.tx.from_address

    def signal_error(self, message: str) -> NoReturn:
        raise ExecutionFailure(message)

    def require(self, condition: bool, message: str):
        if not condition:
            self.signal_error(message)

    def emit_log(self, endpoint: Key, topics: Iterable = (), data=b""):
        self._frame.gas.charge(self._engine.config.log_gas_cost)
        self._frame.logs.append(TransactionLog(
            address=self._frame.address,
            endpoint=_key(endpoint),
            topics=tuple(top_encode(t) for t in topics),
            data=top_encode(data),
        ))

    def execute_on_dest_context(self, to: bytes, function: str, args: Sequence = (),
                                native_amount: int = 0, transfers: Sequence[TokenTransfer] = (),
                                gas: Optional[int] = None) -> List[bytes]:
        """
        Synchronous call. A failing callee fails this frame as well.
        """
        child = self._engine.call_nested(
            self._frame, to, function, args, native_amount, transfers, gas, CallType.SYNC)
        return child.return_data

    def try_execute_on_dest_context(self, to: bytes, function: str, args: Sequence = (),
                                    native_amount: int = 0, transfers: Sequence[TokenTransfer] = (),
                                    gas: Optional[int] = None) -> CallResult:
        """
        Synchronous call whose failure is reported instead of propagated.
        The callee's effects, including its payment, are rolled back on failure.
        An invalid call or a gas request above what is left fails this frame.
        """
        tx, child_gas = self._engine.prepare_call(
            self._frame, to, function, args, native_amount, transfers, gas, CallType.SYNC)
        try:
            child = self._engine.run_child(self._frame, tx, child_gas)
        except ExecutionFailure as err:
            return CallResult.failed(err.status, err.message)
        return CallResult.ok(child.return_data)

    def transfer_execute(self, to: bytes, function: str = "", args: Sequence = (),
                         native_amount: int = 0, transfers: Sequence[TokenTransfer] = (),
                         gas: Optional[int] = None) -> CallResult:
        """
        Validates the call and moves the value, then runs it. A failing call
        keeps the value where it was sent. An invalid call moves nothing.
        """
        return self._engine.transfer_execute(
            self._frame, to, function, args, native_amount, transfers, gas)

    def async_call(self, to: bytes, function: str, args: Sequence = (),
                   native_amount: int = 0, transfers: Sequence[TokenTransfer] = (),
                   gas: Optional[int] = None, callback: Optional[str] = None,
                   callback_args: Sequence = ()):
        """
        Queues the call; it runs after the synchronous part of the
        transaction and its result is delivered to `callback` on this contract.
        """
        self._engine.queue_async_call(
            self._frame, to, function, args, native_amount, transfers, gas, callback, callback_args)
