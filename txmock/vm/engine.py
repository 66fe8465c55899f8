"""
txmock VM: Mock Execution Engine

Applies TransactionDescriptors to the in-memory world state.
Frames run ONE AT A TIME on a depth-first call stack.
NO THREADS. NO SCHEDULER. Async calls are deferred work, drained in
submission order after the synchronous part of the transaction commits.

Frame lifecycle: ENTERED -> RUNNING -> COMMITTED | ROLLED_BACK
"""
from collections import deque
from typing import Deque, List, Optional, Sequence
from pydantic import ValidationError
from ..core.codec import encode_results, top_encode, top_encode_uint
from ..core.errors import (
    ASYNC_DEPTH_EXCEEDED,
    CallDepthExceededError,
    ExecutionFailure,
    FunctionNotFoundError,
    ReturnCode,
)
from ..core.logger import get_logger
from ..core.types import CallType, TokenTransfer, TransactionDescriptor
from .api import CallContext
from .config import EngineConfig
from .contract import ContractRegistry
from .frame import CallFrame, FrameState, PendingAsyncCall
from .gas import GasMeter
from .handles import HandleTable
from .result import AsyncCallRecord, CallResult, TransactionResult
from .world_state import WorldState

logger = get_logger("MockExecutionEngine")

class MockExecutionEngine:
    """
    Mock Execution Engine.

    Invariant: a frame that fails leaves the world exactly as it was when
    the frame was entered.
    """
    def __init__(self, contracts: Optional[ContractRegistry] = None,
                 world: Optional[WorldState] = None,
                 config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self.contracts = contracts or ContractRegistry()
        self.world = world or WorldState()
        self.call_stack: List[CallFrame] = []
        self._async_queue: Deque[PendingAsyncCall] = deque()

    def execute(self, tx: TransactionDescriptor) -> TransactionResult:
        """
        Execute one top-level transaction, including its async calls
        and their callbacks.
        """
        if self.call_stack:
            raise RuntimeError("engine is already executing a transaction")
        self._async_queue = deque()
        meter = GasMeter(tx.gas_limit)
        logger.debug("tx_started", function=tx.function, to=tx.to_address.hex())

        try:
            frame = self.run_frame(tx, meter, async_depth=0)
        except ExecutionFailure as err:
            self._async_queue.clear()
            logger.info("tx_failed", function=tx.function, status=int(err.status), message=err.message)
            return TransactionResult.failure(err.status, err.message, tx.gas_limit)

        logs = list(frame.logs)
        self._async_queue.extend(frame.async_calls)
        records = self._drain_async_queue(meter, logs)

        return TransactionResult(
            status=ReturnCode.OK,
            return_data=list(frame.return_data),
            logs=logs,
            gas_remaining=meter.remaining,
            gas_used=meter.used,
            async_calls=records,
        )

    def query(self, tx: TransactionDescriptor) -> TransactionResult:
        """Execute and then discard every state change."""
        snapshot = self.world.snapshot()
        try:
            return self.execute(tx)
        finally:
            self.world.restore(snapshot)

    def run_frame(self, tx: TransactionDescriptor, gas: GasMeter, async_depth: int,
                  move_value: bool = True, async_result: Optional[CallResult] = None) -> CallFrame:
        """
        Run exactly ONE call frame (and, through the contract, its
        synchronous children). Raises ExecutionFailure after rolling back.
        """
        frame = CallFrame(
            tx=tx,
            depth=len(self.call_stack),
            async_depth=async_depth,
            gas=gas,
            snapshot=self.world.snapshot(),
            handles=HandleTable(owner=tx.function or "transfer"),
        )
        self.call_stack.append(frame)
        logger.debug("frame_entered", depth=frame.depth, function=tx.function, call_type=tx.call_type.value)

        try:
            if frame.depth > self.config.max_call_depth:
                raise CallDepthExceededError()
            contract, spec = self._resolve_endpoint(tx)
            cost = spec.gas_cost if spec is not None and spec.gas_cost is not None else self.config.frame_gas_cost
            gas.charge(cost)
            if move_value:
                self._move_value(tx)
            frame.state = FrameState.RUNNING
            if spec is not None:
                ctx = CallContext(self, frame, async_result)
                frame.return_data = encode_results(contract.invoke(spec, ctx, tx.arguments))
        except ExecutionFailure as err:
            self._rollback(frame)
            logger.debug("frame_rolled_back", depth=frame.depth, function=tx.function,
                         status=int(err.status), message=err.message)
            raise
        except Exception:
            # programming error in contract or host: restore, then surface as-is
            self._rollback(frame)
            raise
        finally:
            frame.handles.release()
            self.call_stack.pop()

        frame.state = FrameState.COMMITTED
        logger.debug("frame_committed", depth=frame.depth, function=tx.function, logs=len(frame.logs))
        return frame

    def prepare_call(self, parent: CallFrame, to: bytes, function: str, args: Sequence,
                     native_amount: int, transfers: Sequence[TokenTransfer],
                     gas: Optional[int], call_type: CallType):
        """
        Builds the child descriptor and carves its gas out of the parent.
        Failures here belong to the parent frame.
        """
        budget = parent.gas.remaining if gas is None else gas
        tx = self._build_call(parent.address, to, function, args, native_amount, transfers,
                              budget, parent.tx.tx_hash, call_type)
        return tx, parent.gas.reserve(budget)

    def run_child(self, parent: CallFrame, tx: TransactionDescriptor, child_gas: GasMeter,
                  move_value: bool = True) -> CallFrame:
        """
        Run a prepared child frame and merge its pending effects into the
        parent. Child failure propagates.
        """
        try:
            child = self.run_frame(tx, child_gas, parent.async_depth, move_value=move_value)
        finally:
            parent.gas.refund(child_gas)
        parent.merge_child(child)
        return child

    def call_nested(self, parent: CallFrame, to: bytes, function: str, args: Sequence,
                    native_amount: int, transfers: Sequence[TokenTransfer],
                    gas: Optional[int], call_type: CallType) -> CallFrame:
        tx, child_gas = self.prepare_call(parent, to, function, args, native_amount, transfers, gas, call_type)
        return self.run_child(parent, tx, child_gas)

    def transfer_execute(self, parent: CallFrame, to: bytes, function: str, args: Sequence,
                         native_amount: int, transfers: Sequence[TokenTransfer],
                         gas: Optional[int]) -> CallResult:
        tx, child_gas = self.prepare_call(parent, to, function, args, native_amount, transfers, gas,
                                          CallType.TRANSFER_EXECUTE)
        # value moves in the parent frame, outside the child's rollback boundary
        try:
            self._move_value(tx)
        except ExecutionFailure:
            parent.gas.refund(child_gas)
            raise
        if not function:
            parent.gas.refund(child_gas)
            return CallResult.ok([])
        try:
            child = self.run_child(parent, tx, child_gas, move_value=False)
        except ExecutionFailure as err:
            logger.info("transfer_execute_failed", to=to.hex(), function=function, message=err.message)
            return CallResult.failed(err.status, err.message)
        return CallResult.ok(child.return_data)

    def queue_async_call(self, parent: CallFrame, to: bytes, function: str, args: Sequence,
                         native_amount: int, transfers: Sequence[TokenTransfer],
                         gas: Optional[int], callback: Optional[str], callback_args: Sequence):
        if parent.async_depth >= self.config.max_async_depth:
            raise ExecutionFailure(ASYNC_DEPTH_EXCEEDED)
        budget = parent.gas.remaining if gas is None else gas
        tx = self._build_call(parent.address, to, function, args, native_amount, transfers,
                              budget, parent.tx.tx_hash, CallType.ASYNC)
        reserved = parent.gas.reserve(budget)
        parent.async_calls.append(PendingAsyncCall(
            tx=tx,
            gas=reserved,
            async_depth=parent.async_depth + 1,
            callback=callback,
            callback_args=tuple(top_encode(a) for a in callback_args),
        ))
        logger.debug("async_call_queued", to=to.hex(), function=function, callback=callback)

    def _drain_async_queue(self, meter: GasMeter, logs: list) -> List[AsyncCallRecord]:
        """
        Second pass: run deferred calls in submission order. Calls queued
        while draining go to the back of the same queue.
        """
        records = []
        while self._async_queue:
            pending = self._async_queue.popleft()
            records.append(self._run_async(pending, meter, logs))
        return records

    def _run_async(self, pending: PendingAsyncCall, meter: GasMeter, logs: list) -> AsyncCallRecord:
        try:
            frame = self.run_frame(pending.tx, pending.gas, pending.async_depth)
        except ExecutionFailure as err:
            result = CallResult.failed(err.status, err.message)
        else:
            result = CallResult.ok(frame.return_data)
            logs.extend(frame.logs)
            self._async_queue.extend(frame.async_calls)

        record = AsyncCallRecord(
            destination=pending.tx.to_address,
            function=pending.tx.function,
            result=result,
            callback=pending.callback,
        )
        leftover = pending.gas.remaining
        pending.gas.remaining = 0

        if pending.callback:
            cb_gas = GasMeter(leftover)
            if result.is_success():
                payload = list(result.return_data)
            else:
                payload = [result.message.encode("utf-8")]
            cb_tx = self._build_call(
                pending.tx.to_address, pending.tx.from_address, pending.callback,
                [top_encode_uint(int(result.status))] + payload + list(pending.callback_args),
                0, (), leftover, pending.tx.tx_hash, CallType.ASYNC_CALLBACK)
            try:
                cb_frame = self.run_frame(cb_tx, cb_gas, pending.async_depth, async_result=result)
            except ExecutionFailure as err:
                # callback failure only undoes the callback itself
                record.callback_result = CallResult.failed(err.status, err.message)
                logger.info("callback_failed", callback=pending.callback, message=err.message)
            else:
                record.callback_result = CallResult.ok(cb_frame.return_data)
                logs.extend(cb_frame.logs)
                self._async_queue.extend(cb_frame.async_calls)
            leftover = cb_gas.remaining

        meter.remaining += leftover
        return record

    def _resolve_endpoint(self, tx: TransactionDescriptor):
        """
        Returns (contract, endpoint spec), or (None, None) for a plain
        value transfer.
        """
        account = self.world.get_account(tx.to_address)
        if account is None or not account.is_contract() or not tx.function:
            return None, None
        contract = self.contracts.get(account.code)
        if contract is None:
            raise ExecutionFailure(f"contract code {account.code!r} not found", ReturnCode.CONTRACT_INVALID)
        spec = contract.find_endpoint(tx.function)
        if spec is None:
            raise FunctionNotFoundError()
        if spec.is_callback != (tx.call_type == CallType.ASYNC_CALLBACK):
            raise FunctionNotFoundError()
        return contract, spec

    def _move_value(self, tx: TransactionDescriptor):
        if not tx.has_value():
            return
        self.world.transfer_moax(tx.from_address, tx.to_address, tx.native_amount)
        for transfer in tx.token_transfers:
            self.world.transfer(tx.from_address, tx.to_address, transfer.token, transfer.nonce, transfer.amount)

    def _rollback(self, frame: CallFrame):
        self.world.restore(frame.snapshot)
        frame.discard_pending()
        frame.state = FrameState.ROLLED_BACK

    @staticmethod
    def _build_call(sender: bytes, to: bytes, function: str, args: Sequence, native_amount: int,
                    transfers: Sequence[TokenTransfer], gas_limit: int, tx_hash: bytes,
                    call_type: CallType) -> TransactionDescriptor:
        try:
            return TransactionDescriptor(
                from_address=sender,
                to_address=to,
                native_amount=native_amount,
                token_transfers=tuple(transfers),
                function=function,
                arguments=tuple(top_encode(a) for a in args),
                gas_limit=gas_limit,
                tx_hash=tx_hash,
                call_type=call_type,
            )
        except ValidationError as err:
            raise ExecutionFailure(err.errors()[0]["msg"]) from err
