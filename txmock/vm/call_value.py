"""
txmock VM: Call Value

Two layers:

* CallValueHost is the engine side. It reads the payments of the current
  frame's descriptor and answers index-addressed queries by allocating
  handles in the frame's handle table.
* CallValue is what contract code sees. It fetches lazily, caches per call,
  and offers the composed helpers contracts use to state what they expect
  to be paid with.
"""
from typing import List, Tuple
from ..core.errors import (
    CardinalityError,
    ExecutionFailure,
    FungibilityError,
    NON_PAYABLE_FUNC_DCT,
    NON_PAYABLE_FUNC_MOAX,
)
from ..core.token_identifier import TokenIdentifierOrNative
from ..core.types import DctTokenType, TokenTransfer, TransactionDescriptor
from .handles import (
    CALL_VALUE_MOAX,
    CALL_VALUE_MULTI_DCT,
    CALL_VALUE_SINGLE_DCT,
    UNINITIALIZED_HANDLE,
    HandleTable,
)

class CallValueHost:
    def __init__(self, tx: TransactionDescriptor, handles: HandleTable):
        self.tx = tx
        self.handles = handles

    def check_not_payable(self):
        if self.tx.native_amount > 0:
            raise ExecutionFailure(NON_PAYABLE_FUNC_MOAX)
        if self.tx.token_transfers:
            raise ExecutionFailure(NON_PAYABLE_FUNC_DCT)

    def load_native_value(self, dest_handle: int):
        # MOAX and DCT are never sent together; a DCT call reads as 0 MOAX
        value = 0 if self.tx.token_transfers else self.tx.native_amount
        self.handles.set(dest_handle, value)

    def transfer_count(self) -> int:
        return len(self.tx.token_transfers)

    def load_single_dct_value(self, dest_handle: int):
        single = self._single_or_none()
        self.handles.set(dest_handle, 0 if single is None else single.amount)

    def token(self):
        """Identifier handle of the single transfer, None for MOAX."""
        single = self._single_or_none()
        return None if single is None else self.handles.new(single.token)

    def dct_token_nonce(self) -> int:
        single = self._single_or_none()
        return 0 if single is None else single.nonce

    def dct_token_type(self) -> DctTokenType:
        single = self._single_or_none()
        return DctTokenType.FUNGIBLE if single is None else single.token_type

    def dct_token_type_by_index(self, index: int) -> DctTokenType:
        return self._transfer(index).token_type

    def token_by_index(self, index: int) -> int:
        return self.handles.new(self._transfer(index).token)

    def nonce_by_index(self, index: int) -> int:
        return self._transfer(index).nonce

    def value_by_index(self, index: int) -> int:
        return self.handles.new(self._transfer(index).amount)

    def load_all_transfers(self, dest_handle: int):
        """
        Overwrites dest with one (identifier handle, nonce, amount handle)
        triple per transfer, in call-time order.
        """
        count = self.transfer_count()
        self.handles.set(dest_handle, [])
        dest = self.handles.get(dest_handle)
        for i in range(count):
            token_handle = self.token_by_index(i)
            nonce = self.nonce_by_index(i)
            amount_handle = self.value_by_index(i)
            dest.append((token_handle, nonce, amount_handle))

    def _single_or_none(self):
        transfers = self.tx.token_transfers
        if len(transfers) > 1:
            raise CardinalityError()
        return transfers[0] if transfers else None


    def _transfer(self, index: int) -> TokenTransfer:
        count = len(self.tx.token_transfers)
        if not 0 <= index < count:
            raise IndexError(f"transfer index {index} out of range [0, {count})")
        return self.tx.token_transfers[index]

class CallValue:
    """
    Payments received by the current call.
    """
    def __init__(self, host: CallValueHost):
        self._host = host
        self._handles = host.handles
        self._native_handle = UNINITIALIZED_HANDLE
        self._multi_handle = UNINITIALIZED_HANDLE
        self._single_handle = UNINITIALIZED_HANDLE

    def check_not_payable(self):
        self._host.check_not_payable()

    def native_value(self) -> int:
        """
        MOAX sent with the call. Will return 0 in case of a DCT transfer.
        """
        if self._native_handle == UNINITIALIZED_HANDLE:
            self._native_handle = CALL_VALUE_MOAX
            self._host.load_native_value(self._native_handle)
        return self._handles.get(self._native_handle)

    def dct_value(self) -> int:
        """
        Amount of the single DCT transfer, 0 if only MOAX was sent.
        More than one DCT transfer halts the call.
        """
        if self._single_handle == UNINITIALIZED_HANDLE:
            self._single_handle = CALL_VALUE_SINGLE_DCT
            self._host.load_single_dct_value(self._single_handle)
        return self._handles.get(self._single_handle)

    def token(self) -> TokenIdentifierOrNative:
        token_handle = self._host.token()
        if token_handle is None:
            return TokenIdentifierOrNative.native()
        return self._handles.get(token_handle)

    def dct_token_nonce(self) -> int:
        return self._host.dct_token_nonce()

    def dct_token_type(self) -> DctTokenType:
        return self._host.dct_token_type()

    def dct_token_type_by_index(self, index: int) -> DctTokenType:
        return self._host.dct_token_type_by_index(index)

    def all_token_transfers(self) -> List[TokenTransfer]:
        """
        All DCT transfers that accompany this call.
        Empty if nothing or only MOAX was sent.
        """
        if self._multi_handle == UNINITIALIZED_HANDLE:
            self._multi_handle = CALL_VALUE_MULTI_DCT
            self._host.load_all_transfers(self._multi_handle)
        return [
            TokenTransfer(
                token=self._handles.get(token_handle),
                nonce=nonce,
                amount=self._handles.get(amount_handle),
            )
            for token_handle, nonce, amount_handle in self._handles.get(self._multi_handle)
        ]

    def transfer_count(self) -> int:
        return self._host.transfer_count()

    def transfer_at(self, index: int) -> Tuple[TokenIdentifierOrNative, int, int]:
        token = self._handles.get(self._host.token_by_index(index))
        nonce = self._host.nonce_by_index(index)
        amount = self._handles.get(self._host.value_by_index(index))
        return token, nonce, amount

    def transfers_by_fixed_count(self, count: int) -> List[TokenTransfer]:
        """
        Exactly `count` transfers, e.g. `a, b = call_value.transfers_by_fixed_count(2)`.
        """
        transfers = self.all_token_transfers()
        if len(transfers) != count:
            raise CardinalityError()
        return transfers

    def single_transfer(self) -> TokenTransfer:
        """Precisely one DCT transfer, fungible or not."""
        [payment] = self.transfers_by_fixed_count(1)
        return payment

    def single_fungible_transfer(self) -> Tuple[TokenIdentifierOrNative, int]:
        payment = self.single_transfer()
        if not payment.is_fungible:
            raise FungibilityError()
        return payment.token, payment.amount

    def native_or_single_transfer(self) -> TokenTransfer:
        """
        Either a MOAX payment (possibly 0) or a single DCT transfer.
        More than one DCT transfer halts the call.
        """
        transfers = self.all_token_transfers()
        if len(transfers) == 0:
            return TokenTransfer(
                token=TokenIdentifierOrNative.native(),
                nonce=0,
                amount=self.native_value(),
            )
        if len(transfers) == 1:
            return transfers[0]
        raise CardinalityError()

    def native_or_single_fungible_transfer(self) -> Tuple[TokenIdentifierOrNative, int]:
        payment = self.native_or_single_transfer()
        if not payment.is_fungible:
            raise FungibilityError()
        return payment.token, payment.amount
