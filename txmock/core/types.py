from enum import Enum, IntEnum
from typing import Tuple
from pydantic import BaseModel, ConfigDict, Field, model_validator
from .token_identifier import TokenIdentifierOrNative

H256_ZERO = bytes(32)
ADDRESS_LENGTH = 32

class CallType(str, Enum):
    DIRECT = "DIRECT"
    SYNC = "SYNC"
    ASYNC = "ASYNC"
    ASYNC_CALLBACK = "ASYNC_CALLBACK"
    TRANSFER_EXECUTE = "TRANSFER_EXECUTE"

class DctTokenType(IntEnum):
    """
    Token type as reported to contracts. MOAX reports FUNGIBLE.
    """
    FUNGIBLE = 0
    NON_FUNGIBLE = 1
    SEMI_FUNGIBLE = 2
    META = 3
    INVALID = 4

class TokenTransfer(BaseModel):
    """
    One payment: token, nonce (0 for fungible and MOAX) and amount.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    token: TokenIdentifierOrNative
    nonce: int = Field(default=0, ge=0)
    amount: int = Field(ge=0)

    @property
    def is_fungible(self) -> bool:
        return self.nonce == 0

    @property
    def token_type(self) -> DctTokenType:
        # no token metadata in the mock: any nonce > 0 is an NFT
        return DctTokenType.FUNGIBLE if self.nonce == 0 else DctTokenType.NON_FUNGIBLE

    def as_tuple(self) -> Tuple[TokenIdentifierOrNative, int, int]:
        return (self.token, self.nonce, self.amount)

class TransactionDescriptor(BaseModel):
    """
    Canonical form of one call. One instance per call frame.
    Immutable once created.
    """
    model_config = ConfigDict(frozen=True)

    from_address: bytes
    to_address: bytes
    native_amount: int = Field(default=0, ge=0)
    token_transfers: Tuple[TokenTransfer, ...] = ()
    function: str = ""
    arguments: Tuple[bytes, ...] = ()
    gas_limit: int = Field(ge=0)
    gas_price: int = Field(default=0, ge=0)
    tx_hash: bytes = H256_ZERO
    call_type: CallType = CallType.DIRECT

    @model_validator(mode="after")
    def _check_payments(self):
        for index, transfer in enumerate(self.token_transfers):
            # a zero-amount transfer is not a transfer
            if transfer.amount == 0:
                raise ValueError(f"token transfer {index} has zero amount")
        if self.native_amount > 0 and self.token_transfers:
            raise ValueError("cannot send MOAX and DCT tokens in the same call")
        return self

    def has_value(self) -> bool:
        return self.native_amount > 0 or bool(self.token_transfers)

    def __str__(self):
        return (f"TransactionDescriptor {{ func: {self.function}, args: {[a.hex() for a in self.arguments]}, "
                f"call_value: {self.native_amount}, dct_value: {[t.as_tuple() for t in self.token_transfers]}, "
                f"from: 0x{self.from_address.hex()}, to: 0x{self.to_address.hex()} }}")

class TransactionLog(BaseModel):
    """
    Entry emitted by contract code. Never mutated after being appended.
    """
    model_config = ConfigDict(frozen=True)

    address: bytes
    endpoint: bytes
    topics: Tuple[bytes, ...] = ()
    data: bytes = b""
