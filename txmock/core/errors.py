"""
txmock: Error Taxonomy

Contract-level failures carry a VM return code and message and trigger
rollback of the failing frame. Interpretation and verification errors never
reach the engine.
"""
from enum import IntEnum
from typing import Optional

class ReturnCode(IntEnum):
    OK = 0
    FUNCTION_NOT_FOUND = 1
    FUNCTION_WRONG_SIGNATURE = 2
    CONTRACT_NOT_FOUND = 3
    USER_ERROR = 4
    OUT_OF_GAS = 5
    ACCOUNT_COLLISION = 6
    OUT_OF_FUNDS = 7
    CALL_STACK_OVERFLOW = 8
    CONTRACT_INVALID = 9
    EXECUTION_FAILED = 10

# Messages signalled by the call value resolver and the engine
INCORRECT_NUM_DCT_TRANSFERS = "incorrect number of DCT transfers"
FUNGIBLE_TOKEN_EXPECTED = "fungible DCT token expected"
NON_PAYABLE_FUNC_MOAX = "function does not accept MOAX payment"
NON_PAYABLE_FUNC_DCT = "function does not accept DCT payment"
FUNCTION_NOT_FOUND = "invalid function (not found)"
NOT_ENOUGH_GAS = "not enough gas"
INSUFFICIENT_FUNDS = "insufficient funds"
MAX_CALL_DEPTH = "max call depth exceeded"
ASYNC_DEPTH_EXCEEDED = "async call depth exceeded"
WRONG_NUM_ARGUMENTS = "wrong number of arguments"

class TxMockError(Exception):
    """Base class for all txmock errors."""

class ExecutionFailure(TxMockError):
    """
    Contract logic signalled an error, or the host refused an operation.
    Fatal to the current call frame, which is rolled back.
    """
    status: ReturnCode = ReturnCode.USER_ERROR

    def __init__(self, message: str, status: Optional[ReturnCode] = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = ReturnCode(status)

    def __repr__(self):
        return f"{type(self).__name__}(status={int(self.status)}, message={self.message!r})"

class CardinalityError(ExecutionFailure):
    def __init__(self, message: str = INCORRECT_NUM_DCT_TRANSFERS):
        super().__init__(message)

class FungibilityError(ExecutionFailure):
    def __init__(self, message: str = FUNGIBLE_TOKEN_EXPECTED):
        super().__init__(message)

class ArgumentCountError(ExecutionFailure):
    def __init__(self, message: str = WRONG_NUM_ARGUMENTS):
        super().__init__(message)

class OutOfGasError(ExecutionFailure):
    status = ReturnCode.OUT_OF_GAS

    def __init__(self, message: str = NOT_ENOUGH_GAS):
        super().__init__(message)

class InsufficientFundsError(ExecutionFailure):
    status = ReturnCode.OUT_OF_FUNDS

    def __init__(self, message: str = INSUFFICIENT_FUNDS):
        super().__init__(message)

class FunctionNotFoundError(ExecutionFailure):
    status = ReturnCode.FUNCTION_NOT_FOUND

    def __init__(self, message: str = FUNCTION_NOT_FOUND):
        super().__init__(message)

class CallDepthExceededError(ExecutionFailure):
    status = ReturnCode.CALL_STACK_OVERFLOW

    def __init__(self, message: str = MAX_CALL_DEPTH):
        super().__init__(message)

class InterpretationError(TxMockError):
    """
    A fixture field could not be resolved to a typed value.
    Raised while loading, so no partial scenario ever runs.
    """
    def __init__(self, path: str, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message

class VerificationError(TxMockError):
    """Actual output did not satisfy the expected check patterns."""
    def __init__(self, failure):
        super().__init__(failure.describe())
        self.failure = failure
