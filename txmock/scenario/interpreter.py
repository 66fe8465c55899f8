"""
txmock Scenario: Interpreter

Turns raw fixture records into typed steps in two passes:

1. collect the fields actually present in a record, keyed by their
   fixture spelling;
2. resolve fields with alternative spellings through the precedence
   tables below, then interpret every literal against the shared
   InterpreterContext.

Conflicting spellings are resolved silently by precedence unless the
context is strict. Any failure raises InterpretationError.
"""
import hashlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from pydantic import ValidationError
from ..core.errors import InterpretationError
from ..core.logger import get_logger
from ..core.token_identifier import TokenIdentifierOrNative
from ..core.types import CallType, TokenTransfer, TransactionDescriptor
from ..vm.world_state import Account
from .check import (
    CheckAccount,
    CheckAccounts,
    CheckKind,
    CheckList,
    CheckLog,
    CheckLogs,
    CheckMap,
    CheckValue,
    LogsMode,
    TxExpect,
)
from .raw import (
    AccountRaw,
    CheckLogRaw,
    CheckStateStepRaw,
    ScenarioRaw,
    SetStateStepRaw,
    TxCallRaw,
    TxDctRaw,
    TxExpectRaw,
    TxStepRaw,
)
from .values import (
    InterpreterContext,
    interpret_address,
    interpret_biguint,
    interpret_bytes,
    interpret_code,
    interpret_u64,
)

logger = get_logger("ScenarioInterpreter")

# First present spelling wins.
NATIVE_AMOUNT_PRECEDENCE = ("nativeAmount", "moaxValue", "value")
TOKEN_AMOUNT_PRECEDENCE = ("amount", "value")

STAR = "*"
PLUS = "+"

@dataclass
class SetStateStep:
    accounts: Dict[bytes, Account]
    id: str = ""
    kind: str = "setState"

@dataclass
class TxStep:
    kind: str                 # scCall | scQuery | transfer
    id: str
    tx: TransactionDescriptor
    expect: Optional[TxExpect] = None

@dataclass
class CheckStateStep:
    accounts: CheckAccounts
    id: str = ""
    kind: str = "checkState"

Step = Union[SetStateStep, TxStep, CheckStateStep]

@dataclass
class FieldSet:
    """Pass one: fields present in a raw record, by fixture spelling."""
    present: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def collect(cls, raw) -> "FieldSet":
        return cls(raw.model_dump(by_alias=True, exclude_none=True))

    def pick(self, precedence: Sequence[str], interpret: Callable, ctx: InterpreterContext, path: str):
        """
        Pass two: interpret the first present spelling of a field.
        Returns None if no spelling is present.
        """
        candidates = [(name, self.present[name]) for name in precedence if name in self.present]
        if not candidates:
            return None
        name, raw = candidates[0]
        value = interpret(raw, ctx, f"{path}.{name}")
        for other, other_raw in candidates[1:]:
            other_value = interpret(other_raw, ctx, f"{path}.{other}")
            if other_value == value:
                continue
            if ctx.strict:
                raise InterpretationError(f"{path}.{other}", f"conflicts with {name} ({other_raw!r} vs {raw!r})")
            logger.debug("field_precedence_applied", path=path, used=name, ignored=other)
        return value

def interpret_token_transfer(raw: TxDctRaw, ctx: InterpreterContext, path: str) -> TokenTransfer:
    token = TokenIdentifierOrNative.parse(interpret_bytes(raw.token_identifier, ctx, f"{path}.tokenIdentifier"))
    amount = FieldSet.collect(raw).pick(TOKEN_AMOUNT_PRECEDENCE, interpret_biguint, ctx, path)
    if amount is None:
        raise InterpretationError(path, "token transfer amount is required")
    nonce = interpret_u64(raw.nonce, ctx, f"{path}.nonce")
    return TokenTransfer(token=token, nonce=nonce, amount=amount)

def interpret_tx(raw: TxCallRaw, ctx: InterpreterContext, path: str,
                 tx_hash: bytes, call_type: CallType = CallType.DIRECT) -> TransactionDescriptor:
    fields = FieldSet.collect(raw)
    native_amount = fields.pick(NATIVE_AMOUNT_PRECEDENCE, interpret_biguint, ctx, path) or 0
    transfers = tuple(
        interpret_token_transfer(dct, ctx, f"{path}.dctValue[{i}]") for i, dct in enumerate(raw.dct_value)
    )
    arguments = tuple(
        interpret_bytes(arg, ctx, f"{path}.arguments[{i}]") for i, arg in enumerate(raw.arguments)
    )
    gas_limit = ctx.default_gas_limit if raw.gas_limit is None else interpret_u64(raw.gas_limit, ctx, f"{path}.gasLimit")
    try:
        return TransactionDescriptor(
            from_address=interpret_address(raw.from_, ctx, f"{path}.from"),
            to_address=interpret_address(raw.to, ctx, f"{path}.to"),
            native_amount=native_amount,
            token_transfers=transfers,
            function=raw.function,
            arguments=arguments,
            gas_limit=gas_limit,
            gas_price=interpret_u64(raw.gas_price, ctx, f"{path}.gasPrice"),
            tx_hash=tx_hash,
            call_type=call_type,
        )
    except ValidationError as err:
        raise InterpretationError(path, err.errors()[0]["msg"]) from err

def interpret_account(raw: AccountRaw, ctx: InterpreterContext, path: str) -> Account:
    account = Account(
        nonce=interpret_u64(raw.nonce, ctx, f"{path}.nonce"),
        balance=interpret_biguint(raw.balance, ctx, f"{path}.balance"),
    )
    for token_raw, value in _as_dict(raw.dct, f"{path}.dct").items():
        token = interpret_bytes(token_raw, ctx, f"{path}.dct")
        for nonce, amount in _dct_instances(value, ctx, f"{path}.dct[{token_raw}]"):
            if amount:
                account.dct[(token, nonce)] = amount
    for key_raw, value in _as_dict(raw.storage, f"{path}.storage").items():
        key = interpret_bytes(key_raw, ctx, f"{path}.storage")
        data = interpret_bytes(value, ctx, f"{path}.storage[{key_raw}]")
        if data:
            account.storage[key] = data
    if raw.code is not None:
        account.code = interpret_code(raw.code, ctx, f"{path}.code")
    if raw.owner is not None:
        account.owner = interpret_address(raw.owner, ctx, f"{path}.owner")
    return account

def check_number(raw: Any, ctx: InterpreterContext, path: str) -> CheckValue:
    if raw is None:
        return CheckValue.unspecified()
    if raw == STAR:
        return CheckValue.star()
    return CheckValue.equal(interpret_biguint(raw, ctx, path), raw)

def check_bytes(raw: Any, ctx: InterpreterContext, path: str) -> CheckValue:
    if raw is None:
        return CheckValue.unspecified()
    if raw == STAR:
        return CheckValue.star()
    return CheckValue.equal(interpret_bytes(raw, ctx, path), raw)

def check_list(raw: Any, ctx: InterpreterContext, path: str) -> CheckList:
    if raw is None:
        return CheckList.unspecified()
    if raw == STAR:
        return CheckList.star()
    if not isinstance(raw, list):
        raise InterpretationError(path, "expected a list or \"*\"")
    return CheckList(CheckKind.EQUAL, tuple(check_bytes(item, ctx, f"{path}[{i}]") for i, item in enumerate(raw)))

def check_log(raw: Any, ctx: InterpreterContext, path: str) -> CheckLog:
    if raw == STAR:
        return CheckLog()
    parsed = _validate(CheckLogRaw, raw, path)
    return CheckLog(
        address=check_bytes(parsed.address, ctx, f"{path}.address"),
        endpoint=check_bytes(parsed.endpoint, ctx, f"{path}.endpoint"),
        topics=check_list(parsed.topics, ctx, f"{path}.topics"),
        data=check_bytes(parsed.data, ctx, f"{path}.data"),
    )

def check_logs(raw: Any, ctx: InterpreterContext, path: str) -> CheckLogs:
    if raw is None:
        return CheckLogs()
    if raw == STAR:
        return CheckLogs(LogsMode.ANY)
    if not isinstance(raw, list):
        raise InterpretationError(path, "expected a list of logs or \"*\"")
    mode = LogsMode.EXACT
    if raw and raw[-1] == PLUS:
        mode = LogsMode.UNORDERED
        raw = raw[:-1]
    return CheckLogs(mode, tuple(check_log(item, ctx, f"{path}[{i}]") for i, item in enumerate(raw)))

def interpret_expect(raw: TxExpectRaw, ctx: InterpreterContext, path: str) -> TxExpect:
    # refund is accepted for compatibility and not checked
    return TxExpect(
        out=check_list(raw.out, ctx, f"{path}.out"),
        status=check_number(raw.status, ctx, f"{path}.status"),
        message=check_bytes(raw.message, ctx, f"{path}.message"),
        logs=check_logs(raw.logs, ctx, f"{path}.logs"),
        gas=check_number(raw.gas, ctx, f"{path}.gas"),
    )

def check_account(raw: Any, ctx: InterpreterContext, path: str) -> CheckAccount:
    if raw == STAR:
        return CheckAccount()
    parsed = _validate(AccountRaw, raw, path)
    code = CheckValue.unspecified()
    if parsed.code == STAR:
        code = CheckValue.star()
    elif parsed.code is not None:
        code = CheckValue.equal(interpret_code(parsed.code, ctx, f"{path}.code"), parsed.code)
    return CheckAccount(
        nonce=check_number(parsed.nonce, ctx, f"{path}.nonce"),
        balance=check_number(parsed.balance, ctx, f"{path}.balance"),
        dct=_check_dct(parsed.dct, ctx, f"{path}.dct"),
        storage=_check_storage(parsed.storage, ctx, f"{path}.storage"),
        code=code,
        owner=check_bytes(parsed.owner, ctx, f"{path}.owner"),
    )

def check_accounts(raw: Dict[str, Any], ctx: InterpreterContext, path: str) -> CheckAccounts:
    accounts = []
    for address_raw, value in raw.items():
        if address_raw == PLUS:
            continue
        address = interpret_address(address_raw, ctx, f"{path}[{address_raw}]")
        accounts.append((address, check_account(value, ctx, f"{path}[{address_raw}]")))
    return CheckAccounts(tuple(accounts), allow_extra=PLUS in raw)

def interpret_step(raw, ctx: InterpreterContext, index: int) -> Step:
    path = f"steps[{index}]"
    if isinstance(raw, SetStateStepRaw):
        accounts = {
            interpret_address(address, ctx, f"{path}.accounts[{address}]"):
                interpret_account(account, ctx, f"{path}.accounts[{address}]")
            for address, account in raw.accounts.items()
        }
        return SetStateStep(accounts=accounts)
    if isinstance(raw, TxStepRaw):
        if raw.step == "transfer" and raw.tx.function:
            raise InterpretationError(f"{path}.tx.function", "transfer steps cannot call a function")
        tx_hash = hashlib.sha256(f"{index}:{raw.id}".encode()).digest()
        tx = interpret_tx(raw.tx, ctx, f"{path}.tx", tx_hash)
        expect = interpret_expect(raw.expect, ctx, f"{path}.expect") if raw.expect is not None else None
        return TxStep(kind=raw.step, id=raw.id, tx=tx, expect=expect)
    if isinstance(raw, CheckStateStepRaw):
        return CheckStateStep(accounts=check_accounts(raw.accounts, ctx, f"{path}.accounts"), id=raw.id)
    raise InterpretationError(path, f"unknown step {type(raw).__name__}")

def interpret_scenario(raw: ScenarioRaw, ctx: InterpreterContext) -> List[Step]:
    return [interpret_step(step, ctx, i) for i, step in enumerate(raw.steps)]

def _check_dct(raw: Any, ctx: InterpreterContext, path: str) -> CheckMap:
    if raw is None:
        return CheckMap()
    if raw == STAR:
        return CheckMap(CheckKind.STAR)
    entries = []
    for token_raw, value in _as_dict(raw, path).items():
        if token_raw == PLUS:
            continue
        token = interpret_bytes(token_raw, ctx, path)
        if value == STAR:
            raise InterpretationError(f"{path}[{token_raw}]", "use \"+\" to allow any balance of unlisted tokens")
        for nonce, amount in _dct_instances(value, ctx, f"{path}[{token_raw}]"):
            entries.append(((token, nonce), CheckValue.equal(amount, value)))
    return CheckMap(CheckKind.EQUAL, tuple(entries), allow_extra=PLUS in raw)

def _check_storage(raw: Any, ctx: InterpreterContext, path: str) -> CheckMap:
    if raw is None:
        return CheckMap()
    if raw == STAR:
        return CheckMap(CheckKind.STAR)
    entries = []
    for key_raw, value in _as_dict(raw, path).items():
        if key_raw == PLUS:
            continue
        key = interpret_bytes(key_raw, ctx, path)
        entries.append((key, check_bytes(value, ctx, f"{path}[{key_raw}]")))
    return CheckMap(CheckKind.EQUAL, tuple(entries), allow_extra=PLUS in raw)

def _dct_instances(value: Any, ctx: InterpreterContext, path: str):
    """
    A DCT balance is either a plain amount (fungible, nonce 0) or
    {"instances": [{"nonce": ..., "balance": ...}, ...]}.
    """
    if isinstance(value, dict):
        unknown = set(value) - {"instances"}
        if unknown:
            raise InterpretationError(path, f"unknown fields {sorted(unknown)}")
        result = []
        for i, instance in enumerate(value.get("instances", [])):
            if not isinstance(instance, dict):
                raise InterpretationError(f"{path}.instances[{i}]", "expected an object")
            result.append((
                interpret_u64(instance.get("nonce"), ctx, f"{path}.instances[{i}].nonce"),
                interpret_biguint(instance.get("balance"), ctx, f"{path}.instances[{i}].balance"),
            ))
        return result
    return [(0, interpret_biguint(value, ctx, path))]

def _as_dict(raw: Any, path: str) -> Dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise InterpretationError(path, "expected an object")
    return raw

def _validate(model, raw: Any, path: str):
    try:
        return model.model_validate(raw)
    except ValidationError as err:
        raise InterpretationError(path, str(err)) from err
