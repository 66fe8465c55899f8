"""
txmock Scenario: Result Checker

Expected-value patterns and the matching of actual execution output
against them. Every pattern is one of: unspecified (always matches),
wildcard "*" (matches any value in its position) or exact.

The checker only reports; it never touches engine state.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple
from ..core.errors import VerificationError
from ..core.types import TransactionLog
from ..vm.result import TransactionResult
from ..vm.world_state import Account, WorldState
from .verdict import CheckFailure

class CheckKind(str, Enum):
    UNSPECIFIED = "UNSPECIFIED"
    STAR = "STAR"
    EQUAL = "EQUAL"

@dataclass(frozen=True)
class Mismatch:
    path: str
    expected: Any
    actual: Any

    def at(self, step_index: int, step_id: str) -> CheckFailure:
        return CheckFailure(step_index, step_id, self.path, self.expected, self.actual)

@dataclass(frozen=True)
class CheckValue:
    kind: CheckKind
    value: Any = None
    original: Any = None

    @classmethod
    def unspecified(cls) -> "CheckValue":
        return cls(CheckKind.UNSPECIFIED)

    @classmethod
    def star(cls) -> "CheckValue":
        return cls(CheckKind.STAR, original="*")

    @classmethod
    def equal(cls, value: Any, original: Any = None) -> "CheckValue":
        return cls(CheckKind.EQUAL, value, original if original is not None else value)

    def check(self, actual: Any) -> bool:
        if self.kind == CheckKind.EQUAL:
            return self.value == actual
        return True

    def is_specified(self) -> bool:
        return self.kind != CheckKind.UNSPECIFIED

    def __str__(self):
        if self.kind == CheckKind.UNSPECIFIED:
            return "<unspecified>"
        return str(self.original)

@dataclass(frozen=True)
class CheckList:
    """Pattern for an ordered list of byte strings (topics, return data)."""
    kind: CheckKind
    items: Tuple[CheckValue, ...] = ()

    @classmethod
    def unspecified(cls) -> "CheckList":
        return cls(CheckKind.UNSPECIFIED)

    @classmethod
    def star(cls) -> "CheckList":
        return cls(CheckKind.STAR)

    def mismatch(self, actual: Sequence[bytes], path: str) -> Optional[Mismatch]:
        if self.kind != CheckKind.EQUAL:
            return None
        if len(self.items) != len(actual):
            return Mismatch(f"{path}.length", len(self.items), len(actual))
        for i, (pattern, value) in enumerate(zip(self.items, actual)):
            if not pattern.check(value):
                return Mismatch(f"{path}[{i}]", pattern.original, value)
        return None

@dataclass(frozen=True)
class CheckLog:
    address: CheckValue = CheckValue.unspecified()
    endpoint: CheckValue = CheckValue.unspecified()
    topics: CheckList = CheckList.unspecified()
    data: CheckValue = CheckValue.unspecified()

    def mismatch(self, log: TransactionLog, path: str) -> Optional[Mismatch]:
        """First field of `log` that does not satisfy this pattern."""
        for name in ("address", "endpoint", "data"):
            pattern = getattr(self, name)
            actual = getattr(log, name)
            if not pattern.check(actual):
                return Mismatch(f"{path}.{name}", pattern.original, actual)
        return self.topics.mismatch(log.topics, f"{path}.topics")

    def matches(self, log: TransactionLog) -> bool:
        return self.mismatch(log, "") is None

class LogsMode(str, Enum):
    UNSPECIFIED = "UNSPECIFIED"
    ANY = "ANY"                # "*"
    EXACT = "EXACT"            # [...]
    UNORDERED = "UNORDERED"    # [..., "+"]

@dataclass(frozen=True)
class CheckLogs:
    mode: LogsMode = LogsMode.UNSPECIFIED
    patterns: Tuple[CheckLog, ...] = ()

    def mismatch(self, logs: Sequence[TransactionLog]) -> Optional[Mismatch]:
        if self.mode in (LogsMode.UNSPECIFIED, LogsMode.ANY):
            return None
        if self.mode == LogsMode.EXACT:
            if len(self.patterns) != len(logs):
                return Mismatch("logs.length", len(self.patterns), len(logs))
            for i, (pattern, log) in enumerate(zip(self.patterns, logs)):
                found = pattern.mismatch(log, f"logs[{i}]")
                if found is not None:
                    return found
            return None
        return self._unordered_mismatch(logs)

    def _unordered_mismatch(self, logs: Sequence[TransactionLog]) -> Optional[Mismatch]:
        """
        Each pattern must claim a distinct actual log; extra logs are allowed.
        Bipartite matching, so wildcard patterns cannot starve exact ones.
        """
        candidates = [[j for j, log in enumerate(logs) if p.matches(log)] for p in self.patterns]
        owner: Dict[int, int] = {}

        def assign(i: int, seen: set) -> bool:
            for j in candidates[i]:
                if j in seen:
                    continue
                seen.add(j)
                if j not in owner or assign(owner[j], seen):
                    owner[j] = i
                    return True
            return False

        for i in range(len(self.patterns)):
            if not assign(i, set()):
                return Mismatch(f"logs[{i}]", "a matching log",
                                f"no unclaimed match among {len(logs)} logs")
        return None

@dataclass(frozen=True)
class TxExpect:
    out: CheckList = CheckList.unspecified()
    status: CheckValue = CheckValue.unspecified()
    message: CheckValue = CheckValue.unspecified()
    logs: CheckLogs = CheckLogs()
    gas: CheckValue = CheckValue.unspecified()

    def mismatch(self, result: TransactionResult) -> Optional[Mismatch]:
        if not self.status.check(int(result.status)):
            return Mismatch("status", self.status.original, f"{int(result.status)} ({result.message})")
        if not self.message.check(result.message.encode("utf-8")):
            return Mismatch("message", self.message.original, result.message)
        found = self.out.mismatch(result.return_data, "out")
        if found is not None:
            return found
        found = self.logs.mismatch(result.logs)
        if found is not None:
            return found
        if not self.gas.check(result.gas_remaining):
            return Mismatch("gas", self.gas.original, result.gas_remaining)
        return None

@dataclass(frozen=True)
class CheckMap:
    """
    Pattern for a keyed collection (storage, DCT balances).
    `allow_extra` corresponds to a "+" key in the fixture.
    """
    kind: CheckKind = CheckKind.UNSPECIFIED
    entries: Tuple[Tuple[Any, CheckValue], ...] = ()
    allow_extra: bool = False

    def mismatch(self, actual: Dict[Any, Any], path: str, empty: Any) -> Optional[Mismatch]:
        if self.kind != CheckKind.EQUAL:
            return None
        listed = set()
        for key, pattern in self.entries:
            listed.add(key)
            value = actual.get(key, empty)
            if not pattern.check(value):
                return Mismatch(f"{path}[{_key_repr(key)}]", pattern.original, value)
        if not self.allow_extra:
            for key in sorted(actual, key=_key_repr):
                if key not in listed and actual[key] != empty:
                    return Mismatch(f"{path}[{_key_repr(key)}]", "absent", actual[key])
        return None

@dataclass(frozen=True)
class CheckAccount:
    nonce: CheckValue = CheckValue.unspecified()
    balance: CheckValue = CheckValue.unspecified()
    dct: CheckMap = CheckMap()
    storage: CheckMap = CheckMap()
    code: CheckValue = CheckValue.unspecified()
    owner: CheckValue = CheckValue.unspecified()

    def mismatch(self, account: Account, path: str) -> Optional[Mismatch]:
        for name in ("nonce", "balance", "code", "owner"):
            pattern = getattr(self, name)
            actual = getattr(account, name)
            if not pattern.check(actual):
                return Mismatch(f"{path}.{name}", pattern.original, actual)
        found = self.dct.mismatch(account.dct, f"{path}.dct", 0)
        if found is not None:
            return found
        return self.storage.mismatch(account.storage, f"{path}.storage", b"")

@dataclass(frozen=True)
class CheckAccounts:
    accounts: Tuple[Tuple[bytes, CheckAccount], ...] = ()
    allow_extra: bool = False

    def mismatch(self, world: WorldState) -> Optional[Mismatch]:
        listed = set()
        for address, pattern in self.accounts:
            listed.add(address)
            path = f"accounts[{_key_repr(address)}]"
            account = world.get_account(address)
            if account is None:
                return Mismatch(path, "existing account", "missing")
            found = pattern.mismatch(account, path)
            if found is not None:
                return found
        if not self.allow_extra:
            for address in sorted(world.accounts):
                if address not in listed:
                    return Mismatch(f"accounts[{_key_repr(address)}]", "absent", "unexpected account")
        return None

def assert_result(result: TransactionResult, expect: TxExpect, step_index: int = 0, step_id: str = ""):
    """Raises VerificationError on the first mismatch, located at the given step."""
    found = expect.mismatch(result)
    if found is not None:
        raise VerificationError(found.at(step_index, step_id))

def _key_repr(key: Any) -> str:
    if isinstance(key, tuple):
        return ":".join(_key_repr(k) for k in key)
    if isinstance(key, (bytes, bytearray)):
        try:
            text = bytes(key).decode("ascii")
            if text.isprintable():
                return text
        except UnicodeDecodeError:
            pass
        return "0x" + bytes(key).hex()
    return str(key)
