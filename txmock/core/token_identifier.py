"""
txmock: MOAX-or-DCT Token Identifier

Either the native coin (MOAX) or an issued DCT token identifier.
In memory this is an explicit two-variant value. At the serialization
boundary MOAX is written as the reserved 4-byte marker b"MOAX", so a DCT
identifier spelled exactly "MOAX" cannot be told apart from the native coin.
"""
import re
from enum import Enum
from functools import total_ordering
from typing import Optional, Union
from .errors import ExecutionFailure

MOAX_REPRESENTATION = b"MOAX"

# ticker (3-10 upper alphanumeric) + '-' + 6 lowercase hex chars
_DCT_IDENTIFIER_RE = re.compile(rb"[A-Z0-9]{3,10}-[0-9a-f]{6}")

class TokenKind(str, Enum):
    MOAX = "MOAX"
    DCT = "DCT"

@total_ordering
class TokenIdentifierOrNative:
    __slots__ = ("_kind", "_identifier")

    def __init__(self, kind: TokenKind, identifier: bytes = b""):
        if kind == TokenKind.MOAX and identifier:
            raise ValueError("MOAX carries no identifier")
        self._kind = kind
        self._identifier = bytes(identifier)

    @classmethod
    def native(cls) -> "TokenIdentifierOrNative":
        return cls(TokenKind.MOAX)

    @classmethod
    def token(cls, identifier: Union[bytes, str]) -> "TokenIdentifierOrNative":
        if isinstance(identifier, str):
            identifier = identifier.encode()
        return cls(TokenKind.DCT, identifier)

    @classmethod
    def parse(cls, data: Union[bytes, str]) -> "TokenIdentifierOrNative":
        """
        The reserved marker parses as MOAX; anything else is wrapped as a DCT
        identifier without validation.
        """
        if isinstance(data, str):
            data = data.encode()
        if data == MOAX_REPRESENTATION:
            return cls.native()
        return cls.token(data)

    def is_native(self) -> bool:
        return self._kind == TokenKind.MOAX

    def is_token(self) -> bool:
        return self._kind == TokenKind.DCT

    def is_valid(self) -> bool:
        """MOAX is always valid; DCT identifiers must match TICKER-abcdef."""
        if self.is_native():
            return True
        return _DCT_IDENTIFIER_RE.fullmatch(self._identifier) is not None

    def name(self) -> bytes:
        """Wire representation."""
        if self.is_native():
            return MOAX_REPRESENTATION
        return self._identifier

    def as_token_option(self) -> Optional[bytes]:
        return None if self.is_native() else self._identifier

    def unwrap_token(self) -> bytes:
        if self.is_native():
            raise ExecutionFailure("DCT expected")
        return self._identifier

    def top_encode(self) -> bytes:
        return self.name()

    def nested_encode(self) -> bytes:
        name = self.name()
        return len(name).to_bytes(4, "big") + name

    def __eq__(self, other):
        if not isinstance(other, TokenIdentifierOrNative):
            return NotImplemented
        return self.name() == other.name()

    def __lt__(self, other):
        if not isinstance(other, TokenIdentifierOrNative):
            return NotImplemented
        return self.name() < other.name()

    def __hash__(self):
        return hash(self.name())

    def __str__(self):
        return self.name().decode("utf-8", errors="replace")

    def __repr__(self):
        if self.is_native():
            return "TokenIdentifierOrNative.native()"
        return f"TokenIdentifierOrNative.token({self._identifier!r})"
