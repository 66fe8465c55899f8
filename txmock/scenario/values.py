"""
txmock Scenario: Value Literals

Every value field of a fixture (addresses, amounts, arguments, storage,
expected outputs) is a literal resolved here, against one shared
InterpreterContext, so shorthands mean the same thing everywhere.

Accepted literals:
    ""                      empty bytes
    123, "1,000", "-5"      numbers, minimal big-endian (signed if negative)
    "0x0a0b"                hex
    "str:abc", "''abc"      UTF-8 text
    "address:alice"         32 bytes, name padded with "_"
    "sc:vault"              8 zero bytes + name padded with "_" to 24
    "u8:".."u64:"           fixed-width unsigned
    "i8:".."i64:"           fixed-width signed
    "biguint:5"             nested big unsigned (length prefixed)
    "nested:str:abc"        any literal, length prefixed
    "true" / "false"
    "file:out/vault.wasm"   contract code reference
    "a|b", ["a", "b"]       concatenation
"""
import os
import re
from dataclasses import dataclass
from typing import Any
from ..core.codec import (
    encode_fixed_int,
    encode_fixed_uint,
    nested_encode_biguint,
    nested_encode_bytes,
    top_encode_int,
    top_encode_uint,
)
from ..core.errors import InterpretationError
from ..core.types import ADDRESS_LENGTH

_NUMBER_RE = re.compile(r"-?[0-9][0-9,_]*")
_FIXED_WIDTHS = {"8": 1, "16": 2, "32": 4, "64": 8}
SC_ADDRESS_PREFIX_LENGTH = 8
U64_MAX = (1 << 64) - 1

@dataclass(frozen=True)
class InterpreterContext:
    """
    Shared state for interpreting one scenario file.
    """
    context_path: str = "."
    strict: bool = False              # reject conflicting alternative spellings
    default_gas_limit: int = 5_000_000

def interpret_bytes(raw: Any, ctx: InterpreterContext, path: str) -> bytes:
    if raw is None:
        return b""
    if isinstance(raw, bool):
        return b"\x01" if raw else b""
    if isinstance(raw, int):
        return top_encode_int(raw) if raw < 0 else top_encode_uint(raw)
    if isinstance(raw, list):
        return b"".join(interpret_bytes(item, ctx, f"{path}[{i}]") for i, item in enumerate(raw))
    if isinstance(raw, str):
        if "|" in raw:
            return b"".join(_interpret_string(part, ctx, path) for part in raw.split("|"))
        return _interpret_string(raw, ctx, path)
    raise InterpretationError(path, f"unsupported value type {type(raw).__name__}")

def interpret_biguint(raw: Any, ctx: InterpreterContext, path: str) -> int:
    if raw is None:
        return 0
    if isinstance(raw, int) and not isinstance(raw, bool):
        if raw < 0:
            raise InterpretationError(path, f"negative amount {raw}")
        return raw
    if isinstance(raw, str) and _NUMBER_RE.fullmatch(raw.strip()):
        value = _parse_int(raw.strip(), path)
        if value < 0:
            raise InterpretationError(path, f"negative amount {raw!r}")
        return value
    return int.from_bytes(interpret_bytes(raw, ctx, path), "big")

def interpret_u64(raw: Any, ctx: InterpreterContext, path: str) -> int:
    value = interpret_biguint(raw, ctx, path)
    if value > U64_MAX:
        raise InterpretationError(path, f"{value} does not fit in u64")
    return value

def interpret_address(raw: Any, ctx: InterpreterContext, path: str) -> bytes:
    if raw is None:
        raise InterpretationError(path, "address is required")
    value = interpret_bytes(raw, ctx, path)
    if len(value) != ADDRESS_LENGTH:
        raise InterpretationError(path, f"address must be {ADDRESS_LENGTH} bytes, got {len(value)}")
    return value

def interpret_code(raw: Any, ctx: InterpreterContext, path: str) -> str:
    """
    Contract code reference -> registry name.
    "file:../output/vault.wasm" and "vault" both resolve to "vault".
    """
    if not isinstance(raw, str) or not raw:
        raise InterpretationError(path, "code must be a non-empty string")
    ref = raw[len("file:"):] if raw.startswith("file:") else raw
    name = os.path.basename(os.path.normpath(os.path.join(ctx.context_path, ref)))
    return os.path.splitext(name)[0]

def _interpret_string(s: str, ctx: InterpreterContext, path: str) -> bytes:
    if s == "":
        return b""
    if s.startswith("str:"):
        return s[4:].encode("utf-8")
    if s.startswith("''") or s.startswith("``"):
        return s[2:].encode("utf-8")
    if s.startswith("address:"):
        return _padded_name(s[8:], ADDRESS_LENGTH, path)
    if s.startswith("sc:"):
        return bytes(SC_ADDRESS_PREFIX_LENGTH) + _padded_name(s[3:], ADDRESS_LENGTH - SC_ADDRESS_PREFIX_LENGTH, path)
    if s.startswith("file:"):
        return interpret_code(s, ctx, path).encode("utf-8")
    if s.startswith("nested:"):
        return nested_encode_bytes(interpret_bytes(s[7:], ctx, path))
    if s.startswith("biguint:"):
        return nested_encode_biguint(interpret_biguint(s[8:], ctx, path))
    prefix, sep, rest = s.partition(":")
    if sep and prefix[:1] in ("u", "i") and prefix[1:] in _FIXED_WIDTHS:
        width = _FIXED_WIDTHS[prefix[1:]]
        value = _parse_int(rest, path)
        try:
            if prefix[0] == "u":
                return encode_fixed_uint(value, width)
            return encode_fixed_int(value, width)
        except ValueError as err:
            raise InterpretationError(path, str(err)) from err
    if s.startswith("0x") or s.startswith("0X"):
        try:
            return bytes.fromhex(s[2:])
        except ValueError as err:
            raise InterpretationError(path, f"invalid hex literal {s!r}") from err
    if s == "true":
        return b"\x01"
    if s == "false":
        return b""
    if _NUMBER_RE.fullmatch(s):
        value = _parse_int(s, path)
        return top_encode_int(value) if value < 0 else top_encode_uint(value)
    raise InterpretationError(path, f"unrecognized value literal {s!r}")

def _parse_int(s: str, path: str) -> int:
    cleaned = s.replace(",", "").replace("_", "")
    try:
        return int(cleaned, 10)
    except ValueError:
        raise InterpretationError(path, f"invalid number {s!r}") from None

def _padded_name(name: str, length: int, path: str) -> bytes:
    data = name.encode("utf-8")
    if len(data) > length:
        raise InterpretationError(path, f"name {name!r} longer than {length} bytes")
    return data.ljust(length, b"_")
