"""
txmock: Value Codec

Top-level and nested encoding of the handful of types contracts exchange
through arguments, return data, storage and logs.
"""
from typing import Any, List, Tuple
from .token_identifier import TokenIdentifierOrNative

def top_encode_uint(value: int) -> bytes:
    """Big-endian, minimal length. Zero encodes as empty bytes."""
    if value < 0:
        raise ValueError(f"negative value {value} for unsigned encoding")
    if value == 0:
        return b""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")

def top_encode_int(value: int) -> bytes:
    """Big-endian two's complement, minimal length."""
    if value == 0:
        return b""
    length = 1
    while not (-(1 << (8 * length - 1)) <= value < (1 << (8 * length - 1))):
        length += 1
    return value.to_bytes(length, "big", signed=True)

def top_decode_uint(data: bytes) -> int:
    return int.from_bytes(data, "big") if data else 0

def top_decode_int(data: bytes) -> int:
    return int.from_bytes(data, "big", signed=True) if data else 0

def encode_fixed_uint(value: int, width: int) -> bytes:
    if value < 0 or value >= 1 << (8 * width):
        raise ValueError(f"{value} does not fit in u{8 * width}")
    return value.to_bytes(width, "big")

def encode_fixed_int(value: int, width: int) -> bytes:
    if not -(1 << (8 * width - 1)) <= value < 1 << (8 * width - 1):
        raise ValueError(f"{value} does not fit in i{8 * width}")
    return value.to_bytes(width, "big", signed=True)

def nested_encode_bytes(data: bytes) -> bytes:
    return len(data).to_bytes(4, "big") + data

def nested_encode_biguint(value: int) -> bytes:
    return nested_encode_bytes(top_encode_uint(value))

def nested_decode_bytes(data: bytes, offset: int = 0) -> Tuple[bytes, int]:
    """Returns (value, next offset)."""
    if offset + 4 > len(data):
        raise ValueError("input too short for length prefix")
    length = int.from_bytes(data[offset:offset + 4], "big")
    start = offset + 4
    if start + length > len(data):
        raise ValueError("input too short for nested value")
    return data[start:start + length], start + length

def top_encode(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, bool):
        return b"\x01" if value else b""
    if isinstance(value, int):
        return top_encode_int(value) if value < 0 else top_encode_uint(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, TokenIdentifierOrNative):
        return value.top_encode()
    raise TypeError(f"cannot top-encode {type(value).__name__}")

def encode_results(value: Any) -> List[bytes]:
    """Endpoint return value -> list of return data entries."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [top_encode(item) for item in value]
    return [top_encode(value)]
