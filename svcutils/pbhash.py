"""Deterministic hashing of protobuf messages and JSON values."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import math
from collections.abc import Mapping
from typing import Any

from google.protobuf import json_format
from google.protobuf.message import Message

_log = logging.getLogger(__name__)

_MAX_NORMALIZED_FLOAT_LENGTH = 1000


def _digest(tag: bytes, data: bytes) -> bytes:
    return hashlib.sha256(tag + data).digest()


def _normalize_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"could not normalize float: {value}")
    if value == 0:
        return "+0:"

    sign = "+"
    mantissa = value
    if mantissa < 0:
        sign = "-"
        mantissa = -mantissa

    exponent = 0
    while mantissa > 1:
        mantissa /= 2
        exponent += 1
    while mantissa <= 0.5:
        mantissa *= 2
        exponent -= 1

    prefix = f"{sign}{exponent}:"
    bits: list[str] = []
    while mantissa != 0:
        if mantissa >= 1:
            bits.append("1")
            mantissa -= 1
        else:
            bits.append("0")
        if mantissa >= 1 or len(prefix) + len(bits) >= _MAX_NORMALIZED_FLOAT_LENGTH:
            raise ValueError(f"could not normalize float: {value}")
        mantissa *= 2
    return prefix + "".join(bits)


def object_hash(obj: Any) -> bytes:
    """Return the 32-byte object hash of a JSON-like value.

    Dictionary keys must be strings; dictionaries hash the same whatever
    the order of their keys.
    """
    if obj is None:
        return _digest(b"n", b"")
    if isinstance(obj, bool):
        return _digest(b"b", b"1" if obj else b"0")
    if isinstance(obj, int):
        return _digest(b"i", str(obj).encode("ascii"))
    if isinstance(obj, float):
        return _digest(b"f", _normalize_float(obj).encode("ascii"))
    if isinstance(obj, str):
        return _digest(b"u", obj.encode("utf-8"))
    if isinstance(obj, (list, tuple)):
        return _digest(b"l", b"".join(object_hash(item) for item in obj))
    if isinstance(obj, Mapping):
        pairs = []
        for key, value in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"dictionary keys must be strings, not {type(key).__name__}")
            pairs.append(object_hash(key) + object_hash(value))
        return _digest(b"d", b"".join(sorted(pairs)))
    raise TypeError(f"unsupported object type: {type(obj).__name__}")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"unsupported JSON constant: {name}")


def common_json_hash(text: str) -> bytes:
    """Return the object hash of a JSON document; all numbers are hashed as floats."""
    value = json.loads(text, parse_int=float, parse_constant=_reject_constant)
    return object_hash(value)


def compute_hash(message: Message) -> bytes:
    """Return a deterministic 32-byte hash of a protobuf message.

    The message is rendered in its canonical JSON mapping, which omits
    default values, and the resulting JSON is object-hashed.
    """
    try:
        text = json_format.MessageToJson(message)
    except json_format.Error as exc:
        _log.warning("failed to marshal pb [%s] to JSON with err %s", message, exc)
        raise
    try:
        return common_json_hash(text)
    except (ValueError, TypeError) as exc:
        _log.warning("failed to hash JSON for pb [%s] with err %s", message, exc)
        raise


def compute_hash_string(message: Message) -> str:
    """Return the hash of a protobuf message as a standard base64 string."""
    return base64.b64encode(compute_hash(message)).decode("ascii")