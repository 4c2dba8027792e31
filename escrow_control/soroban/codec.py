"""
Value codec — native Python values ⇄ Soroban SCVal.

Pure, no I/O. Encoding is driven by a declared type so that the same
Python value can be sent as different ledger types (a str can be a
symbol or an address). Decoding is driven by the SCVal's own type tag.

Declared types:
    - ``"symbol"``   str matching [A-Za-z0-9_]{1,32}
    - ``"address"``  G... account or C... contract strkey
    - ``"i128"``     int, or a decimal string; never a float
    - ``"bool"``     bool
    - record        a mapping of field name → declared type; the value is
                    a dict with exactly those fields. Encoded as an SCV_MAP
                    with symbol keys in sorted order (the layout Soroban
                    uses for contract structs).

Round-trip law:
    decode(encode(v, t)) == v for every supported t, with i128 values
    compared as int.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Union

from stellar_sdk import Address, scval
from stellar_sdk import xdr as stellar_xdr

from escrow_control.errors import EncodingError


class ValueType(StrEnum):
    """Scalar ledger types supported by encode()."""

    SYMBOL = "symbol"
    ADDRESS = "address"
    I128 = "i128"
    BOOL = "bool"


TypeSpec = Union[ValueType, str, Mapping[str, Any]]

I128_MIN = -(2**127)
I128_MAX = 2**127 - 1

_SYMBOL_RE = re.compile(r"[A-Za-z0-9_]{1,32}")
_INTEGER_RE = re.compile(r"[+-]?\d+")

# Field layout of the escrow contract's Escrow struct.
ESCROW_RECORD: Mapping[str, ValueType] = {
    "id": ValueType.SYMBOL,
    "sender": ValueType.ADDRESS,
    "receiver": ValueType.ADDRESS,
    "amount": ValueType.I128,
    "completed": ValueType.BOOL,
}


# =========================================================================
# Encoding
# =========================================================================


def to_i128_int(value: object) -> int:
    """Coerce an int or decimal string to an int in the i128 range.

    Raises:
        EncodingError: On floats, non-numeric strings, or out-of-range values.
    """
    if isinstance(value, bool):
        raise EncodingError(f"i128 value must be an integer, got bool: {value!r}")
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not _INTEGER_RE.fullmatch(text):
            raise EncodingError(f"i128 value must be a decimal integer string, got: {value!r}")
        number = int(text)
    else:
        raise EncodingError(
            f"i128 value must be int or decimal string, got {type(value).__name__}: {value!r}"
        )
    if not I128_MIN <= number <= I128_MAX:
        raise EncodingError(f"i128 value out of range: {number}")
    return number


def _encode_scalar(value: object, value_type: ValueType) -> stellar_xdr.SCVal:
    if value_type is ValueType.SYMBOL:
        if not isinstance(value, str) or not _SYMBOL_RE.fullmatch(value):
            raise EncodingError(
                f"symbol must be 1-32 chars [A-Za-z0-9_], got: {value!r}"
            )
        return scval.to_symbol(value)

    if value_type is ValueType.ADDRESS:
        if not isinstance(value, str):
            raise EncodingError(f"address must be a strkey string, got: {value!r}")
        try:
            address = Address(value)
        except Exception as exc:
            raise EncodingError(f"invalid address {value!r}: {exc}") from exc
        return scval.to_address(address)

    if value_type is ValueType.I128:
        return scval.to_int128(to_i128_int(value))

    if not isinstance(value, bool):
        raise EncodingError(f"bool value must be True or False, got: {value!r}")
    return scval.to_bool(value)


def _encode_record(value: object, schema: Mapping[str, Any]) -> stellar_xdr.SCVal:
    if not isinstance(value, Mapping):
        raise EncodingError(f"record value must be a mapping, got: {type(value).__name__}")
    missing = sorted(set(schema) - set(value))
    extra = sorted(set(value) - set(schema))
    if missing or extra:
        raise EncodingError(
            f"record fields mismatch (missing={missing}, unexpected={extra})"
        )
    entries = [
        stellar_xdr.SCMapEntry(
            key=_encode_scalar(name, ValueType.SYMBOL),
            val=encode(value[name], schema[name]),
        )
        for name in sorted(schema)
    ]
    return stellar_xdr.SCVal(
        type=stellar_xdr.SCValType.SCV_MAP,
        map=stellar_xdr.SCMap(sc_map=entries),
    )


def encode(value: object, declared_type: TypeSpec) -> stellar_xdr.SCVal:
    """Encode a native value as an SCVal of the declared type.

    Args:
        value: Native Python value.
        declared_type: A ValueType (or its string name) or a record schema.

    Returns:
        The encoded SCVal.

    Raises:
        EncodingError: If the value does not match the declared type, or
            the declared type is unknown.
    """
    if isinstance(declared_type, Mapping):
        return _encode_record(value, declared_type)
    try:
        value_type = ValueType(declared_type)
    except ValueError:
        raise EncodingError(f"unsupported declared type: {declared_type!r}") from None
    return _encode_scalar(value, value_type)


# =========================================================================
# Decoding
# =========================================================================

_T = stellar_xdr.SCValType


def decode(value: stellar_xdr.SCVal) -> Any:
    """Decode an SCVal into a native Python value.

    Mapping:
        void → None, bool → bool, integers → int, symbol → str,
        string → str (UTF-8), address → strkey str, vec → list,
        map → dict (keys decoded recursively).

    Raises:
        EncodingError: For SCVal types with no native counterpart here.
    """
    kind = value.type
    if kind == _T.SCV_VOID:
        return None
    if kind == _T.SCV_BOOL:
        return scval.from_bool(value)
    if kind == _T.SCV_SYMBOL:
        return scval.from_symbol(value)
    if kind == _T.SCV_STRING:
        raw = scval.from_string(value)
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw
    if kind == _T.SCV_ADDRESS:
        return scval.from_address(value).address
    if kind == _T.SCV_I128:
        return scval.from_int128(value)
    if kind == _T.SCV_U128:
        return scval.from_uint128(value)
    if kind == _T.SCV_U32:
        return scval.from_uint32(value)
    if kind == _T.SCV_I32:
        return scval.from_int32(value)
    if kind == _T.SCV_U64:
        return scval.from_uint64(value)
    if kind == _T.SCV_I64:
        return scval.from_int64(value)
    if kind == _T.SCV_VEC:
        items = value.vec.sc_vec if value.vec is not None else []
        return [decode(item) for item in items]
    if kind == _T.SCV_MAP:
        entries = value.map.sc_map if value.map is not None else []
        return {decode(entry.key): decode(entry.val) for entry in entries}
    raise EncodingError(f"unsupported SCVal type: {kind}")


# =========================================================================
# Wire helpers
# =========================================================================


def to_wire(value: stellar_xdr.SCVal) -> str:
    """Base64 XDR of an SCVal."""
    return value.to_xdr()


def from_wire(data: str) -> stellar_xdr.SCVal:
    """Parse a base64 XDR SCVal.

    Raises:
        EncodingError: If the data is not a valid SCVal.
    """
    try:
        return stellar_xdr.SCVal.from_xdr(data)
    except Exception as exc:
        raise EncodingError(f"invalid SCVal XDR: {exc}") from exc
