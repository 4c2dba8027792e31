"""
Tests for the Soroban value codec.

Test plan:
- Round-trip: symbol, address (account + contract), i128 (0, max, min,
  negative), bool, escrow record
- i128 accepts decimal strings, rejects floats / non-numeric / out-of-range
- Symbols, addresses, bools and records are validated
- Decode covers void and vec; wire helpers parse base64 XDR
"""

import pytest
from stellar_sdk import Keypair, StrKey, scval

from escrow_control.errors import EncodingError
from escrow_control.soroban.codec import (
    ESCROW_RECORD,
    I128_MAX,
    I128_MIN,
    ValueType,
    decode,
    encode,
    from_wire,
    to_i128_int,
    to_wire,
)

ACCOUNT = Keypair.random().public_key
RECEIVER = Keypair.random().public_key
CONTRACT = StrKey.encode_contract(b"\x07" * 32)


def _escrow(**overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "id": "escrow_1",
        "sender": ACCOUNT,
        "receiver": RECEIVER,
        "amount": 1_000_000,
        "completed": False,
    }
    record.update(overrides)
    return record


class TestRoundTrip:
    @pytest.mark.parametrize(
        ("value", "declared"),
        [
            ("escrow_1", ValueType.SYMBOL),
            ("A" * 32, ValueType.SYMBOL),
            (ACCOUNT, ValueType.ADDRESS),
            (CONTRACT, ValueType.ADDRESS),
            (0, ValueType.I128),
            (I128_MAX, ValueType.I128),
            (I128_MIN, ValueType.I128),
            (-42, ValueType.I128),
            (True, ValueType.BOOL),
            (False, ValueType.BOOL),
        ],
    )
    def test_scalar_round_trip(self, value: object, declared: ValueType) -> None:
        assert decode(encode(value, declared)) == value

    def test_declared_type_by_name(self) -> None:
        assert decode(encode("escrow_1", "symbol")) == "escrow_1"
        assert decode(encode(5, "i128")) == 5

    def test_record_round_trip(self) -> None:
        record = _escrow()
        assert decode(encode(record, ESCROW_RECORD)) == record

    def test_record_with_max_amount_and_completed(self) -> None:
        record = _escrow(amount=I128_MAX, completed=True)
        assert decode(encode(record, ESCROW_RECORD)) == record

    def test_wire_round_trip(self) -> None:
        record = _escrow(amount=0)
        assert decode(from_wire(to_wire(encode(record, ESCROW_RECORD)))) == record


class TestI128:
    def test_decimal_string_is_accepted(self) -> None:
        assert decode(encode("170141183460469231731687303715884105727", ValueType.I128)) == I128_MAX

    def test_amount_never_loses_precision(self) -> None:
        big = 123456789012345678901234567890
        assert decode(encode(str(big), ValueType.I128)) == big

    @pytest.mark.parametrize("bad", ["12abc", "", "1.5", "0x10", "one"])
    def test_non_numeric_string_rejected(self, bad: str) -> None:
        with pytest.raises(EncodingError):
            encode(bad, ValueType.I128)

    def test_float_rejected(self) -> None:
        with pytest.raises(EncodingError):
            encode(10.0, ValueType.I128)

    def test_bool_rejected(self) -> None:
        with pytest.raises(EncodingError):
            to_i128_int(True)

    def test_out_of_range_rejected(self) -> None:
        with pytest.raises(EncodingError):
            encode(I128_MAX + 1, ValueType.I128)
        with pytest.raises(EncodingError):
            encode(I128_MIN - 1, ValueType.I128)

    def test_encoding_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            encode("nope", ValueType.I128)


class TestValidation:
    @pytest.mark.parametrize(
        "bad", ["", "has space", "x" * 33, "dash-ed", 7, "escrow_1\n", "\nescrow_1"]
    )
    def test_invalid_symbol(self, bad: object) -> None:
        with pytest.raises(EncodingError):
            encode(bad, ValueType.SYMBOL)

    @pytest.mark.parametrize("bad", ["GABC", "not-an-address", 123])
    def test_invalid_address(self, bad: object) -> None:
        with pytest.raises(EncodingError):
            encode(bad, ValueType.ADDRESS)

    def test_bool_requires_bool(self) -> None:
        with pytest.raises(EncodingError):
            encode(1, ValueType.BOOL)

    def test_unknown_declared_type(self) -> None:
        with pytest.raises(EncodingError):
            encode("x", "u256")

    def test_record_missing_field(self) -> None:
        record = _escrow()
        del record["completed"]
        with pytest.raises(EncodingError):
            encode(record, ESCROW_RECORD)

    def test_record_extra_field(self) -> None:
        with pytest.raises(EncodingError):
            encode(_escrow(memo="x"), ESCROW_RECORD)

    def test_record_requires_mapping(self) -> None:
        with pytest.raises(EncodingError):
            encode(["escrow_1"], ESCROW_RECORD)

    def test_record_field_type_checked(self) -> None:
        with pytest.raises(EncodingError):
            encode(_escrow(amount="lots"), ESCROW_RECORD)


class TestDecode:
    def test_void_is_none(self) -> None:
        assert decode(scval.to_void()) is None

    def test_vec(self) -> None:
        value = scval.to_vec([scval.to_bool(True), scval.to_symbol("abc")])
        assert decode(value) == [True, "abc"]

    def test_string(self) -> None:
        assert decode(scval.to_string("hello")) == "hello"

    def test_u32(self) -> None:
        assert decode(scval.to_uint32(7)) == 7

    def test_invalid_wire_data(self) -> None:
        with pytest.raises(EncodingError):
            from_wire("AA==")
