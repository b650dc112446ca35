"""Unit tests for argument coercion and result formatting."""

from __future__ import annotations

import pytest

from ntdbank.errors import ValidationError
from ntdbank.units import (
    ADDRESS,
    ADDRESS_LIST,
    AMOUNT,
    AMOUNT_LIST,
    BOOL,
    BYTES4,
    BYTES32,
    UINT,
    UINT_LIST,
    coerce_argument,
    format_units,
    parse_units,
    render_value,
)

ALICE = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
BOB = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
MINTER_ROLE = "0x9f2df0fed2c77648de5860a4cc508cd0818c85b8b8a1ab4ceeef8d981c8956a6"


class TestParseUnits:
    def test_whole_amount(self) -> None:
        assert parse_units("10") == 10 * 10**18

    def test_fractional_amount(self) -> None:
        assert parse_units("1.5") == 1_500_000_000_000_000_000
        assert parse_units("0.000000000000000001") == 1

    def test_large_amount_is_exact(self) -> None:
        assert parse_units("123456789012.123456789012345678") == 123456789012123456789012345678

    def test_custom_decimals(self) -> None:
        assert parse_units("2.5", decimals=6) == 2_500_000

    @pytest.mark.parametrize("text", ["", "abc", "-1", "NaN", "Infinity"])
    def test_rejects_bad_input(self, text: str) -> None:
        with pytest.raises(ValidationError):
            parse_units(text)

    def test_rejects_too_many_decimals(self) -> None:
        with pytest.raises(ValidationError, match="decimal places"):
            parse_units("0.0000000000000000001")


class TestFormatUnits:
    def test_whole_amount_has_no_fraction(self) -> None:
        assert format_units(10 * 10**18) == "10"

    def test_trailing_zeros_trimmed(self) -> None:
        assert format_units(1_500_000_000_000_000_000) == "1.5"

    def test_smallest_unit(self) -> None:
        assert format_units(1) == "0.000000000000000001"

    def test_zero(self) -> None:
        assert format_units(0) == "0"

    def test_inverse_of_parse(self) -> None:
        for text in ("10", "0.25", "1000000", "3.14159"):
            assert format_units(parse_units(text)) == text


class TestCoerceArgument:
    def test_address_returned_unchanged(self) -> None:
        assert coerce_argument(ADDRESS, ALICE) == ALICE
        assert coerce_argument(ADDRESS, f"  {BOB} ") == BOB

    def test_bad_address(self) -> None:
        with pytest.raises(ValidationError):
            coerce_argument(ADDRESS, "0x1234")

    def test_bytes32(self) -> None:
        value = coerce_argument(BYTES32, MINTER_ROLE)
        assert isinstance(value, bytes)
        assert len(value) == 32

    def test_bytes32_wrong_width(self) -> None:
        with pytest.raises(ValidationError, match="Expected 32 bytes"):
            coerce_argument(BYTES32, "0x1234")

    def test_bytes4(self) -> None:
        assert coerce_argument(BYTES4, "0x01ffc9a7") == bytes.fromhex("01ffc9a7")

    def test_uint(self) -> None:
        assert coerce_argument(UINT, "42") == 42
        assert coerce_argument(UINT, "0x10") == 16

    def test_uint_rejects_negative(self) -> None:
        with pytest.raises(ValidationError):
            coerce_argument(UINT, "-3")

    def test_amount_is_scaled(self) -> None:
        assert coerce_argument(AMOUNT, "10") == 10 * 10**18

    def test_amount_raw_units(self) -> None:
        assert coerce_argument(AMOUNT, "10", raw_units=True) == 10
        assert coerce_argument(AMOUNT_LIST, "1,2", raw_units=True) == [1, 2]

    def test_lists(self) -> None:
        assert coerce_argument(ADDRESS_LIST, f"{ALICE}, {BOB}") == [ALICE, BOB]
        assert coerce_argument(UINT_LIST, "0,1, 2") == [0, 1, 2]
        assert coerce_argument(AMOUNT_LIST, "1,0.5") == [10**18, 5 * 10**17]

    def test_bool(self) -> None:
        assert coerce_argument(BOOL, "true") is True
        assert coerce_argument(BOOL, "No") is False
        with pytest.raises(ValidationError):
            coerce_argument(BOOL, "maybe")


class TestRenderValue:
    def test_scalars(self) -> None:
        assert render_value(b"\x01\x02") == "0x0102"
        assert render_value(2**255) == str(2**255)
        assert render_value(True) is True
        assert render_value("NTD") == "NTD"

    def test_containers(self) -> None:
        value = {"users": (ALICE, BOB), "depositIds": [1, 2]}
        assert render_value(value) == {"users": [ALICE, BOB], "depositIds": ["1", "2"]}

    def test_address_and_role_survive_round_trip(self) -> None:
        assert render_value(coerce_argument(ADDRESS, ALICE)) == ALICE
        assert render_value(coerce_argument(BYTES32, MINTER_ROLE)) == MINTER_ROLE

    def test_role_hex_is_rendered_lowercase(self) -> None:
        upper = "0x" + MINTER_ROLE[2:].upper()
        assert render_value(coerce_argument(BYTES32, upper)) == MINTER_ROLE
        assert render_value(coerce_argument(BYTES4, "0x01FFC9A7")) == "0x01ffc9a7"
