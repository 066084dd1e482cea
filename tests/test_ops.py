"""Tests for operation validation helpers."""

import pytest

from redisbitmap.errors import CallerError
from redisbitmap.ops import BITOPS, check_bit, check_operands, normalize_op


class TestNormalizeOp:
    """Test BITOP verb validation."""

    def test_case_insensitive(self) -> None:
        """Test that verbs are upper-cased."""
        assert normalize_op("and") == "AND"
        assert normalize_op("Xor") == "XOR"

    def test_all_verbs(self) -> None:
        """Test that every supported verb passes."""
        for op in BITOPS:
            assert normalize_op(op) == op

    def test_unknown(self) -> None:
        """Test that other verbs are rejected."""
        with pytest.raises(CallerError):
            normalize_op("DIFF")


class TestCheckOperands:
    """Test operand arity rules."""

    def test_empty(self) -> None:
        """Test that every verb needs a key."""
        for op in BITOPS:
            with pytest.raises(CallerError):
                check_operands(op, [])

    def test_not_single(self) -> None:
        """Test that NOT needs exactly one key."""
        check_operands("NOT", ["a"])
        with pytest.raises(CallerError):
            check_operands("NOT", ["a", "b"])

    def test_many(self) -> None:
        """Test that AND/OR/XOR accept many keys."""
        for op in ("AND", "OR", "XOR"):
            check_operands(op, ["a", "b", "c"])


class TestCheckBit:
    """Test SETBIT argument checks."""

    def test_coerce(self) -> None:
        """Test that values are coerced to 0/1."""
        assert check_bit(0, True) == 1
        assert check_bit(10, 0) == 0
        assert check_bit(10, 5) == 1

    def test_negative_offset(self) -> None:
        """Test that negative offsets are rejected."""
        with pytest.raises(CallerError):
            check_bit(-1, 1)
