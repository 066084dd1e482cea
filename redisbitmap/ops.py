"""
Bitwise operation vocabulary shared by the immediate and deferred APIs.

``Bitmap`` runs each call against Redis right away; ``Aggregate`` queues the
same calls into one transaction. Both implement ``BitwiseOps`` on their own.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from redisbitmap.errors import CallerError

# Redis BITOP verbs
AND = "AND"
OR = "OR"
XOR = "XOR"
NOT = "NOT"
BITOPS = (AND, OR, XOR, NOT)

# Terminal read commands for scratch-key results
GET = "GET"
BITCOUNT = "BITCOUNT"

DEFAULT_SCRATCH_KEY = "tmp"


def normalize_op(op: str) -> str:
    """
    Validate a bitwise operation name.

    Args:
        op: Operation name, any case

    Returns:
        Upper-case BITOP verb

    Raises:
        CallerError: If op is not AND, OR, XOR or NOT
    """
    verb = str(op).upper()
    if verb not in BITOPS:
        raise CallerError(f"unknown bitwise operation {op!r}, expected one of {BITOPS}")
    return verb


def check_operands(op: str, keys: Sequence[str]) -> None:
    """
    Reject operand lists Redis would refuse.

    Raises:
        CallerError: If keys is empty, or op is NOT with more than one key
    """
    if not keys:
        raise CallerError(f"{op} requires at least one key")
    if op == NOT and len(keys) != 1:
        raise CallerError(f"NOT takes exactly one key, got {len(keys)}")


def check_bit(offset: int, value: int) -> int:
    """
    Validate a SETBIT offset and coerce the value to 0/1.

    Returns:
        1 for any truthy value, else 0
    """
    if offset < 0:
        raise CallerError(f"bit offset must be non-negative, got {offset}")
    return 1 if value else 0


class BitwiseOps(ABC):
    """Set, reduce and count operations over bitmap keys."""

    @abstractmethod
    def set(self, key: str, offset: int, value: int = 1):
        """Set a single bit."""

    @abstractmethod
    def temp_bitop(self, op: str, *keys: str):
        """Reduce keys with op into a scratch key and read it back."""

    @abstractmethod
    def count(self, *keys: str):
        """Population count of one key or of the union of several."""

    def and_(self, *keys: str):
        """Bitwise intersection of keys."""
        return self.temp_bitop(AND, *keys)

    def or_(self, *keys: str):
        """Bitwise union of keys."""
        return self.temp_bitop(OR, *keys)

    def xor(self, *keys: str):
        """Bitwise difference of keys."""
        return self.temp_bitop(XOR, *keys)

    def not_(self, *keys: str):
        """Bitwise inversion of a single key."""
        return self.temp_bitop(NOT, *keys)

    intersect = and_
    union = or_
    difference = xor
