"""
Bit array decoded from Redis string values.

This module provides the in-memory view of a Redis bitmap together with
static bitwise algebra over plain bit lists and population counting.

Bit Numbering Convention (Redis SETBIT/GETBIT):
- Bit 0 = MSB of byte 0 (first bit of the stored string)
- Bit 8 = MSB of byte 1, and so on

Bit arrays decoded from a buffer are always a multiple of 8 bits long.
Results of the static algebra are plain lists and may be any length.
"""

from typing import Iterable, Iterator, List, Optional, Sequence

from redisbitmap.errors import CallerError


def longest(*seqs: Sequence[int]) -> Sequence[int]:
    """
    Find the longest sequence in the argument list.

    On ties the last candidate wins.

    Args:
        *seqs: Sequences to compare by length

    Returns:
        The longest sequence
    """
    if not seqs:
        raise CallerError("at least one bit array is required")

    result = seqs[0]
    for seq in seqs:
        if len(seq) >= len(result):
            result = seq
    return result


def popcount32(x: int) -> int:
    """
    Count set bits in a 32-bit word (SWAR).

    Args:
        x: Word value; bits above 31 are ignored

    Returns:
        Number of bits set to 1
    """
    x &= 0xFFFFFFFF
    x -= (x >> 1) & 0x55555555
    x = ((x >> 2) & 0x33333333) + (x & 0x33333333)
    x = ((x >> 4) + x) & 0x0F0F0F0F
    x += x >> 8
    x += x >> 16
    return x & 0x0000003F


def popcount_buffer(buf: bytes) -> int:
    """
    Count set bits in a buffer, four octets at a time.

    Each quartet is assembled as a little-endian word. A trailing partial
    word is zero-padded.

    Args:
        buf: Raw bytes

    Returns:
        Number of bits set to 1
    """
    count = 0
    length = len(buf)
    for i in range(0, length, 4):
        word = buf[i]
        if i + 1 < length:
            word |= buf[i + 1] << 8
        if i + 2 < length:
            word |= buf[i + 2] << 16
        if i + 3 < length:
            word |= buf[i + 3] << 24
        count += popcount32(word)
    return count


def popcount_bits(bits: Iterable[int]) -> int:
    """Count the set entries of a bit list."""
    count = 0
    for bit in bits:
        if bit:
            count += 1
    return count


class BitArray:
    """Bit array view of a Redis bitmap value."""

    def __init__(self, buffer: Optional[bytes] = b"") -> None:
        """
        Decode a buffer returned by Redis.

        Args:
            buffer: Raw bytes, bytearray or memoryview (None is treated as
                an absent key)

        Raises:
            TypeError: If buffer is not bytes-like
        """
        if buffer is None:
            buffer = b""
        if not isinstance(buffer, (bytes, bytearray, memoryview)):
            raise TypeError(
                f"buffer must be bytes-like, got {type(buffer).__name__}"
            )
        self.buffer: Optional[bytes] = bytes(buffer)
        self.bits: List[int] = BitArray.cast_from_buffer(self.buffer)

    @classmethod
    def from_bits(cls, bits: Iterable[int]) -> "BitArray":
        """
        Wrap a plain bit list, such as an algebra result.

        The returned array has no backing buffer.
        """
        result = cls.__new__(cls)
        result.buffer = None
        result.bits = [1 if bit else 0 for bit in bits]
        return result

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    @staticmethod
    def cast(num: int, octet: bool = False) -> List[int]:
        """
        Expand an integer into bits, most significant first.

        Args:
            num: Non-negative integer
            octet: Left-pad with zeros to a multiple of 8

        Returns:
            Bit list
        """
        bits = []
        tmp = num
        while tmp > 0:
            bits.append(tmp & 1)
            tmp >>= 1
        if octet:
            bits = BitArray.octet(bits)
        bits.reverse()
        return bits

    @staticmethod
    def octet(bits: List[int]) -> List[int]:
        """
        Zero-fill the tail of a bit list to a multiple of 8.

        An empty list becomes a single zero octet. The list is modified in
        place and returned.
        """
        length = len(bits)
        if length != 0 and length % 8 == 0:
            return bits
        bits.extend([0] * (8 - length % 8))
        return bits

    @staticmethod
    def cast_from_buffer(buf: bytes) -> List[int]:
        """
        Convert a buffer into bits, MSB first within each byte.

        Args:
            buf: Raw bytes

        Returns:
            Bit list of length len(buf) * 8
        """
        bits = []
        for byte in buf:
            for shift in range(7, -1, -1):
                bits.append((byte >> shift) & 1)
        return bits

    @staticmethod
    def buffer_matrix(*buffers: bytes) -> List[List[int]]:
        """Decode any number of buffers into a list of bit lists."""
        return [BitArray.cast_from_buffer(buf or b"") for buf in buffers]

    # ------------------------------------------------------------------
    # Algebra
    # ------------------------------------------------------------------

    @staticmethod
    def and_(*seqs: Sequence[int]) -> List[int]:
        """
        Bitwise intersection of bit lists.

        Shorter operands are zero-extended, so any position beyond the end
        of an operand is 0 in the result.

        Args:
            *seqs: One or more bit lists

        Returns:
            Intersected bit list, as long as the longest operand
        """
        length = len(longest(*seqs))
        bits = []
        for i in range(length):
            bit = 1
            for seq in seqs:
                if i >= len(seq) or seq[i] != 1:
                    bit = 0
                    break
            bits.append(bit)
        return bits

    intersect = and_

    @staticmethod
    def or_(*seqs: Sequence[int]) -> List[int]:
        """
        Bitwise union of bit lists.

        Args:
            *seqs: One or more bit lists

        Returns:
            Unioned bit list, as long as the longest operand
        """
        length = len(longest(*seqs))
        bits = []
        for i in range(length):
            bit = 0
            for seq in seqs:
                if i < len(seq) and seq[i] == 1:
                    bit = 1
                    break
            bits.append(bit)
        return bits

    union = or_

    @staticmethod
    def xor(a: Sequence[int], b: Sequence[int]) -> List[int]:
        """
        Bitwise difference of exactly two bit lists.

        Args:
            a: First bit list
            b: Second bit list

        Returns:
            Bit list with 1 where exactly one operand has 1
        """
        length = len(longest(a, b))
        bits = []
        for i in range(length):
            x = a[i] if i < len(a) else 0
            y = b[i] if i < len(b) else 0
            bits.append(1 if bool(x) != bool(y) else 0)
        return bits

    difference = xor

    # ------------------------------------------------------------------
    # Instance API
    # ------------------------------------------------------------------

    def set(self, index: int, value: int) -> int:
        """
        Set a bit locally, zero-filling up to index.

        The change is not written to Redis. The backing buffer is dropped,
        since it no longer matches the bits.

        Args:
            index: Bit position
            value: Bit value (0 or non-zero for 1)

        Returns:
            The stored bit value
        """
        if index < 0:
            raise IndexError(f"Bit position {index} out of range")
        while index >= len(self.bits):
            self.bits.append(0)
        self.bits[index] = 1 if value else 0
        self.buffer = None
        return self.bits[index]

    def cardinality(self) -> int:
        """
        Count the set bits.

        Uses the word-wise buffer count when the array still matches the
        buffer it was decoded from.
        """
        if self.buffer is not None:
            return popcount_buffer(self.buffer)
        return popcount_bits(self.bits)

    def to_list(self) -> List[int]:
        """Return a copy of the stored bits, in store order."""
        return list(self.bits)

    def to_string(self) -> str:
        """
        Binary display string.

        The stored order is reversed before joining, so the last stored bit
        comes first. Parsing this string back does not give the same array.
        """
        return "".join(str(bit) for bit in reversed(self.bits))

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"BitArray(length={len(self.bits)}, cardinality={self.cardinality()})"

    def __len__(self) -> int:
        return len(self.bits)

    def __iter__(self) -> Iterator[int]:
        return iter(self.bits)

    def __getitem__(self, index):
        return self.bits[index]

    def __eq__(self, other) -> bool:
        if isinstance(other, BitArray):
            return self.bits == other.bits
        if isinstance(other, list):
            return self.bits == other
        return NotImplemented

    __hash__ = None
