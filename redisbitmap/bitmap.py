"""
Immediate bitmap API.

Simple calls map to a single Redis command. Derived calls (multi-key counts
and bitwise reductions whose result is read back) write into a scratch key,
read it, and delete it inside one MULTI/EXEC transaction.

Concurrent derived calls from different clients that share the same scratch
key name are not isolated from each other across transactions. Give each
user its own ``scratch_key`` (or use an ``Aggregate`` with its own
destination) when that matters.
"""

import logging
from typing import List, Optional, Union

import redis

from redisbitmap.aggregate import Aggregate
from redisbitmap.bitarray import BitArray, popcount_bits
from redisbitmap.errors import CallerError, UnexpectedResponseError
from redisbitmap.ops import (
    BITCOUNT,
    DEFAULT_SCRATCH_KEY,
    GET,
    OR,
    BitwiseOps,
    check_operands,
    normalize_op,
)
from redisbitmap.store import RedisStore

logger = logging.getLogger(__name__)


class Bitmap(BitwiseOps):
    """Bitmap operations executed immediately against Redis."""

    def __init__(
        self, client: "redis.Redis", scratch_key: str = DEFAULT_SCRATCH_KEY
    ) -> None:
        """
        Initialize the facade.

        Args:
            client: redis-py client created with decode_responses=False
            scratch_key: Key used for intermediate reduction results

        Raises:
            ConfigurationError: If the client decodes responses
        """
        self.store = RedisStore(client)
        self.scratch_key = scratch_key

    @classmethod
    def from_url(
        cls, url: str, scratch_key: str = DEFAULT_SCRATCH_KEY, **kwargs
    ) -> "Bitmap":
        """Create a facade over ``redis.Redis.from_url(url, **kwargs)``."""
        return cls(redis.Redis.from_url(url, **kwargs), scratch_key=scratch_key)

    @property
    def client(self) -> "redis.Redis":
        return self.store.client

    def set(self, key: str, offset: int, value: int = 1) -> int:
        """
        Set a bit.

        Args:
            key: Bitmap key
            offset: Bit offset
            value: Bit value (0 or non-zero for 1)

        Returns:
            The previous bit value
        """
        return self.store.setbit(key, offset, value)

    def get(self, key: str, *keys: str) -> Union[BitArray, List[BitArray]]:
        """
        Read one or more bitmaps.

        Returns:
            A BitArray for a single key, else a list in key order
        """
        raw = self.store.get_raw(key, *keys)
        if isinstance(raw, list):
            return [BitArray(buf) for buf in raw]
        return BitArray(raw)

    def count(
        self, *keys: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> int:
        """
        Population count of one key, or of the union of several.

        Args:
            *keys: One or more bitmap keys
            start: First byte of the range (single key only)
            end: Last byte of the range (single key only)

        Returns:
            Number of set bits
        """
        if not keys:
            raise CallerError("count requires at least one key")
        if len(keys) == 1:
            return self.store.bitcount(keys[0], start, end)
        if start is not None or end is not None:
            raise CallerError("a bitcount range applies to a single key only")
        return self.count_bitop(OR, *keys)

    cardinality = count

    def count_bitop(self, op: str, *keys: str) -> int:
        """Population count of the reduction of keys with op."""
        return self._scratch_read(op, BITCOUNT, keys)

    def temp_bitop(self, op: str, *keys: str) -> BitArray:
        """
        Reduce keys into the scratch key and read the result back.

        Args:
            op: AND, OR, XOR or NOT
            *keys: Source keys (exactly one for NOT)

        Returns:
            Decoded reduction result
        """
        return self._scratch_read(op, GET, keys)

    def bitop(self, op: str, dest: str, *keys: str) -> int:
        """
        Reduce keys into dest and keep it.

        Returns:
            Length in bytes of the stored result
        """
        return self.store.bitop(op, dest, *keys)

    def delete(self, *keys: str) -> int:
        return self.store.delete(*keys)

    def memory_cardinality(self, *keys: str) -> int:
        """
        Count the union of keys in memory.

        The values are fetched and unioned locally, so no scratch key is
        written.
        """
        if not keys:
            raise CallerError("memory_cardinality requires at least one key")
        raw = self.store.get_raw(*keys)
        if not isinstance(raw, list):
            raw = [raw]
        union = BitArray.or_(*BitArray.buffer_matrix(*raw))
        return popcount_bits(union)

    def aggregate(self, dest: Optional[str] = None) -> Aggregate:
        """
        Begin a deferred session.

        Args:
            dest: Destination key (defaults to the scratch key)
        """
        return Aggregate(self.store, dest or self.scratch_key)

    def _scratch_read(self, op: str, cmd: str, keys) -> Union[BitArray, int]:
        op = normalize_op(op)
        check_operands(op, keys)

        dest = self.scratch_key
        batch = self.store.batch()
        batch.bitop(op, dest, *keys)
        if cmd == GET:
            batch.get(dest)
        else:
            batch.bitcount(dest)
        batch.delete(dest)

        logger.debug("%s %s into %r then %s", op, keys, dest, cmd)
        results = batch.execute()
        if len(results) != 3:
            raise UnexpectedResponseError(
                f"expected 3 results from {op} transaction, got {len(results)}"
            )

        payload = results[1]
        if cmd == GET:
            return BitArray(payload)
        return int(payload)
