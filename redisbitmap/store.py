"""
Redis adapter for bitmap commands.

Maps the logical operations used by ``Bitmap`` and ``Aggregate`` onto a
``redis.Redis`` client and its transactional pipelines. Values are always
returned as raw ``bytes``; the adapter refuses clients created with
``decode_responses=True`` since decoded strings cannot be turned back into
bit arrays reliably.
"""

import logging
from typing import List, Optional, Union

import redis

from redisbitmap.errors import CallerError, ConfigurationError
from redisbitmap.ops import check_bit, check_operands, normalize_op

logger = logging.getLogger(__name__)


def decodes_responses(client: "redis.Redis") -> bool:
    """
    Report whether a client decodes replies into strings.

    Args:
        client: Redis client (or anything exposing the same connection pool)

    Returns:
        True if the client was created with decode_responses=True
    """
    pool = getattr(client, "connection_pool", None)
    if pool is not None:
        return bool(pool.connection_kwargs.get("decode_responses", False))
    return bool(client.get_encoder().decode_responses)


def _check_range(start: Optional[int], end: Optional[int]) -> None:
    if (start is None) != (end is None):
        raise CallerError("bitcount range needs both start and end")


class Batch:
    """
    Commands queued for a single MULTI/EXEC transaction.

    Every queueing method returns the batch so calls can be chained.
    """

    def __init__(self, pipeline: "redis.client.Pipeline") -> None:
        self._pipeline = pipeline
        self._queued = 0

    def __len__(self) -> int:
        return self._queued

    def setbit(self, key: str, offset: int, bit: int) -> "Batch":
        """
        Queue a SETBIT.

        Args:
            key: Bitmap key
            offset: Bit offset (non-negative)
            bit: Bit value (0 or non-zero for 1)

        Returns:
            This batch
        """
        bit = check_bit(offset, bit)
        self._pipeline.setbit(key, offset, bit)
        self._queued += 1
        return self

    def get(self, key: str) -> "Batch":
        """Queue a GET of the raw value."""
        self._pipeline.get(key)
        self._queued += 1
        return self

    def bitop(self, op: str, dest: str, *keys: str) -> "Batch":
        """
        Queue a BITOP reduction into dest.

        Args:
            op: AND, OR, XOR or NOT
            dest: Destination key
            *keys: Source keys (exactly one for NOT)

        Returns:
            This batch

        Raises:
            CallerError: If op or the operand count is invalid
        """
        op = normalize_op(op)
        check_operands(op, keys)
        self._pipeline.bitop(op, dest, *keys)
        self._queued += 1
        return self

    def bitcount(
        self, key: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> "Batch":
        """
        Queue a BITCOUNT of one key.

        Args:
            key: Bitmap key
            start: First byte of the range (with end)
            end: Last byte of the range (with start)

        Returns:
            This batch
        """
        _check_range(start, end)
        self._pipeline.bitcount(key, start, end)
        self._queued += 1
        return self

    def delete(self, *keys: str) -> "Batch":
        """Queue a DEL of one or more keys."""
        if not keys:
            raise CallerError("delete requires at least one key")
        self._pipeline.delete(*keys)
        self._queued += 1
        return self

    def execute(self) -> list:
        """
        Run the queued commands atomically.

        Returns:
            One result per queued command, in queue order

        Raises:
            redis.exceptions.RedisError: If the transaction or any command fails
        """
        logger.debug("executing transaction with %d commands", self._queued)
        try:
            return self._pipeline.execute()
        finally:
            self._queued = 0


class RedisStore:
    """Bitmap command adapter over a redis-py client."""

    def __init__(self, client: "redis.Redis") -> None:
        """
        Wrap a client after checking its reply mode.

        Args:
            client: redis-py client returning raw bytes

        Raises:
            ConfigurationError: If the client decodes responses
        """
        if decodes_responses(client):
            raise ConfigurationError(
                "Redis client decodes responses; create it with "
                "decode_responses=False to read bitmaps"
            )
        self.client = client

    def setbit(self, key: str, offset: int, bit: int) -> int:
        """
        Atomically set one bit.

        Returns:
            The previous bit value
        """
        bit = check_bit(offset, bit)
        return self.client.setbit(key, offset, bit)

    def get_raw(self, key: str, *keys: str) -> Union[bytes, List[bytes]]:
        """
        Read raw values.

        A single key returns its bytes, b"" when absent. Several keys are
        read with MGET and returned in input order.
        """
        if not keys:
            return self.client.get(key) or b""
        values = self.client.mget([key, *keys])
        return [value or b"" for value in values]

    def bitop(self, op: str, dest: str, *keys: str) -> int:
        """
        Reduce keys into dest with BITOP.

        Returns:
            Length in bytes of the stored result
        """
        op = normalize_op(op)
        check_operands(op, keys)
        return self.client.bitop(op, dest, *keys)

    def bitcount(
        self, key: str, start: Optional[int] = None, end: Optional[int] = None
    ) -> int:
        """Population count of a single key, optionally over a byte range."""
        _check_range(start, end)
        return self.client.bitcount(key, start, end)

    def delete(self, *keys: str) -> int:
        """Delete keys; missing keys are ignored."""
        if not keys:
            raise CallerError("delete requires at least one key")
        return self.client.delete(*keys)

    def batch(self) -> Batch:
        """Start a MULTI/EXEC batch on this client."""
        return Batch(self.client.pipeline(transaction=True))
