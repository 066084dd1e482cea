"""
Deferred bitmap operations executed as one transaction.

An ``Aggregate`` queues commands into a MULTI/EXEC batch. The first
reduction writes into the destination key; every later reduction also takes
the destination as an operand, so results chain:

    result = (
        bitmap.aggregate("visits:tmp")
        .or_("visits:mon", "visits:tue")
        .xor("visits:wed")
        .clean()
        .execute()
    )

The last reduction or count decides how the destination is read back on
``execute()``: ``GET`` (decoded into a ``BitArray``) or ``BITCOUNT``.
Mixing reductions and counts in one session is a caller error that is not
detected: the last such call silently decides the result type. Start a new
aggregate when a different kind of result is wanted.
"""

import logging
from typing import Optional, Union

from redisbitmap.bitarray import BitArray
from redisbitmap.errors import (
    AggregateFinalizedError,
    CallerError,
    UnexpectedResponseError,
)
from redisbitmap.ops import (
    BITCOUNT,
    GET,
    OR,
    BitwiseOps,
    check_operands,
    normalize_op,
)

logger = logging.getLogger(__name__)

# Session states
OPEN = "open"
FINALIZED = "finalized"


class Aggregate(BitwiseOps):
    """Chainable builder for a single bitmap transaction."""

    def __init__(self, store, dest: str) -> None:
        """
        Initialize an open session.

        Args:
            store: RedisStore that owns the batch
            dest: Destination key holding the running result
        """
        self.store = store
        self.dest = dest
        self.batch = store.batch()
        self.last_cmd: Optional[str] = None
        self.cleanup = False
        self.running = False
        self.state = OPEN

    def _check_open(self) -> None:
        if self.state != OPEN:
            raise AggregateFinalizedError("aggregate has already been executed")

    def _reduce(self, op: str, keys) -> None:
        operands = list(keys)
        if self.running:
            operands.append(self.dest)
        check_operands(op, operands)
        self.batch.bitop(op, self.dest, *operands)
        self.running = True

    def set(self, key: str, offset: int, value: int = 1) -> "Aggregate":
        """Queue a SETBIT."""
        self._check_open()
        self.batch.setbit(key, offset, value)
        return self

    def temp_bitop(self, op: str, *keys: str) -> "Aggregate":
        """
        Queue a reduction into the destination.

        After the first reduction the destination is appended as an extra
        operand. NOT must end up with exactly one operand, so on a running
        session it is called without keys.

        Args:
            op: AND, OR, XOR or NOT
            *keys: Source keys
        """
        self._check_open()
        op = normalize_op(op)
        self._reduce(op, keys)
        self.last_cmd = GET
        return self

    def count(self, *keys: str) -> "Aggregate":
        """
        Read the destination back as a population count.

        With keys, they are first unioned into the destination. Without
        keys, a reduction must already have been queued.
        """
        self._check_open()
        if keys:
            self._reduce(OR, keys)
        elif not self.running:
            raise CallerError("count without keys needs a previous reduction")
        self.last_cmd = BITCOUNT
        return self

    cardinality = count

    def bitop(self, op: str, dest: str, *keys: str) -> "Aggregate":
        """Queue a plain BITOP into an explicit key."""
        self._check_open()
        self.batch.bitop(op, dest, *keys)
        return self

    def delete(self, *keys: str) -> "Aggregate":
        """Queue a DEL."""
        self._check_open()
        self.batch.delete(*keys)
        return self

    def clean(self) -> "Aggregate":
        """Delete the destination in the same transaction, after reading it."""
        self._check_open()
        self.cleanup = True
        return self

    def execute(self) -> Union[BitArray, int, list]:
        """
        Submit the session as one transaction.

        Returns:
            BitArray after a GET-class reduction, int after a count, or the
            raw result list when no reduction was queued

        Raises:
            AggregateFinalizedError: If called twice
            UnexpectedResponseError: If the transaction result is short
            redis.exceptions.RedisError: If Redis rejects the transaction
        """
        self._check_open()
        self.state = FINALIZED

        cmd = self.last_cmd
        if cmd is None:
            return self.batch.execute()

        if cmd == GET:
            self.batch.get(self.dest)
        else:
            self.batch.bitcount(self.dest)
        if self.cleanup:
            self.batch.delete(self.dest)

        expected = len(self.batch)
        logger.debug(
            "executing aggregate on %r: %d commands, read %s, cleanup=%s",
            self.dest,
            expected,
            cmd,
            self.cleanup,
        )
        results = self.batch.execute()
        if not isinstance(results, list) or len(results) != expected:
            raise UnexpectedResponseError(
                f"expected {expected} results from aggregate, "
                f"got {len(results) if isinstance(results, list) else results!r}"
            )

        payload = results[-2] if self.cleanup else results[-1]
        if cmd == GET:
            return BitArray(payload)
        return int(payload)
