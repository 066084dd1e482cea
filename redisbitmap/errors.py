"""
Exceptions raised by redisbitmap.

Errors reported by Redis itself (``redis.exceptions.RedisError`` and its
subclasses) are never wrapped; they reach the caller unchanged.
"""


class BitmapError(Exception):
    """Base class for all redisbitmap errors."""


class ConfigurationError(BitmapError):
    """
    The Redis client is not usable for bitmap reads.

    Raised at construction time when the client decodes responses into
    strings instead of returning raw bytes.
    """


class CallerError(BitmapError, ValueError):
    """
    Invalid arguments, rejected before any command reaches the store.

    This includes:
    - Empty key lists
    - NOT with more than one operand
    - Unknown bitwise operations
    - Bit values other than 0/1 and negative offsets
    """


class AggregateFinalizedError(CallerError):
    """An aggregate was used after ``execute()`` had been called."""


class UnexpectedResponseError(BitmapError):
    """A transaction returned a result that does not match what was queued."""
