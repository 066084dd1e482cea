"""
redisbitmap

Bit arrays, bitwise algebra and transactional aggregation over Redis
bitmaps (SETBIT, BITOP, BITCOUNT).
"""

__version__ = "1.0.0"

from redisbitmap.aggregate import Aggregate
from redisbitmap.bitarray import BitArray
from redisbitmap.bitmap import Bitmap
from redisbitmap.errors import (
    AggregateFinalizedError,
    BitmapError,
    CallerError,
    ConfigurationError,
    UnexpectedResponseError,
)
from redisbitmap.ops import DEFAULT_SCRATCH_KEY
from redisbitmap.store import RedisStore

__all__ = [
    "Aggregate",
    "AggregateFinalizedError",
    "BitArray",
    "Bitmap",
    "BitmapError",
    "CallerError",
    "ConfigurationError",
    "DEFAULT_SCRATCH_KEY",
    "RedisStore",
    "UnexpectedResponseError",
    "__version__",
]
