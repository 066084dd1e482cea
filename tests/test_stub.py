"""Package-level smoke tests."""

import redisbitmap


def test_version() -> None:
    """Test that version is defined."""
    assert redisbitmap.__version__ == "1.0.0"


def test_public_names() -> None:
    """Test that the public API is importable from the package."""
    for name in redisbitmap.__all__:
        assert hasattr(redisbitmap, name)


def test_default_scratch_key() -> None:
    """Test the default scratch key name."""
    assert redisbitmap.DEFAULT_SCRATCH_KEY == "tmp"


def test_error_hierarchy() -> None:
    """Test that caller errors are also ValueErrors."""
    assert issubclass(redisbitmap.CallerError, ValueError)
    assert issubclass(redisbitmap.AggregateFinalizedError, redisbitmap.CallerError)
    assert issubclass(redisbitmap.ConfigurationError, redisbitmap.BitmapError)
    assert issubclass(redisbitmap.UnexpectedResponseError, redisbitmap.BitmapError)
