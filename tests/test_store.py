"""Tests for the Redis store adapter."""

import fakeredis
import pytest

from redisbitmap.errors import CallerError, ConfigurationError
from redisbitmap.store import RedisStore, decodes_responses


@pytest.fixture
def store(client):
    """Store adapter over the per-test client."""
    return RedisStore(client)


class TestBufferMode:
    """Test the raw-bytes reply requirement."""

    def test_decoding_client_rejected(self) -> None:
        """Test that a client decoding replies fails at construction."""
        client = fakeredis.FakeRedis(
            server=fakeredis.FakeServer(), decode_responses=True
        )
        assert decodes_responses(client)
        with pytest.raises(ConfigurationError):
            RedisStore(client)

    def test_client_is_not_mutated(self) -> None:
        """Test that a rejected client keeps its configuration."""
        client = fakeredis.FakeRedis(
            server=fakeredis.FakeServer(), decode_responses=True
        )
        with pytest.raises(ConfigurationError):
            RedisStore(client)
        assert client.connection_pool.connection_kwargs["decode_responses"] is True

    def test_bytes_client_accepted(self, client) -> None:
        """Test that the default client is accepted."""
        assert not decodes_responses(client)
        assert RedisStore(client).client is client


class TestStoreCommands:
    """Test single commands."""

    def test_setbit_returns_previous(self, store) -> None:
        """Test that SETBIT reports the prior bit."""
        assert store.setbit("k", 3, 1) == 0
        assert store.setbit("k", 3, 1) == 1
        assert store.setbit("k", 3, 0) == 1

    def test_setbit_negative_offset(self, store) -> None:
        """Test that a negative offset is rejected locally."""
        with pytest.raises(CallerError):
            store.setbit("k", -1, 1)

    def test_get_raw_single(self, store) -> None:
        """Test reading one key."""
        store.setbit("k", 0, 1)
        assert store.get_raw("k") == b"\x80"

    def test_get_raw_absent(self, store) -> None:
        """Test that an absent key reads as empty bytes."""
        assert store.get_raw("missing") == b""

    def test_get_raw_many(self, store) -> None:
        """Test that several keys come back in input order."""
        store.setbit("a", 0, 1)
        store.setbit("b", 7, 1)
        assert store.get_raw("b", "missing", "a") == [b"\x01", b"", b"\x80"]

    def test_bitop_returns_length(self, store) -> None:
        """Test that BITOP returns the stored byte length."""
        store.setbit("a", 0, 1)
        store.setbit("b", 20, 1)
        assert store.bitop("or", "dest", "a", "b") == 3
        assert store.get_raw("dest") == b"\x80\x00\x08"

    def test_bitop_not_arity(self, store) -> None:
        """Test that NOT takes exactly one source."""
        with pytest.raises(CallerError):
            store.bitop("NOT", "dest", "a", "b")
        with pytest.raises(CallerError):
            store.bitop("AND", "dest")

    def test_bitop_unknown(self, store) -> None:
        """Test that unknown verbs are rejected."""
        with pytest.raises(CallerError):
            store.bitop("NAND", "dest", "a")

    def test_bitcount_range(self, store) -> None:
        """Test counting over a byte range."""
        store.setbit("k", 0, 1)
        store.setbit("k", 9, 1)
        store.setbit("k", 10, 1)
        assert store.bitcount("k") == 3
        assert store.bitcount("k", 1, 1) == 2
        with pytest.raises(CallerError):
            store.bitcount("k", 1)

    def test_delete(self, store, client) -> None:
        """Test deleting keys, missing ones included."""
        store.setbit("k", 0, 1)
        assert store.delete("k", "missing") == 1
        assert client.exists("k") == 0
        with pytest.raises(CallerError):
            store.delete()


class TestBatch:
    """Test MULTI/EXEC batches."""

    def test_results_in_order(self, store) -> None:
        """Test that each queued command yields one result."""
        batch = store.batch()
        batch.setbit("a", 1, 1).setbit("a", 1, 1).get("a").bitcount("a")
        batch.bitop("NOT", "b", "a").delete("a", "b")
        assert len(batch) == 6
        assert batch.execute() == [0, 1, b"\x40", 1, 1, 2]
        assert len(batch) == 0

    def test_nothing_runs_until_execute(self, store, client) -> None:
        """Test that queued commands are deferred."""
        batch = store.batch()
        batch.setbit("a", 0, 1)
        assert client.exists("a") == 0
        batch.execute()
        assert client.exists("a") == 1

    def test_batch_validates_arguments(self, store) -> None:
        """Test that batches reject the same arguments as the store."""
        batch = store.batch()
        with pytest.raises(CallerError):
            batch.bitop("NOT", "d", "a", "b")
        with pytest.raises(CallerError):
            batch.setbit("a", -5, 1)
        assert len(batch) == 0
