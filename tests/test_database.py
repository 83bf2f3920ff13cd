"""Tests for engine setup in the database manager."""

import pytest
from sqlalchemy.pool import StaticPool

from portal_backend.core.database import DatabaseManager


@pytest.mark.parametrize(
    ("url", "in_memory"),
    [
        ("sqlite://", True),
        ("sqlite:///:memory:", True),
        ("sqlite:///file:shared?mode=memory&cache=shared&uri=true", True),
        ("sqlite:///portal.db", False),
        ("postgresql://portal:secret@db/portal", False),
    ],
)
def test_in_memory_detection(url, in_memory):
    assert DatabaseManager(url).is_in_memory is in_memory


def test_static_pool_only_for_in_memory(tmp_path):
    memory = DatabaseManager("sqlite:///:memory:")
    on_disk = DatabaseManager(f"sqlite:///{tmp_path / 'portal.db'}")
    memory.initialize()
    on_disk.initialize()

    try:
        assert isinstance(memory.engine.pool, StaticPool)
        assert not isinstance(on_disk.engine.pool, StaticPool)

        on_disk.create_tables()
        assert on_disk.health_check() is True
    finally:
        memory.close()
        on_disk.close()
