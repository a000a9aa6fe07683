# tests/test_events.py
"""Tests for notifications and the event log."""

import json
import tempfile
from pathlib import Path

import pytest

from tokenmint.events import MINTED, WITHDRAWN, Event, EventLog

ADMIN = "0x" + "a" * 40
HOLDER = "0x" + "b" * 40


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestEvent:
    """Test Event."""

    def test_factories(self):
        assert Event.minted(HOLDER, 3).values == (HOLDER, 3)
        assert Event.withdrawn(ADMIN, "0xreg", 5).values == (ADMIN, "0xreg", 5)
        assert Event.admin_changed(ADMIN, None).values == (ADMIN, None)

    def test_serialization(self):
        event = Event.minted(HOLDER, 3)
        event.sequence = 4
        restored = Event.from_dict(event.to_dict())
        assert restored.event_type == MINTED
        assert restored.args == {"holder": HOLDER, "token_id": 3}
        assert restored.sequence == 4


class TestEventLog:
    """Test EventLog."""

    def test_extend_assigns_sequence(self):
        log = EventLog()
        log.extend([Event.minted(ADMIN, 1), Event.minted(HOLDER, 2)])
        log.extend([Event.withdrawn(ADMIN, "0xreg", 1)])
        assert [e.sequence for e in log] == [0, 1, 2]
        assert len(log) == 3

    def test_find(self):
        log = EventLog()
        log.extend([
            Event.minted(ADMIN, 1),
            Event.minted(HOLDER, 2),
            Event.exemption_added(HOLDER),
            Event.withdrawn(ADMIN, "0xreg", 1),
        ])
        assert len(log.find_by_type(MINTED)) == 2
        assert [e.event_type for e in log.find_by_type(WITHDRAWN)] == [WITHDRAWN]
        assert len(log.find_by_principal(HOLDER)) == 2
        assert len(log.find_by_principal(ADMIN)) == 2

    def test_subscribers_notified_in_order(self):
        log = EventLog()
        seen = []
        log.subscribe(lambda e: seen.append(e.args["token_id"]))
        log.extend([Event.minted(ADMIN, 1), Event.minted(ADMIN, 2)])
        assert seen == [1, 2]

    def test_failing_subscriber_does_not_block_others(self):
        log = EventLog()
        seen = []

        def broken(event):
            raise RuntimeError("subscriber down")

        log.subscribe(broken)
        log.subscribe(lambda e: seen.append(e.args["token_id"]))
        log.extend([Event.minted(ADMIN, 1), Event.minted(ADMIN, 2)])

        assert seen == [1, 2]
        assert len(log) == 2

    def test_empty_extend(self):
        log = EventLog()
        log.extend([])
        assert log.last() is None

    def test_persists(self, temp_dir):
        log = EventLog(temp_dir)
        log.extend([Event.minted(ADMIN, 1)])

        reloaded = EventLog(temp_dir)
        assert len(reloaded) == 1
        assert reloaded.last().args == {"holder": ADMIN, "token_id": 1}

    def test_corrupt_file_ignored(self, temp_dir):
        (temp_dir / "events.json").write_text("{broken")
        log = EventLog(temp_dir)
        assert len(log) == 0

    def test_file_format(self, temp_dir):
        EventLog(temp_dir).extend([Event.minted(ADMIN, 1)])
        data = json.loads((temp_dir / "events.json").read_text())
        assert data["version"] == "1.0"
        assert data["events"][0]["event_type"] == MINTED
