# SPDX-License-Identifier: MIT
"""Tests for the dashboard activity stream."""

import re

from discovery.activity import ActivityLog


class TestActivityLog:
    """Test the bounded, newest-first stream."""

    def test_newest_first(self):
        log = ActivityLog()
        log.add("first")
        log.add("second", "success")

        entries = log.entries()
        assert [e.message for e in entries] == ["second", "first"]
        assert entries[0].type == "success"
        assert entries[1].type == "info"

    def test_bounded_to_limit(self):
        log = ActivityLog(limit=3)
        for i in range(5):
            log.add(f"message {i}")

        assert len(log) == 3
        assert [e.message for e in log.entries()] == ["message 4", "message 3", "message 2"]

    def test_timestamp_format(self):
        entry = ActivityLog().add("hello", "warning")
        assert re.fullmatch(r"\d{2}:\d{2}:\d{2}", entry.timestamp)

    def test_clear(self):
        log = ActivityLog()
        log.add("x", "error")
        log.clear()
        assert log.entries() == []
