"""
test_history.py - Unit tests for history.py

Tests:
- append() writes at the current count and bumps it by one
- count() defaults to 0
- read() only finds entries in [0, count)
- entries are per-entity
"""

import pytest

from provenance import HistoryLog, Journal


class TestHistoryLog:

    def test_count_is_zero_before_first_append(self):
        log = HistoryLog("log")
        assert log.count("E1") == 0
        assert log.entries("E1") == []

    def test_append_returns_index_and_increments(self):
        log = HistoryLog("log")
        assert log.append("E1", "first") == 0
        assert log.append("E1", "second") == 1
        assert log.count("E1") == 2

    def test_read_within_and_outside_range(self):
        log = HistoryLog("log")
        log.append("E1", "first")
        log.append("E1", "second")

        assert log.read("E1", 0) == "first"
        assert log.read("E1", 1) == "second"
        assert log.read("E1", 2) is None
        assert log.read("E1", -1) is None

    def test_entities_are_independent(self):
        log = HistoryLog("log")
        log.append("E1", "a")
        log.append("E2", "b")
        log.append("E1", "c")

        assert log.count("E1") == 2
        assert log.count("E2") == 1
        assert log.entries("E1") == ["a", "c"]
        assert log.entries("E2") == ["b"]

    def test_stores_are_named_after_log(self):
        log = HistoryLog("batch-history")
        assert [s.name for s in log.stores] == ["batch-history-entries", "batch-history-counts"]

    def test_append_is_rolled_back_with_the_journal(self):
        journal = Journal()
        log = HistoryLog("log", journal)
        log.append("E1", "kept")

        journal.begin()
        log.append("E1", "dropped")
        journal.rollback()

        assert log.count("E1") == 1
        assert log.read("E1", 1) is None
        assert log.append("E1", "next") == 1
