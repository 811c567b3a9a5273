"""Tests for gridshift.events – the outbound notification bus."""

from __future__ import annotations

import logging

from gridshift.events import EventBus, EventRecorder


class TestEventBus:
    def test_emit_in_registration_order(self):
        bus = EventBus()
        heard = []
        bus.on("ping", lambda n: heard.append(("a", n)))
        bus.on("ping", lambda n: heard.append(("b", n)))
        bus.emit("ping", 3)
        assert heard == [("a", 3), ("b", 3)]

    def test_emit_without_listeners(self):
        EventBus().emit("nobody-listens", 1, 2)

    def test_off(self):
        bus = EventBus()
        heard = []
        listener = heard.append
        bus.on("ping", listener)
        bus.off("ping", listener)
        bus.off("ping", listener)
        bus.emit("ping", 1)
        assert heard == []

    def test_failing_listener_is_logged_and_skipped(self, caplog):
        bus = EventBus()
        heard = []

        def broken(_):
            raise RuntimeError("boom")

        bus.on("ping", broken)
        bus.on("ping", heard.append)
        with caplog.at_level(logging.ERROR, logger="gridshift"):
            bus.emit("ping", 7)
        assert heard == [7]
        assert any("ping" in r.getMessage() for r in caplog.records)

    def test_return_values_ignored(self):
        bus = EventBus()
        bus.on("ping", lambda: "ignored")
        bus.emit("ping")


class TestEventRecorder:
    def test_records_only_named_events(self):
        bus = EventBus()
        rec = EventRecorder(bus, ["a", "b"])
        bus.emit("a", 1)
        bus.emit("c", 2)
        bus.emit("b", 3, 4)
        assert [(r.name, r.args) for r in rec.records] == [("a", (1,)), ("b", (3, 4))]
        assert rec.named("b") == [(3, 4)]
