"""Tests for the proxy host event bus and log sink."""

import logging

from defense_log_exporter.host import ProxyHost


class TestEmit:
    def test_subscribers_called_in_order(self):
        host = ProxyHost()
        calls = []
        host.on("apiCommand", lambda req, resp: calls.append(("first", req)))
        host.on("apiCommand", lambda req, resp: calls.append(("second", req)))
        assert host.emit("apiCommand", {"command": "x"}, {}) == 2
        assert calls == [("first", {"command": "x"}), ("second", {"command": "x"})]

    def test_unknown_event(self):
        assert ProxyHost().emit("nothing") == 0

    def test_failing_subscriber_does_not_stop_others(self, caplog):
        host = ProxyHost()
        calls = []

        def broken(*args):
            raise RuntimeError("boom")

        host.on("apiCommand", broken)
        host.on("apiCommand", lambda *args: calls.append(args))
        host.emit("apiCommand", {}, {})
        assert len(calls) == 1
        assert "boom" in caplog.text


class TestLog:
    def test_levels(self, caplog):
        caplog.set_level(logging.DEBUG, logger="defense_log_exporter.host")
        host = ProxyHost()
        for kind in ("info", "success", "warning", "error", "mystery"):
            host.log({"type": kind, "source": "plugin", "name": "P", "message": kind})
        levels = [r.levelno for r in caplog.records]
        assert levels == [logging.INFO, logging.INFO, logging.WARNING, logging.ERROR, logging.INFO]
        assert "[plugin] P: success" in caplog.text
