"""
CLI Tests
=========

Tests for the aedat-inspect entry point.
"""

import logging

import pytest

from aedat import config
from aedat.__main__ import main

from conftest import build_container, build_payload


class TestInspect:
    """Tests for main()."""

    @pytest.fixture(autouse=True)
    def isolate_cli(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        package_logger = logging.getLogger("aedat")
        saved = (package_logger.level, package_logger.propagate, list(package_logger.handlers))
        config.set_settings(None)
        yield
        config.set_settings(None)
        package_logger.setLevel(saved[0])
        package_logger.propagate = saved[1]
        package_logger.handlers[:] = saved[2]

    def test_file(self, write_container, events_payload, capsys):
        data = build_container([(0, events_payload), (3, build_payload(b"TRIG"))])

        assert main([str(write_container(data))]) == 0

        out = capsys.readouterr().out
        assert "EVTS" in out and "FRME" in out
        assert "packets: 2" in out
        assert "stream 3: 1 packets" in out

    def test_limit(self, write_container, events_payload, capsys):
        data = build_container([(0, events_payload)] * 5)

        assert main([str(write_container(data)), "--limit", "2"]) == 0
        assert "packets: 2" in capsys.readouterr().out

    @pytest.mark.parametrize("limit", ["0", "-3", "two"])
    def test_limit_must_be_positive(self, write_container, events_payload, limit, capsys):
        data = build_container([(0, events_payload)])

        with pytest.raises(SystemExit) as excinfo:
            main([str(write_container(data)), "--limit", limit])
        assert excinfo.value.code == 2
        assert "--limit" in capsys.readouterr().err

    def test_limit_one(self, write_container, events_payload, capsys):
        data = build_container([(0, events_payload)] * 3)

        assert main([str(write_container(data)), "--limit", "1"]) == 0
        assert "packets: 1" in capsys.readouterr().out

    def test_invalid_config(self, write_container, events_payload, tmp_path):
        """Verify a bad config file gives exit code 2 instead of a traceback."""
        path = tmp_path / "bad.yaml"
        path.write_text("logging:\n  format: xml\n")
        data = build_container([(0, events_payload)])

        assert main([str(write_container(data)), "--config", str(path)]) == 2

    def test_decoding_failure(self, write_container):
        """Verify a ParseError gives exit code 1."""
        assert main([str(write_container(b"garbage"))]) == 1
