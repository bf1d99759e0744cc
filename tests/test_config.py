from __future__ import annotations

from erc20pump.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("LOG_WINDOW_SIZE", "OUTPUT_BUFFER_CAPACITY", "HEAD_REFRESH_SECONDS"):
            monkeypatch.delenv(name, raising=False)
        s = Settings(_env_file=None)
        assert s.log_window_size == 5
        assert s.output_buffer_capacity == 100
        assert s.head_refresh_seconds == 0.5
        assert s.status_report_seconds == 5.0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("START_BLOCK", "41250000")
        monkeypatch.setenv("SCAN_CONTRACT", "0x04068da6c83afcfa0e13ba15a6696662335d5b75")
        monkeypatch.setenv("LOG_WINDOW_SIZE", "10")
        s = Settings(_env_file=None)
        assert s.start_block == 41250000
        assert s.scan_contract == "0x04068da6c83afcfa0e13ba15a6696662335d5b75"
        assert s.log_window_size == 10
