"""Tests for process entry helpers.

Coverage:
- Keypair loading from secret bytes
- cli() exit status: fatal startup errors exit 1 with a "fatal:" log line
- cli() returns normally once the loop finishes
"""

import json
import logging

import pytest
from solders.keypair import Keypair

from phoenix_maker import runner
from phoenix_maker.errors import MarketDataError, SetupError
from phoenix_maker.models import RunSummary

KEY = json.dumps(list(bytes(Keypair())))


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(runner, "load_dotenv", lambda: None)
    for name in ("PRIVATE_KEY", "LOG_LEVEL", "MAX_ITERATIONS", "EDGE", "REFRESH_SECONDS", "REQUIRE_WITHDRAWAL"):
        monkeypatch.delenv(name, raising=False)
    yield
    root.setLevel(level)


def _main_returning(summary=None, error=None):
    calls = []

    async def fake_main(settings):
        calls.append(settings)
        if error is not None:
            raise error
        return summary

    return fake_main, calls


def test_load_keypair_from_secret_bytes():
    keypair = Keypair()

    loaded = runner.load_keypair(bytes(keypair))

    assert loaded.pubkey() == keypair.pubkey()


class TestCli:
    def test_finished_run_returns_normally(self, monkeypatch):
        monkeypatch.setenv("PRIVATE_KEY", KEY)
        fake_main, calls = _main_returning(RunSummary(4, 4, 0, True))
        monkeypatch.setattr(runner, "main", fake_main)

        runner.cli()

        assert len(calls) == 1
        assert calls[0].loop.max_iterations == 3

    def test_unconfirmed_withdrawal_still_exits_normally(self, monkeypatch):
        monkeypatch.setenv("PRIVATE_KEY", KEY)
        fake_main, _ = _main_returning(RunSummary(3, 3, 1, False))
        monkeypatch.setattr(runner, "main", fake_main)

        runner.cli()

    def test_missing_private_key_exits_1(self, monkeypatch, caplog):
        fake_main, calls = _main_returning()
        monkeypatch.setattr(runner, "main", fake_main)

        with caplog.at_level(logging.ERROR, logger="phoenix_maker.runner"):
            with pytest.raises(SystemExit) as excinfo:
                runner.cli()

        assert excinfo.value.code == 1
        assert calls == []
        assert "fatal:" in caplog.text
        assert "PRIVATE_KEY" in caplog.text

    @pytest.mark.parametrize(
        "error",
        [SetupError("setup submission failed: blockhash expired"), MarketDataError("market not found")],
    )
    def test_fatal_startup_error_exits_1(self, monkeypatch, caplog, error):
        monkeypatch.setenv("PRIVATE_KEY", KEY)
        fake_main, _ = _main_returning(error=error)
        monkeypatch.setattr(runner, "main", fake_main)

        with caplog.at_level(logging.ERROR, logger="phoenix_maker.runner"):
            with pytest.raises(SystemExit) as excinfo:
                runner.cli()

        assert excinfo.value.code == 1
        assert f"fatal: {error}" in caplog.text

    def test_invalid_log_level_exits_1(self, monkeypatch, caplog):
        monkeypatch.setenv("PRIVATE_KEY", KEY)
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        fake_main, calls = _main_returning()
        monkeypatch.setattr(runner, "main", fake_main)

        with caplog.at_level(logging.ERROR, logger="phoenix_maker.runner"):
            with pytest.raises(SystemExit) as excinfo:
                runner.cli()

        assert excinfo.value.code == 1
        assert calls == []
        assert "LOG_LEVEL" in caplog.text

    def test_log_level_applied(self, monkeypatch):
        monkeypatch.setenv("PRIVATE_KEY", KEY)
        monkeypatch.setenv("LOG_LEVEL", "debug")
        fake_main, _ = _main_returning(RunSummary(4, 4, 0, True))
        monkeypatch.setattr(runner, "main", fake_main)

        runner.cli()

        assert logging.getLogger().level == logging.DEBUG
