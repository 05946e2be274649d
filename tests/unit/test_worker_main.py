"""Unit tests for the worker entry point."""

import pytest

from worker import main as worker_main


class TestParseArgs:
    """Tests for command-line parsing."""

    def test_default_start_comes_from_settings(self):
        assert worker_main.parse_args([]).starting_block_number is None

    @pytest.mark.parametrize("flag", ["-s", "--starting-block-number"])
    def test_starting_block_number(self, flag):
        assert worker_main.parse_args([flag, "1200"]).starting_block_number == 1200


class TestMain:
    """Tests for startup failures."""

    @pytest.fixture(autouse=True)
    def quiet_logging(self, monkeypatch):
        monkeypatch.setattr(worker_main, "setup_logging", lambda settings: None)

    @pytest.mark.asyncio
    async def test_negative_start_exits_with_error(self, monkeypatch):
        def fail_if_called(settings):
            raise AssertionError("services must not start")

        monkeypatch.setattr(worker_main, "initialize_all_services", fail_if_called)

        assert await worker_main.main(["-s", "-5"]) == 1

    @pytest.mark.asyncio
    async def test_precondition_failure_exits_with_error(
        self, monkeypatch, chain_source, block_store
    ):
        """Head 0 on the node ends the process with a non-zero code."""
        closed = []

        class Services:
            source = chain_source
            store = block_store

        async def record_shutdown(services):
            closed.append(services)

        monkeypatch.setattr(worker_main, "initialize_all_services", lambda settings: Services())
        monkeypatch.setattr(worker_main, "shutdown_handler", record_shutdown)

        assert await worker_main.main([]) == 1
        assert len(closed) == 1
