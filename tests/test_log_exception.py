"""
Tests for the log_exception decorator.

Tests cover:
- Sync and async functions
- Parameter binding and prefix substitution
- Default return values, including per-call copies of mutable defaults
- Log location pointing at the caller
"""

import asyncio

import pytest

from online_monitor.logger import log_exception


class TestBasicExceptionLogging:
    def test_sync_function_with_prefix(self, caplog):
        @log_exception("Recording snapshot")
        def record():
            raise ValueError("database is locked")

        assert record() is None
        assert "Recording snapshot: ValueError: database is locked" in caplog.text
        assert "ERROR" in caplog.text

    @pytest.mark.asyncio
    async def test_async_function_with_prefix(self, caplog):
        @log_exception("Closing session")
        async def close():
            await asyncio.sleep(0)
            raise RuntimeError("pool timeout")

        assert await close() is None
        assert "Closing session: RuntimeError: pool timeout" in caplog.text

    @pytest.mark.asyncio
    async def test_successful_call_is_not_logged(self, caplog):
        @log_exception("Counting sessions", default_return=0)
        async def count():
            return 42

        assert await count() == 42
        assert caplog.text == ""

    def test_traceback_is_logged(self, caplog):
        @log_exception()
        def fail():
            raise KeyError("player")

        fail()

        assert "Traceback" in caplog.text


class TestParameterBinding:
    def test_arguments_are_named(self, caplog):
        @log_exception()
        def add_playtime(player_name: str, duration_ms: int = 0):
            raise ValueError("boom")

        add_playtime("Steve")

        assert "player_name='Steve'" in caplog.text
        assert "duration_ms=0" in caplog.text

    @pytest.mark.asyncio
    async def test_self_is_left_out(self, caplog):
        class Store:
            @log_exception("Opening session for {player_name}")
            async def open(self, player_name: str):
                raise ValueError("boom")

        await Store().open("Alex")

        assert "Opening session for Alex:" in caplog.text
        assert "player_name='Alex'" in caplog.text
        assert "self=" not in caplog.text

    def test_missing_prefix_parameter_warns(self, caplog):
        @log_exception("Snapshot[{missing}]")
        def record(online_count: int):
            raise ValueError("boom")

        assert record(3) is None
        assert "Failed to format prefix" in caplog.text
        assert "Snapshot[{missing}]:" in caplog.text

    def test_binding_failure_falls_back_to_raw_args(self, caplog):
        @log_exception("Bind")
        def record(online_count: int):
            raise ValueError("boom")

        assert record(1, 2, 3) is None  # type: ignore
        assert "Failed to bind arguments" in caplog.text
        assert "args=" in caplog.text


class TestDefaultReturnValue:
    @pytest.mark.asyncio
    async def test_zero_default(self):
        @log_exception(default_return=0)
        async def count() -> int:
            raise RuntimeError("boom")

        assert await count() == 0

    @pytest.mark.asyncio
    async def test_mutable_default_is_copied(self):
        @log_exception(default_return={})
        async def averages() -> dict[int, float]:
            raise RuntimeError("boom")

        first = await averages()
        first[1] = 2.0

        assert await averages() == {}

    def test_false_default(self):
        @log_exception(default_return=False)
        def persist() -> bool:
            raise RuntimeError("boom")

        assert persist() is False


class TestStackLevel:
    def test_error_log_shows_caller_location(self, caplog):
        @log_exception()
        def failing():
            raise ValueError("boom")

        failing()

        assert "test_log_exception.py" in caplog.text.split("\n")[0]

    def test_prefix_warning_shows_caller_location(self, caplog):
        @log_exception("Prefix[{missing}]")
        def failing(actual: str):
            raise ValueError("boom")

        failing("value")

        warning_lines = [line for line in caplog.text.split("\n") if "WARNING" in line]
        assert warning_lines
        assert "test_log_exception.py" in warning_lines[0]
