"""
Tests for the compilation server session.

Runs against the fake `haxe` executable from conftest.
"""

import asyncio
import logging
from pathlib import Path

import pytest

from hxbuild.compiler.locator import CompilerLocator
from hxbuild.compiler.process import ProcessRunner
from hxbuild.compiler.server import CompilationServerSession


@pytest.fixture
def session(fake_haxe_dir: Path, source_root: Path, free_port: int) -> CompilationServerSession:
    """Session bound to the fake compiler on a free port."""
    return CompilationServerSession(CompilerLocator(fake_haxe_dir), ProcessRunner(), source_root, port=free_port)


@pytest.mark.integration
class TestCompilationServerSession:
    """Test the server lifecycle against the fake compiler."""

    async def test_start_launches_wait_mode(self, session, source_root: Path, fake_haxe_dir: Path, read_calls) -> None:
        """Test start() spawns the compiler in wait mode with the std path."""
        await session.start()
        try:
            assert await session.wait_ready(timeout=10)
            assert session.running
            std = (fake_haxe_dir / "std").resolve()
            assert read_calls(source_root) == [f"wait {session.port} std={std}"]
        finally:
            session.close()
            await session.wait_closed()

    async def test_connect_compile_reuses_server(self, session, source_root: Path, read_calls) -> None:
        """Test connect compiles run against one server process."""
        await session.start()
        try:
            await session.wait_ready(timeout=10)
            first = await session.connect_compile("project.hxml")
            second = await session.connect_compile("project.hxml")

            assert first.ok and second.ok
            assert session.running
            assert (source_root / "build" / "out.tmp").read_text() == "compiled Main\n"
            calls = read_calls(source_root)
            assert calls.count(f"connect {session.port} project.hxml") == 2
            assert sum(call.startswith("wait ") for call in calls) == 1
        finally:
            session.close()
            await session.wait_closed()

    async def test_connect_compile_failure(self, session, source_root: Path) -> None:
        """Test a failing connect compile reports its exit code."""
        (source_root / "broken.hxml").write_text("#fail\n")

        outcome = await session.connect_compile("broken.hxml")

        assert outcome.exit_code == 2

    async def test_cold_compile(self, session, source_root: Path, read_calls) -> None:
        """Test a cold compile does not start the server."""
        outcome = await session.compile("project.hxml")

        assert outcome.ok
        assert not session.running
        assert read_calls(source_root)[0].startswith("compile project.hxml")

    async def test_close_logs_stop_and_is_idempotent(self, session, caplog) -> None:
        """Test close() kills the server, logs the stop and can repeat."""
        session.close()

        await session.start()
        with caplog.at_level(logging.INFO, logger="hxbuild.compiler.server"):
            session.close()
            await session.wait_closed()
            session.close()

        assert not session.running
        assert any("compilation server stopped" in r.getMessage() for r in caplog.records)

    async def test_start_twice_keeps_single_server(self, session, source_root: Path, read_calls) -> None:
        """Test a second start() while running spawns nothing."""
        await session.start()
        try:
            await session.start()
            await session.wait_ready(timeout=10)
            assert sum(call.startswith("wait ") for call in read_calls(source_root)) == 1
        finally:
            session.close()
            await session.wait_closed()


@pytest.mark.unit
async def test_wait_ready_times_out_without_server(source_root: Path, free_port: int) -> None:
    """Test wait_ready gives up when nothing listens."""
    session = CompilationServerSession(CompilerLocator(""), ProcessRunner(), source_root, port=free_port)

    assert await session.wait_ready(timeout=0.2, interval=0.05) is False


@pytest.mark.unit
async def test_wait_ready_accepts_listening_port(source_root: Path) -> None:
    """Test wait_ready succeeds once the port accepts."""
    server = await asyncio.start_server(lambda reader, writer: writer.close(), "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    session = CompilationServerSession(CompilerLocator(""), ProcessRunner(), source_root, port=port)
    try:
        assert await session.wait_ready(timeout=2)
    finally:
        server.close()
        await server.wait_closed()
