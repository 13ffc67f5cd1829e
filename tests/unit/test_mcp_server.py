"""Tests for MCP server entry point."""
from __future__ import annotations

import json
import types
from unittest.mock import MagicMock, patch

import pytest


class TestRequireMcp:
    def test_returns_fastmcp_class_when_available(self):
        from lattice.mcp.server import _require_mcp

        fake_class = type("FastMCP", (), {})
        mod = types.SimpleNamespace(FastMCP=fake_class)
        with patch.dict("sys.modules", {"mcp": MagicMock(), "mcp.server": MagicMock(), "mcp.server.fastmcp": mod}):
            result = _require_mcp()
        assert result is fake_class

    def test_raises_runtime_error_when_mcp_missing(self):
        from lattice.mcp.server import _require_mcp

        with patch.dict("sys.modules", {"mcp": None, "mcp.server": None, "mcp.server.fastmcp": None}):
            with pytest.raises(RuntimeError, match="MCP support is not installed"):
                _require_mcp()


class TestBuildServer:
    def test_registers_all_tools(self):
        from lattice.mcp import server

        fake_mcp = MagicMock()
        fake_mcp.tool.return_value = lambda fn: fn
        fake_fastmcp_cls = MagicMock(return_value=fake_mcp)

        with patch.object(server, "_require_mcp", return_value=fake_fastmcp_cls):
            assert server.build_server() is fake_mcp

        fake_fastmcp_cls.assert_called_once_with(name="Lattice")
        names = [c.kwargs["name"] for c in fake_mcp.tool.call_args_list]
        assert names == [
            "lattice_list",
            "lattice_get",
            "lattice_trace",
            "lattice_drift",
            "lattice_search",
            "lattice_summary",
            "lattice_resolve",
            "lattice_verify",
            "lattice_refine",
        ]

    def test_registered_tool_delegates(self, sample_lattice):
        from lattice.mcp import server

        payload = json.loads(server.lattice_drift(lattice_root=str(sample_lattice)))
        assert payload["total_stale_edges"] == 1


class TestRunMcpServer:
    def test_run_calls_run(self):
        from lattice.mcp import server

        fake_mcp = MagicMock()
        fake_mcp.run.return_value = None
        fake_mcp.tool.return_value = lambda fn: fn

        with patch.object(server, "_require_mcp", return_value=MagicMock(return_value=fake_mcp)):
            server.run()

        fake_mcp.run.assert_called_once()

    def test_run_handles_awaitable_result(self):
        from lattice.mcp import server

        fake_mcp = MagicMock()

        async def _fake_coro():
            pass

        coro = _fake_coro()
        fake_mcp.run.return_value = coro
        fake_mcp.tool.return_value = lambda fn: fn

        with patch.object(server, "_require_mcp", return_value=MagicMock(return_value=fake_mcp)):
            with patch("asyncio.run") as mock_asyncio_run:
                server.run()

        mock_asyncio_run.assert_called_once()

        # Close unawaited coroutines to avoid RuntimeWarning leaking into later tests
        inner_coro = mock_asyncio_run.call_args[0][0]
        inner_coro.close()
        coro.close()
