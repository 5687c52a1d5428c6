"""Tests for the MCP server wiring."""

from __future__ import annotations

import pytest

from diffx.mcp.server import _get_repo_path, create_server


class TestServer:
    @pytest.mark.asyncio
    async def test_registers_tools(self):
        server = create_server()
        names = {tool.name for tool in await server.list_tools()}
        assert {"diffx_parse", "diffx_diff"} <= names

    def test_repo_path_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DIFFX_REPO_PATH", str(tmp_path))
        assert _get_repo_path() == tmp_path.resolve()
