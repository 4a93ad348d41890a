"""Scriptorium MCP server entrypoint using FastMCP.

Exposes the search engine (queries, index payload, version probe, rebuild).
Run with:
  - scriptorium-mcp
  - or: python -m scriptorium.mcp.server (ensure PYTHONPATH includes ./src)
"""
from __future__ import annotations

import logging
from typing import Optional

from fastmcp import FastMCP

from scriptorium.config import Settings, load_settings
from scriptorium.logging_setup import configure_logging
from scriptorium.search.service import SearchService
from scriptorium.search.store import IndexStore
from scriptorium.storage.content import ContentStore
from scriptorium.storage.database import get_engine, init_db, make_session_factory
from scriptorium.mcp.tools import register_search_tools

logger = logging.getLogger(__name__)


class AppState:
    """Application state shared by MCP tools."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.content: Optional[ContentStore] = None
        self.search_service: Optional[SearchService] = None

    def init_services(self) -> None:
        """Wire database, content store and search service from configuration."""
        engine = get_engine(self.settings.database.url, echo=self.settings.database.echo)
        init_db(engine)
        factory = make_session_factory(engine)

        self.content = ContentStore(factory)
        self.search_service = SearchService(
            IndexStore(factory, version=self.settings.search.version),
            self.content.load_corpus,
            self.settings.search,
        )
        # Every content mutation schedules a rebuild once its write commits
        self.content.set_on_change(self.search_service.trigger_rebuild_async)

    def close(self) -> None:
        if self.search_service is not None:
            self.search_service.shutdown(wait=False)


# Global state and server instance
_state: Optional[AppState] = None
mcp = FastMCP("Scriptorium MCP Server")


# ----- Tools -----

@mcp.tool
def health() -> str:
    """Simple health check tool."""
    return "ok"


# ----- Entrypoint -----

def main() -> None:
    """Initialize state and run the MCP server."""
    global _state
    settings = load_settings()
    configure_logging(settings.app.log_level)
    _state = AppState(settings)
    _state.init_services()
    register_search_tools(mcp, get_state=lambda: _state)
    logger.info("Starting %s (%s transport)", settings.app.name, settings.app.transport)
    # Choose transport based on configuration: stdio (default), http, or sse
    transport = settings.app.transport
    try:
        if transport in ("http", "sse"):
            mcp.run(transport=transport, host=settings.app.host, port=settings.app.port)
        else:
            mcp.run()
    finally:
        _state.close()


if __name__ == "__main__":  # pragma: no cover
    main()
