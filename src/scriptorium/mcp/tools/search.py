"""Search tools for FastMCP.

These tools sit on top of `SearchService` so the agent never touches the
index or the snapshot store directly.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP


def register_search_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register search tools on the given FastMCP instance.

    The `get_state` callable should return an object with attribute
    `search_service` (a `SearchService`).
    """

    def _service() -> Any:
        state = get_state()
        if state is None or getattr(state, "search_service", None) is None:
            raise RuntimeError(
                "Search service is not configured. Check database settings in config/.env."
            )
        return state.search_service

    @mcp.tool
    def search(query: str, limit: Optional[int] = None) -> Dict[str, Any]:
        """Search published works.

        Supports "exact phrases", +required and -excluded terms, and /regex/
        literals. Plain queries are ranked by the inverted index with field
        boosts (title > author > section > text).

        Parameters
        ----------
        query: str
            Raw query string.
        limit: int | None
            Maximum number of results (defaults to the configured result limit).
        """
        results, total = _service().search_page(query or "", limit=limit)
        return {
            "query": query,
            "total": total,
            "results": [r.to_dict() for r in results],
        }

    @mcp.tool
    def search_index(force: bool = False, if_none_match: Optional[str] = None) -> Dict[str, Any]:
        """Return the full search document set for client-side indexing.

        If `if_none_match` equals the current snapshot's etag, only
        `{"unchanged": true, "etag": ...}` is returned. `force` rebuilds first.
        """
        return _service().fetch_index(force=force, if_none_match=if_none_match or None).to_dict()

    @mcp.tool
    def search_index_version() -> Dict[str, Any]:
        """Return `last_updated` and `count` of the current snapshot (cheap staleness check)."""
        version = _service().probe_version()
        if version is None:
            return {"last_updated": None, "count": 0, "etag": None}
        return version.to_dict()

    @mcp.tool
    def search_rebuild() -> Dict[str, Any]:
        """Rebuild the search index now and persist a new snapshot."""
        snapshot = _service().get_or_build(force=True)
        out = snapshot.to_dict(include_documents=False)
        out["success"] = True
        return out

    @mcp.tool
    def search_suggest(query: str, limit: Optional[int] = None) -> List[str]:
        """Suggest corpus words completing the last word of `query`."""
        return _service().suggest(query or "", limit=limit)
