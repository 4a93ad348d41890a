import json
from typing import Any, Dict, Iterator, List, Optional, Union

import pytest
from fastmcp import Client, FastMCP
from sqlalchemy.orm import Session, sessionmaker

from scriptorium.config import Settings
from scriptorium.corpus import Corpus
from scriptorium.mcp.tools.search import register_search_tools
from scriptorium.search.service import SearchService
from scriptorium.search.store import IndexStore


class DummyState:
    def __init__(self, search_service: Optional[SearchService] = None) -> None:
        self.settings = Settings()
        self.search_service = search_service


def _extract_json_payload(result: Any) -> Union[Dict[str, Any], List[Any], str]:
    if isinstance(result, (dict, list, str)):
        return result
    # FastMCP Client returns CallToolResult with content list of TextContent
    content = getattr(result, "content", None)
    if isinstance(content, list) and content:
        for item in content:
            text = getattr(item, "text", None)
            if isinstance(text, str):
                try:
                    return json.loads(text)
                except json.JSONDecodeError:
                    return text
    raise AssertionError("Unable to extract JSON payload from tool result")


@pytest.fixture
def service(session_factory: sessionmaker[Session], corpus: Corpus) -> Iterator[SearchService]:
    svc = SearchService(IndexStore(session_factory), lambda: corpus)
    yield svc
    svc.shutdown()


def make_mcp(state: DummyState) -> FastMCP:
    mcp = FastMCP("test")
    register_search_tools(mcp, get_state=lambda: state)
    return mcp


@pytest.mark.asyncio
async def test_version_before_any_build(service: SearchService) -> None:
    client = Client(make_mcp(DummyState(service)))
    async with client:
        res = await client.call_tool("search_index_version", {})
    payload = _extract_json_payload(res)
    assert payload == {"last_updated": None, "count": 0, "etag": None}


@pytest.mark.asyncio
async def test_rebuild_then_search(service: SearchService) -> None:
    client = Client(make_mcp(DummyState(service)))
    async with client:
        rebuilt = _extract_json_payload(await client.call_tool("search_rebuild", {}))
        found = _extract_json_payload(await client.call_tool("search", {"query": "compasivo"}))
        advanced = _extract_json_payload(
            await client.call_tool("search", {"query": '+justicia -escritos', "limit": 1})
        )

    assert isinstance(rebuilt, dict)
    assert rebuilt["success"] is True
    assert rebuilt["count"] == 8
    assert rebuilt["paragraph_count"] == 4
    assert "documents" not in rebuilt

    assert isinstance(found, dict)
    assert found["total"] == 1
    hit = found["results"][0]
    assert hit["id"] == "paragraph-1"
    assert hit["strategy"] == "native"
    assert hit["work_slug"] == "kitab-i-iqan"
    assert "Compasivo" in hit["fragment"]

    assert isinstance(advanced, dict)
    assert advanced["total"] == 3
    assert len(advanced["results"]) == 1
    assert advanced["results"][0]["strategy"] == "heuristic"


@pytest.mark.asyncio
async def test_index_fetch_honours_etag(service: SearchService) -> None:
    client = Client(make_mcp(DummyState(service)))
    async with client:
        full = _extract_json_payload(await client.call_tool("search_index", {}))
        assert isinstance(full, dict)
        etag = full["etag"]
        same = _extract_json_payload(
            await client.call_tool("search_index", {"if_none_match": etag})
        )
        version = _extract_json_payload(await client.call_tool("search_index_version", {}))

    assert full["unchanged"] is False
    assert [d["id"] for d in full["documents"]][:2] == ["title-1", "title-2"]
    assert same == {"unchanged": True, "etag": etag}
    assert isinstance(version, dict)
    assert version["etag"] == etag
    assert version["count"] == 8


@pytest.mark.asyncio
async def test_suggest(service: SearchService) -> None:
    service.get_or_build()
    client = Client(make_mcp(DummyState(service)))
    async with client:
        res = await client.call_tool("search_suggest", {"query": "la revel"})
    payload = _extract_json_payload(res)
    assert payload == ["revelación"]


@pytest.mark.asyncio
async def test_tools_fail_without_service() -> None:
    client = Client(make_mcp(DummyState()))
    async with client:
        with pytest.raises(Exception):
            await client.call_tool("search", {"query": "Dios"})
