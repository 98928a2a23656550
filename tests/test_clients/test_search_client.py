"""Tests for SearchClient (Tavily search wrapper)."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from comeback_coach.clients.search_client import RESOURCE_QUERY, SearchClient, build_search_client

PATCH_TARGET = "comeback_coach.clients.search_client.AsyncTavilyClient"


class TestSearchClientInit:
    def test_missing_api_key_raises_value_error(self, monkeypatch):
        monkeypatch.delenv("TAVILY_API_KEY", raising=False)
        with patch(PATCH_TARGET):
            with pytest.raises(ValueError, match="Tavily API key required"):
                SearchClient()

    def test_init_with_env_var_succeeds(self, monkeypatch):
        monkeypatch.setenv("TAVILY_API_KEY", "env-key")
        with patch(PATCH_TARGET) as mock_cls:
            SearchClient()
        mock_cls.assert_called_once_with(api_key="env-key")


class TestBuildSearchClient:
    def test_without_key_returns_none(self, monkeypatch):
        monkeypatch.delenv("TAVILY_API_KEY", raising=False)
        assert build_search_client() is None

    def test_with_key(self, monkeypatch):
        monkeypatch.setenv("TAVILY_API_KEY", "env-key")
        with patch(PATCH_TARGET):
            assert isinstance(build_search_client(), SearchClient)


class TestSearchClientSearch:
    async def test_search_returns_formatted_results(self):
        mock_tavily = AsyncMock()
        mock_tavily.search = AsyncMock(return_value={
            "results": [
                {"title": "React Docs", "url": "https://react.dev"},
            ]
        })
        with patch(PATCH_TARGET, return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            results = await client.search("react tutorial", max_results=1)

        assert results == [{"title": "React Docs", "url": "https://react.dev", "content": ""}]
        mock_tavily.search.assert_awaited_once_with(
            query="react tutorial", max_results=1, search_depth="basic"
        )

    async def test_search_count_resets_after_get_search_count(self):
        mock_tavily = AsyncMock()
        mock_tavily.search = AsyncMock(return_value={"results": []})
        with patch(PATCH_TARGET, return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            await client.search("one")
            await client.search("two")

        assert client.get_search_count() == 2
        assert client.get_search_count() == 0

    async def test_search_error_propagates(self):
        mock_tavily = AsyncMock()
        mock_tavily.search = AsyncMock(side_effect=RuntimeError("quota"))
        with patch(PATCH_TARGET, return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            with pytest.raises(RuntimeError, match="quota"):
                await client.search("query")


class TestFindResourceUrl:
    async def test_returns_top_hit_url(self):
        mock_tavily = AsyncMock()
        mock_tavily.search = AsyncMock(return_value={
            "results": [
                {"title": "React Docs", "url": "https://react.dev/learn", "content": "Learn React"},
            ]
        })
        with patch(PATCH_TARGET, return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            url = await client.find_resource_url("React hooks")

        assert url == "https://react.dev/learn"
        mock_tavily.search.assert_awaited_once_with(
            query=RESOURCE_QUERY.format(title="React hooks"), max_results=1, search_depth="basic"
        )
        assert client.get_search_count() == 1

    async def test_no_results_returns_none(self):
        mock_tavily = AsyncMock()
        mock_tavily.search = AsyncMock(return_value={"results": []})
        with patch(PATCH_TARGET, return_value=mock_tavily):
            client = SearchClient(api_key="test-key")
            assert await client.find_resource_url("Obscure topic") is None
