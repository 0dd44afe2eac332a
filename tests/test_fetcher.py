"""
Tests for the aiohttp fetcher against a local test server.
"""

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from movie_crawler.crawler.fetcher import FetchResult, WebFetcher
from movie_crawler.exceptions import TransportError


async def _page(request):
    return web.Response(text="<html><h1>Hello</h1></html>", content_type="text/html")


async def _missing(request):
    return web.Response(status=404, text="gone")


async def _image(request):
    return web.Response(body=b"\x89PNG", content_type="image/png")


async def _large(request):
    return web.Response(text="x" * 2048, content_type="text/html")


def _fetch_all(paths, **fetcher_kwargs):
    app = web.Application()
    app.router.add_get('/page', _page)
    app.router.add_get('/missing', _missing)
    app.router.add_get('/image', _image)
    app.router.add_get('/large', _large)

    async def run():
        async with TestServer(app) as server:
            async with WebFetcher("TestAgent/1.0", request_timeout=5, **fetcher_kwargs) as fetcher:
                results = [await fetcher.fetch(str(server.make_url(path))) for path in paths]
                return results, fetcher.get_stats()

    return asyncio.run(run())


def test_fetch_success():
    (result,), stats = _fetch_all(['/page'])
    assert result.ok
    assert result.status_code == 200
    assert "Hello" in result.raise_for_error()
    assert stats['successful_requests'] == 1


def test_fetch_error_status_is_reported():
    (result,), stats = _fetch_all(['/missing'])
    assert not result.ok
    assert result.error == "HTTP 404"
    with pytest.raises(TransportError) as excinfo:
        result.raise_for_error()
    assert excinfo.value.status_code == 404
    assert stats['failed_requests'] == 1


def test_fetch_skips_non_text_content():
    (result,), _ = _fetch_all(['/image'])
    assert result.error == "Non-text content type"


def test_fetch_enforces_size_limit():
    (result,), _ = _fetch_all(['/large'], max_content_bytes=1024)
    assert result.error == "Content too large"


def test_connection_failure_is_reported():
    async def run():
        async with WebFetcher("TestAgent/1.0", request_timeout=2) as fetcher:
            return await fetcher.fetch("http://127.0.0.1:1/nothing")

    result = asyncio.run(run())
    assert result.status_code == 0
    assert result.error.startswith("Client error")


def test_empty_result_raises_transport_error():
    with pytest.raises(TransportError):
        FetchResult(url="http://x", status_code=200).raise_for_error()
