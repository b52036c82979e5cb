# File: tests/test_fetcher.py
from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web

from listing_scout.crawler.fetcher import FetchOptions, HttpFetcher
from listing_scout.crawler.session import Identity
from listing_scout.errors import TransportError


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def listing_server(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    async def handle_listing(_):
        return web.Response(
            text="<html><head><title>59 Whitsunday Drive</title></head><body><h1>House</h1></body></html>",
            content_type="text/html",
        )

    async def handle_echo(request):
        return web.Response(
            text=f"<html><body><p id='ua'>{request.headers.get('User-Agent')}</p>"
            f"<p id='lang'>{request.headers.get('Accept-Language')}</p></body></html>",
            content_type="text/html",
        )

    async def handle_error(_):
        return web.Response(status=503, text="try later")

    async def handle_missing(_):
        return web.Response(status=404, text="gone")

    async def handle_forbidden(_):
        return web.Response(
            status=403,
            text="<html><head><title>403 Forbidden</title></head><body>Access Denied</body></html>",
            content_type="text/html",
        )

    async def handle_redirect(_):
        raise web.HTTPFound("/listing")

    app.router.add_get("/listing", handle_listing)
    app.router.add_get("/echo", handle_echo)
    app.router.add_get("/error", handle_error)
    app.router.add_get("/missing", handle_missing)
    app.router.add_get("/forbidden", handle_forbidden)
    app.router.add_get("/old-listing", handle_redirect)

    async for url in _serve_app(app, unused_tcp_port):
        yield url


@pytest.fixture()
def identity() -> Identity:
    return Identity(["TestAgent/1.0", "TestAgent/2.0"])


OPTIONS = FetchOptions(timeout=5.0, headers={"Accept-Language": "en-AU,en;q=0.9"})


@pytest.mark.asyncio()
async def test_fetch_returns_parsed_document(listing_server, identity):
    async with HttpFetcher(identity) as fetcher:
        doc = await fetcher.fetch(f"{listing_server}/listing", OPTIONS)
    assert doc.status == 200
    assert doc.title == "59 Whitsunday Drive"
    assert doc.select_one_text("h1") == "House"


@pytest.mark.asyncio()
async def test_identity_headers_are_sent(listing_server, identity):
    async with HttpFetcher(identity) as fetcher:
        doc = await fetcher.fetch(f"{listing_server}/echo", OPTIONS)
        assert doc.select_one_text("#ua") == identity.user_agent
        assert doc.select_one_text("#lang") == "en-AU,en;q=0.9"

        before = identity.user_agent
        identity.retire()
        doc = await fetcher.fetch(f"{listing_server}/echo", OPTIONS)
        assert identity.user_agent != before
        assert doc.select_one_text("#ua") == identity.user_agent


@pytest.mark.asyncio()
async def test_redirect_reports_final_url(listing_server, identity):
    async with HttpFetcher(identity) as fetcher:
        doc = await fetcher.fetch(f"{listing_server}/old-listing", OPTIONS)
    assert doc.url == f"{listing_server}/listing"


@pytest.mark.asyncio()
async def test_server_error_is_retryable(listing_server, identity):
    async with HttpFetcher(identity) as fetcher:
        with pytest.raises(TransportError) as exc_info:
            await fetcher.fetch(f"{listing_server}/error", OPTIONS)
    assert exc_info.value.status == 503
    assert exc_info.value.retryable


@pytest.mark.asyncio()
async def test_not_found_is_not_retryable(listing_server, identity):
    async with HttpFetcher(identity) as fetcher:
        with pytest.raises(TransportError) as exc_info:
            await fetcher.fetch(f"{listing_server}/missing", OPTIONS)
    assert exc_info.value.status == 404
    assert not exc_info.value.retryable


@pytest.mark.asyncio()
async def test_block_status_is_passed_through(listing_server, identity):
    async with HttpFetcher(identity) as fetcher:
        doc = await fetcher.fetch(f"{listing_server}/forbidden", OPTIONS)
    assert doc.status == 403
    assert doc.title == "403 Forbidden"


@pytest.mark.asyncio()
async def test_connection_refused_is_transport_error(unused_tcp_port, identity):
    async with HttpFetcher(identity) as fetcher:
        with pytest.raises(TransportError):
            await fetcher.fetch(f"http://localhost:{unused_tcp_port}/listing", OPTIONS)


@pytest.mark.asyncio()
async def test_fetch_without_session_fails(identity):
    with pytest.raises(RuntimeError):
        await HttpFetcher(identity).fetch("http://localhost/", OPTIONS)
