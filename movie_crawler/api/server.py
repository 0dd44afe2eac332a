"""
aiohttp application exposing term lookups on a crawled index.
"""

import asyncio
import logging

from aiohttp import web

from ..storage.index import InvertedIndex

INDEX_KEY = web.AppKey('index', InvertedIndex)

logger = logging.getLogger(__name__)


async def handle_stats(request: web.Request) -> web.Response:
    index = request.app[INDEX_KEY]
    return web.json_response(index.get_stats())


async def handle_query(request: web.Request) -> web.Response:
    """Return every movie filed under the requested term as a JSON array."""
    term = request.match_info['term']
    # The index lowercases terms itself
    movies = request.app[INDEX_KEY].query(term)
    logger.debug(f"Query '{term}': {len(movies)} results")
    return web.json_response([movie.to_dict() for movie in movies])


def create_app(index: InvertedIndex) -> web.Application:
    """Build the query application for an index."""
    app = web.Application()
    app[INDEX_KEY] = index
    app.router.add_get('/', handle_stats)
    app.router.add_get('/{term}', handle_query)
    return app


async def serve(index: InvertedIndex, host: str, port: int,
                shutdown_event: asyncio.Event):
    """Serve queries until ``shutdown_event`` is set."""
    runner = web.AppRunner(create_app(index))
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    logger.info(f"Serving {len(index)} terms on http://{host}:{port}/")
    try:
        await shutdown_event.wait()
    finally:
        await runner.cleanup()
        logger.info("Query server stopped")
