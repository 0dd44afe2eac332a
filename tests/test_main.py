"""
Tests for the command line application.
"""

import asyncio
import logging
import signal

import pytest

import main
from movie_crawler.storage.index import InvertedIndex
from movie_crawler.utils.config import LoggingConfig
from tests.pages import make_config


class StalledScheduler:
    """Scheduler whose crawl never finishes on its own."""

    instances = []

    def __init__(self, config, monitor=None):
        self.started = asyncio.Event()
        self.cancelled = False
        StalledScheduler.instances.append(self)

    async def crawl(self):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class InstantScheduler:
    def __init__(self, config, monitor=None):
        pass

    async def crawl(self):
        return InvertedIndex()


@pytest.fixture
def app_config(tmp_path):
    config = make_config()
    config.logging = LoggingConfig(file=str(tmp_path / "crawler.log"))
    return config


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_shutdown_signal_cancels_running_crawl(monkeypatch, app_config):
    StalledScheduler.instances.clear()
    monkeypatch.setattr(main, "CrawlerScheduler", StalledScheduler)
    app = main.CrawlerApp()

    async def scenario():
        run = asyncio.create_task(app.run(app_config, no_serve=True))
        while not StalledScheduler.instances:
            await asyncio.sleep(0)
        await StalledScheduler.instances[0].started.wait()
        app.request_shutdown(signal.SIGINT)
        return await asyncio.wait_for(run, timeout=5)

    assert asyncio.run(scenario()) == 1
    assert StalledScheduler.instances[0].cancelled


def test_completed_crawl_exits_cleanly_without_serving(monkeypatch, app_config):
    monkeypatch.setattr(main, "CrawlerScheduler", InstantScheduler)
    app = main.CrawlerApp()

    assert asyncio.run(app.run(app_config, no_serve=True)) == 0
    assert not app._shutdown_event.is_set()
