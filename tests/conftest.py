import asyncio

import pytest

from countdown import create_app
from countdown.config import TestingConfig
from countdown.engine import Search, SearchOptions


@pytest.fixture
def app():
    return create_app(TestingConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def cli_runner(app):
    return app.test_cli_runner()


class Recorder:
    """Collects every callback a Search makes, in order."""

    def __init__(self):
        self.events = []
        self.solutions = []
        self.progress = []
        self.search = None
        self._done = None
        self.on_progress_hook = None

    # callbacks
    def on_solution(self, handle):
        self.events.append("solution")
        self.solutions.append(handle)

    def on_progress(self, p):
        self.events.append("progress")
        self.progress.append(p)
        if self.on_progress_hook is not None:
            self.on_progress_hook(self, p)

    def on_complete(self):
        self.events.append("complete")
        self._finish()

    def on_cancel(self):
        self.events.append("cancel")
        self._finish()

    def _finish(self):
        if self._done is not None and not self._done.done():
            self._done.set_result(None)

    def count(self, name):
        return self.events.count(name)

    def options(self, **kwargs):
        return SearchOptions(
            on_solution=self.on_solution,
            on_progress=self.on_progress,
            on_complete=self.on_complete,
            on_cancel=self.on_cancel,
            **kwargs,
        )


def run_search(recorder=None, cancel_before_start=False, settle=0.02, **kwargs):
    """Run one Search on a fresh loop until it reaches a terminal state."""
    rec = recorder or Recorder()

    async def main():
        loop = asyncio.get_running_loop()
        rec._done = loop.create_future()
        rec.search = Search(rec.options(**kwargs))
        if cancel_before_start:
            rec.search.cancel()
        rec.search.start()
        await asyncio.wait_for(rec._done, timeout=10)
        # give stray callbacks a chance to (wrongly) fire
        await asyncio.sleep(settle)

    asyncio.run(main())
    return rec
