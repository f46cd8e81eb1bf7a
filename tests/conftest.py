"""Shared fakes for sink and compressor primitives."""

import pytest


class MemorySink:
    """Sink that keeps writes in memory."""

    def __init__(self, location, on_drain, on_error=None, fail_on_close=False, fail_on_write=False):
        self.location = location
        self.on_drain = on_drain
        self.on_error = on_error
        self.fail_on_close = fail_on_close
        self.fail_on_write = fail_on_write
        self.error: OSError | None = None
        self.chunks: list[str] = []
        self.closed = False

    def write(self, data: str) -> bool:
        if self.closed:
            raise RuntimeError("write after close")
        self.chunks.append(data)
        if self.fail_on_write and self.error is None:
            self.error = OSError("write failed")
            if self.on_error is not None:
                self.on_error(self.error)
        return True

    async def close(self):
        if self.error is not None:
            raise self.error
        if self.fail_on_close:
            raise OSError("disk full")
        self.closed = True

    @property
    def text(self) -> str:
        return "".join(self.chunks)


class MemorySinkFactory:
    """Builds MemorySinks and remembers them by location."""

    def __init__(self, fail_on_close=False, fail_on_write=False):
        self.fail_on_close = fail_on_close
        self.fail_on_write = fail_on_write
        self.sinks: dict[str, MemorySink] = {}

    def __call__(self, location, on_drain, on_error=None):
        sink = MemorySink(
            location,
            on_drain,
            on_error,
            fail_on_close=self.fail_on_close,
            fail_on_write=self.fail_on_write,
        )
        self.sinks[location] = sink
        return sink


class RecordingCompressor:
    """Compressor that only records what it was asked to do."""

    suffix = ".gz"

    def __init__(self, fail=False):
        self.fail = fail
        self.compressed: list[tuple[str, str]] = []
        self.removed: list[str] = []

    async def compress(self, src, dst):
        if self.fail:
            raise OSError("compression failed")
        self.compressed.append((src, dst))

    async def remove(self, path):
        self.removed.append(path)


@pytest.fixture
def sink_factory():
    return MemorySinkFactory()


@pytest.fixture
def compressor():
    return RecordingCompressor()
