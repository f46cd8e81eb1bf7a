"""Buffered file sink with an advisory high-water mark."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

logger = logging.getLogger(__name__)

DEFAULT_HIGH_WATER_MARK = 16384


class FileSink:
    """Queues writes in memory and flushes them to disk off the event loop.

    write() never blocks: it appends to the pending buffer and makes sure a
    flush task is running. Must be used from inside a running event loop.
    """

    def __init__(
        self,
        path: str | Path,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        on_drain: Callable[[], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ):
        self.path = Path(path)
        self.high_water_mark = high_water_mark
        self.on_drain = on_drain
        self.on_error = on_error
        self._pending: list[bytes] = []
        self._buffered = 0
        self._needs_drain = False
        self._file: BinaryIO | None = None
        self._flusher: asyncio.Task | None = None
        self._error: BaseException | None = None
        self._closed = False

    @property
    def buffered(self) -> int:
        """Bytes queued but not yet written."""
        return self._buffered

    def write(self, data: str) -> bool:
        """Queue data for writing. Returns False when the caller should pause."""
        if self._closed:
            raise RuntimeError(f"Write after close: {self.path}")

        chunk = data.encode("utf-8")
        self._pending.append(chunk)
        self._buffered += len(chunk)

        if self._flusher is None or self._flusher.done():
            self._flusher = asyncio.get_running_loop().create_task(self._flush())

        if self._buffered >= self.high_water_mark:
            self._needs_drain = True
            return False
        return True

    async def _flush(self):
        """Drain the pending buffer to disk.

        A failure is reported through on_error and raised again by close().
        """
        while self._pending and self._error is None:
            chunks, self._pending = self._pending, []
            data = b"".join(chunks)
            try:
                await asyncio.to_thread(self._write_bytes, data)
            except OSError as e:
                logger.error("Write failed for %s: %s", self.path, e)
                self._error = e
                self._pending.clear()
                self._buffered = 0
                if self.on_error is not None:
                    self.on_error(e)
                break
            self._buffered -= len(data)

        if self._error is None and self._needs_drain and self._buffered == 0:
            self._needs_drain = False
            if self.on_drain is not None:
                self.on_drain()

    def _write_bytes(self, data: bytes):
        if self._file is None:
            self._open_file()
        self._file.write(data)
        self._file.flush()

    def _open_file(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "wb")

    def _close_file(self):
        if self._file is None:
            self._open_file()
        self._file.close()
        self._file = None

    async def close(self):
        """Flush pending data and close the file."""
        if self._closed:
            raise RuntimeError(f"Sink already closed: {self.path}")
        self._closed = True
        if self._flusher is not None:
            await self._flusher
        if self._error is not None:
            if self._file is not None:
                await asyncio.to_thread(self._file.close)
                self._file = None
            raise self._error
        await asyncio.to_thread(self._close_file)
