"""Sitemap stream: the producer-facing session object."""

import asyncio
import logging
from collections.abc import Mapping

from .config import SitemapSettings, load_settings
from .core import Compressor, GzipCompressor
from .entry import SitemapEntry, normalize_entry
from .errors import SessionFailedError
from .events import Drain, EventDispatcher, Handler, StreamError
from .index import IndexBuilder, IndexDocument
from .pipeline import CompressionPipeline
from .session import CompletionTracker, SessionState, SessionSummary
from .writer import SegmentWriter, SinkFactory

logger = logging.getLogger(__name__)


class SitemapStream:
    """Streams entries into size-capped sitemap segments plus an index.

    inject() and done() never block; they must be called while an event
    loop is running. Completion is reported through SessionDone and can be
    awaited with join().

    Usage:
        stream = SitemapStream(limit=1000, index_base_url="https://example.com")
        for url in urls:
            if not stream.inject(url):
                await stream.wait_for_drain()
        stream.done()
        await stream.join()
    """

    def __init__(
        self,
        settings: SitemapSettings | None = None,
        *,
        sink_factory: SinkFactory | None = None,
        compressor: Compressor | None = None,
        **overrides,
    ):
        if settings is None:
            settings = load_settings(**overrides)
        elif overrides:
            settings = load_settings(**{**settings.model_dump(), **overrides})

        self.settings = settings
        self.dispatcher = EventDispatcher()
        self.pipeline = CompressionPipeline(
            enabled=settings.compression_enabled,
            compressor=compressor or GzipCompressor(settings.compress_level),
        )
        self._sink_factory = sink_factory
        self._writable = asyncio.Event()
        self._writable.set()
        self._retired: list[SegmentWriter] = []

        self.dispatcher.on(Drain, self._on_drain)
        self.dispatcher.on(StreamError, self._on_error)
        self._new_session()

    def _new_session(self):
        self.state = SessionState(limit=self.settings.limit)
        self.tracker = CompletionTracker(self.state, self.dispatcher)
        self.writer = SegmentWriter(
            self.settings,
            self.state,
            self.tracker,
            self.dispatcher,
            self.pipeline,
            sink_factory=self._sink_factory,
        )
        self.index_builder = IndexBuilder(self.settings, self.state, self.writer, self.pipeline)
        self._writable.set()

    def _on_drain(self, event: Drain):
        self._writable.set()

    def _on_error(self, event: StreamError):
        # wake a producer paused on backpressure; the session is over
        self._writable.set()

    def on(self, kind: type, handler: Handler) -> Handler:
        """Register a handler for SegmentCreated, IndexCreated, SessionDone, StreamError or Drain."""
        return self.dispatcher.on(kind, handler)

    def off(self, kind: type, handler: Handler):
        self.dispatcher.off(kind, handler)

    @property
    def injected_count(self) -> int:
        return self.state.injected_count

    def inject(self, entry: "str | Mapping | SitemapEntry") -> bool:
        """Add one location or record to the current session.

        Returns False when the producer should pause until Drain (see
        wait_for_drain). Malformed entries raise InvalidEntryError and leave
        the session untouched.
        """
        if self.state.injection_closed:
            raise RuntimeError("Cannot inject after done()")

        record = normalize_entry(entry)
        accepted = self.writer.write_entry(record)
        if not accepted:
            self._writable.clear()
        return accepted

    def done(self) -> IndexDocument:
        """Declare end of injection: close the last segment and write the index."""
        return self.index_builder.build()

    async def wait_for_drain(self):
        """Wait until a backpressured sink has flushed.

        Raises:
            SessionFailedError: if the session failed while waiting.
        """
        await self._writable.wait()
        self._raise_if_failed()

    async def join(self) -> int:
        """Wait for SessionDone and return the finalized resource count.

        Raises:
            SessionFailedError: if any write or compression failed.
        """
        await self.tracker.finished.wait()
        self._raise_if_failed()
        return self.state.written_count

    def _raise_if_failed(self):
        error = self.tracker.error
        if error is not None:
            raise SessionFailedError(f"Sitemap session failed: {error}") from error

    def start_next_session(self, output_base: str | None = None) -> SessionSummary:
        """Capture the closed session's final counts and start a fresh one.

        Finalizations still in flight keep reporting to the previous
        session. Refuses to run before done(), since the injected count is
        needed to build the index.
        """
        if not self.state.injection_closed:
            raise RuntimeError("Call done() before starting the next session")

        summary = self.tracker.summary()
        if output_base is not None:
            self.settings = self.settings.model_copy(update={"output_base": output_base})

        self._retired = [w for w in self._retired if w.pending]
        if self.writer.pending:
            self._retired.append(self.writer)

        logger.info(
            "Starting next session after %d entries in %d segment(s)",
            summary.injected_count,
            summary.segment_count,
        )
        self._new_session()
        return summary

    async def wait_idle(self):
        """Wait for every in-flight finalization, including retired sessions."""
        for writer in [*self._retired, self.writer]:
            await writer.wait_idle()
        self._retired.clear()
