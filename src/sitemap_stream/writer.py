"""Segment writer: owns the open segment, rotates it, and finalizes closed ones."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from enum import Enum

from .config import SitemapSettings
from .core import FileSink, Sink
from .entry import SitemapEntry
from .events import Drain, EventDispatcher, IndexCreated, SegmentCreated, StreamError
from .index import IndexDocument
from .markup import (
    INDEX_FILENAME,
    URLSET_TRAILER,
    format_entry,
    segment_filename,
    urlset_header,
)
from .pipeline import CompressionPipeline
from .session import CompletionTracker, SessionState

logger = logging.getLogger(__name__)

SinkFactory = Callable[[str, Callable[[], None], Callable[[BaseException], None]], Sink]


class SegmentState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    COMPRESSING = "compressing"
    FINALIZED = "finalized"


_TRANSITIONS = {
    SegmentState.OPEN: {SegmentState.CLOSED},
    SegmentState.CLOSED: {SegmentState.COMPRESSING, SegmentState.FINALIZED},
    SegmentState.COMPRESSING: {SegmentState.FINALIZED},
    SegmentState.FINALIZED: set(),
}


@dataclass
class Segment:
    """One output resource: a urlset segment, or the index when ordinal is None."""
    location: str
    ordinal: int | None = None
    state: SegmentState = SegmentState.OPEN
    entry_count: int = 0
    final_location: str | None = None

    @property
    def is_index(self) -> bool:
        return self.ordinal is None

    def advance(self, new_state: SegmentState):
        """Move forward through Open -> Closed -> (Compressing ->)? Finalized."""
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Invalid transition {self.state.value} -> {new_state.value} for {self.location}")
        self.state = new_state


class SegmentWriter:
    """Writes entries into size-capped segments.

    open/write_entry/close never await. Closing a segment schedules a task
    that flushes the sink, runs the compression pipeline and reports the
    outcome to the completion tracker. Must be used from inside a running
    event loop.
    """

    def __init__(
        self,
        settings: SitemapSettings,
        state: SessionState,
        tracker: CompletionTracker,
        dispatcher: EventDispatcher,
        pipeline: CompressionPipeline,
        sink_factory: SinkFactory | None = None,
    ):
        self.settings = settings
        self.state = state
        self.tracker = tracker
        self.dispatcher = dispatcher
        self.pipeline = pipeline
        self.sink_factory = sink_factory or self._file_sink

        self.segments: list[Segment] = []
        self.index: Segment | None = None
        self.current: Segment | None = None
        self._sink: Sink | None = None
        self._tasks: set[asyncio.Task] = set()
        self._reported: list[BaseException] = []

    def _file_sink(
        self,
        location: str,
        on_drain: Callable[[], None],
        on_error: Callable[[BaseException], None],
    ) -> Sink:
        return FileSink(
            location,
            high_water_mark=self.settings.high_water_mark,
            on_drain=on_drain,
            on_error=on_error,
        )

    def _on_drain(self):
        self.dispatcher.emit(Drain(injected_count=self.state.injected_count))

    def _on_sink_error(self, error: BaseException):
        """Fail the session as soon as a sink write fails, before close()."""
        self._report_failure(error)

    def _report_failure(self, error: BaseException):
        if any(error is seen for seen in self._reported):
            return
        self._reported.append(error)
        self.tracker.record_failure(error)
        self.dispatcher.emit(StreamError(cause=error))

    def location_for(self, filename: str) -> str:
        """Raw output location for a filename under the output base."""
        return f"{self.settings.output_base}{filename}"

    @property
    def pending(self) -> int:
        """Number of closed resources still being finalized."""
        return len(self._tasks)

    def open(self) -> Segment:
        """Close the current segment, if any, and start the next one."""
        if self.current is not None:
            self.close()

        ordinal = self.state.ordinal_for_next_entry
        segment = Segment(location=self.location_for(segment_filename(ordinal)), ordinal=ordinal)
        self._sink = self.sink_factory(segment.location, self._on_drain, self._on_sink_error)
        self._sink.write(urlset_header(self.settings.mobile_enabled))

        self.current = segment
        self.segments.append(segment)
        logger.debug("Opened segment %d at %s", ordinal, segment.location)
        return segment

    def write_entry(self, entry: SitemapEntry) -> bool:
        """Append one entry, rotating first when the segment is full.

        Returns False when the sink asks the producer to pause until Drain.
        Ignoring it loses no data.
        """
        if self.current is None or self.state.needs_rotation:
            self.open()

        block = format_entry(entry, self.settings.timestamp, self.settings.mobile_enabled)
        accepted = self._sink.write(block)
        self.current.entry_count += 1
        self.state.injected_count += 1
        return accepted

    def close(self) -> Segment | None:
        """Write the trailer of the open segment and schedule its finalization."""
        segment, sink = self.current, self._sink
        if segment is None:
            return None

        self.current = None
        self._sink = None
        sink.write(URLSET_TRAILER)
        segment.advance(SegmentState.CLOSED)
        logger.debug("Closed segment %d with %d entries", segment.ordinal, segment.entry_count)
        self._schedule(self._finish(segment, sink))
        return segment

    def write_index(self, document: IndexDocument) -> Segment:
        """Write the index document and schedule its finalization."""
        index = Segment(location=self.location_for(INDEX_FILENAME))
        sink = self.sink_factory(index.location, self._on_drain, self._on_sink_error)
        sink.write(document.render())
        index.entry_count = len(document.entries)

        index.advance(SegmentState.CLOSED)
        self.index = index
        self._schedule(self._finish(index, sink))
        return index

    def _schedule(self, coro: Coroutine):
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _finish(self, segment: Segment, sink: Sink):
        """Flush, compress and report one closed resource."""
        try:
            await sink.close()
            if self.pipeline.enabled:
                segment.advance(SegmentState.COMPRESSING)
            final_location = await self.pipeline.finalize(segment.location)
        except Exception as e:
            logger.error("Failed to finalize %s: %s", segment.location, e)
            self._report_failure(e)
            return

        segment.final_location = final_location
        segment.advance(SegmentState.FINALIZED)
        if segment.is_index:
            self.dispatcher.emit(IndexCreated(location=final_location))
        else:
            self.dispatcher.emit(SegmentCreated(location=final_location, ordinal=segment.ordinal))
        self.tracker.record_finalized()

    async def wait_idle(self):
        """Wait until every scheduled finalization has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
