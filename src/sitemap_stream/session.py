"""Session counters and completion accounting.

All mutation happens on the event loop thread: injection runs synchronously
from the producer and finalization callbacks resume on the same loop, so the
counters need no locking.
"""

import asyncio
import logging
import math
from dataclasses import dataclass

from .events import EventDispatcher, SessionDone

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Mutable counters for one round of segment and index production."""
    limit: int
    injected_count: int = 0
    written_count: int = 0
    injection_closed: bool = False
    done_emitted: bool = False
    failed: bool = False

    @property
    def ordinal_for_next_entry(self) -> int:
        """Ordinal of the segment the next injected entry lands in."""
        return self.injected_count // self.limit + 1

    @property
    def needs_rotation(self) -> bool:
        """True when the next entry starts a new segment."""
        return self.injected_count % self.limit == 0

    @property
    def segment_count(self) -> int:
        """Segments produced for the current count. Never less than one."""
        return max(1, math.ceil(self.injected_count / self.limit))

    @property
    def expected_total(self) -> int | None:
        """Segments plus the index, known only once injection is closed."""
        if not self.injection_closed:
            return None
        return self.segment_count + 1


@dataclass(frozen=True)
class SessionSummary:
    """Final counts captured from a closed session."""
    injected_count: int
    segment_count: int
    written_count: int
    completed: bool


class CompletionTracker:
    """Counts finalized resources and fires SessionDone exactly once.

    `finished` is set when the session completes or fails; `error` holds
    the first failure cause.
    """

    def __init__(self, state: SessionState, dispatcher: EventDispatcher):
        self.state = state
        self.dispatcher = dispatcher
        self.finished = asyncio.Event()
        self.error: BaseException | None = None

    def record_finalized(self):
        """Count one finalized segment or index."""
        state = self.state
        if state.done_emitted:
            logger.warning("Ignoring finalization after session completed")
            return

        state.written_count += 1
        expected = state.expected_total
        logger.debug("Finalized %d/%s resources", state.written_count, expected or "?")

        if expected is not None and state.written_count == expected:
            state.done_emitted = True
            self.finished.set()
            self.dispatcher.emit(SessionDone(finalized_count=state.written_count))

    def record_failure(self, cause: BaseException):
        """Mark the session failed. The failed resource is never counted."""
        self.state.failed = True
        if self.error is None:
            self.error = cause
        self.finished.set()

    def summary(self) -> SessionSummary:
        state = self.state
        return SessionSummary(
            injected_count=state.injected_count,
            segment_count=state.segment_count,
            written_count=state.written_count,
            completed=state.done_emitted,
        )
