"""Index builder: closes the last segment and writes the sitemap index."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .config import SitemapSettings
from .markup import INDEX_HEADER, INDEX_TRAILER, format_index_entry, segment_filename
from .pipeline import CompressionPipeline
from .session import SessionState

if TYPE_CHECKING:
    from .writer import SegmentWriter

logger = logging.getLogger(__name__)


def resolve_location(base_url: str, filename: str) -> str:
    """Join a filename onto the index base URL, keeping any base path."""
    if not base_url:
        return filename
    return f"{base_url.rstrip('/')}/{filename}"


@dataclass(frozen=True)
class IndexEntry:
    location: str
    timestamp: str


@dataclass
class IndexDocument:
    """Ordered (location, timestamp) pairs, one per segment."""
    entries: list[IndexEntry] = field(default_factory=list)

    def render(self) -> str:
        body = "".join(format_index_entry(e.location, e.timestamp) for e in self.entries)
        return f"{INDEX_HEADER}{body}{INDEX_TRAILER}"


class IndexBuilder:
    """Runs once at end of injection."""

    def __init__(
        self,
        settings: SitemapSettings,
        state: SessionState,
        writer: "SegmentWriter",
        pipeline: CompressionPipeline,
    ):
        self.settings = settings
        self.state = state
        self.writer = writer
        self.pipeline = pipeline

    def build_document(self) -> IndexDocument:
        """List every segment under its post-compression name."""
        entries = [
            IndexEntry(
                location=resolve_location(
                    self.settings.index_base_url,
                    self.pipeline.final_location(segment_filename(ordinal)),
                ),
                timestamp=self.settings.timestamp,
            )
            for ordinal in range(1, self.state.segment_count + 1)
        ]
        return IndexDocument(entries=entries)

    def build(self) -> IndexDocument:
        """Close injection, close the last segment and write the index."""
        if self.state.injection_closed:
            raise RuntimeError("Index already built for this session")

        self.state.injection_closed = True
        if self.writer.current is None and not self.writer.segments:
            # an empty session still produces one segment
            self.writer.open()
        self.writer.close()

        document = self.build_document()
        logger.debug(
            "Writing index for %d entries in %d segment(s)",
            self.state.injected_count,
            len(document.entries),
        )
        self.writer.write_index(document)
        return document
