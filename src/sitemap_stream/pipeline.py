"""Optional compression step between a closed resource and its final location."""

import logging

from .core import Compressor, GzipCompressor

logger = logging.getLogger(__name__)


class CompressionPipeline:
    """Turns a raw resource location into its finalized location.

    Compression is session-wide: either every resource goes through the
    compressor or none does.
    """

    def __init__(self, enabled: bool = True, compressor: Compressor | None = None):
        self.enabled = enabled
        self.compressor = compressor or GzipCompressor()

    def final_location(self, raw_location: str) -> str:
        """Location a raw resource ends up at once finalized."""
        if not self.enabled:
            return raw_location
        return f"{raw_location}{self.compressor.suffix}"

    async def finalize(self, raw_location: str) -> str:
        """Compress and remove the raw resource if enabled.

        Returns the finalized location. Any failure propagates and leaves
        the resource un-finalized.
        """
        if not self.enabled:
            return raw_location

        target = self.final_location(raw_location)
        logger.debug("Compressing %s -> %s", raw_location, target)
        await self.compressor.compress(raw_location, target)
        await self.compressor.remove(raw_location)
        return target
