"""Protocol definitions for the byte-level sink and compression primitives."""

from typing import Protocol


class Sink(Protocol):
    """Protocol for buffered output sinks."""

    def write(self, data: str) -> bool:
        """Queue data. Returns False when buffered volume reached the high-water mark."""
        ...

    async def close(self):
        """Flush everything, close the resource, re-raise any write failure."""
        ...


class Compressor(Protocol):
    """Protocol for resource compressors."""

    suffix: str

    async def compress(self, src: str, dst: str):
        """Write a compressed copy of src at dst."""
        ...

    async def remove(self, path: str):
        """Delete a resource."""
        ...
