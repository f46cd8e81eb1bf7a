"""Gzip compressor running file I/O off the event loop."""

import asyncio
import gzip
import os
import shutil

GZIP_SUFFIX = ".gz"


class GzipCompressor:
    """Compresses a finished resource into a sibling .gz file."""

    suffix = GZIP_SUFFIX

    def __init__(self, level: int = 9):
        if not 1 <= level <= 9:
            raise ValueError(f"Unsupported gzip level: {level}")
        self.level = level

    async def compress(self, src: str, dst: str):
        """Write a gzip copy of src at dst."""
        await asyncio.to_thread(self._compress_file, src, dst)

    def _compress_file(self, src: str, dst: str):
        with open(src, "rb") as f_in, gzip.open(dst, "wb", compresslevel=self.level) as f_out:
            shutil.copyfileobj(f_in, f_out)

    async def remove(self, path: str):
        """Delete the raw resource."""
        await asyncio.to_thread(os.remove, path)
