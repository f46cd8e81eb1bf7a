"""Core output primitives."""

from .compressor import GZIP_SUFFIX, GzipCompressor
from .protocols import Compressor, Sink
from .sink import DEFAULT_HIGH_WATER_MARK, FileSink

__all__ = [
    "Compressor",
    "DEFAULT_HIGH_WATER_MARK",
    "FileSink",
    "GZIP_SUFFIX",
    "GzipCompressor",
    "Sink",
]
