"""Tests for the file sink and gzip compressor."""

import asyncio
import gzip

import pytest

from sitemap_stream.core import FileSink, GzipCompressor


class TestFileSink:
    async def test_writes_file_and_directory(self, tmp_path):
        """Should create parent directories and write every chunk."""
        path = tmp_path / "subdir" / "out.xml"
        sink = FileSink(path)
        sink.write("<a>")
        sink.write("</a>")
        await sink.close()

        assert path.read_text(encoding="utf-8") == "<a></a>"

    async def test_write_below_high_water_mark_returns_true(self, tmp_path):
        """Writes under the high-water mark should not ask for a pause."""
        sink = FileSink(tmp_path / "out.xml", high_water_mark=1024)
        assert sink.write("small") is True
        await sink.close()

    async def test_write_at_high_water_mark_returns_false(self, tmp_path):
        """Writes reaching the high-water mark should report backpressure."""
        sink = FileSink(tmp_path / "out.xml", high_water_mark=4)
        assert sink.write("ab") is True
        assert sink.write("cd") is False
        await sink.close()

    async def test_drain_after_backpressure(self, tmp_path):
        """on_drain should fire once the buffer is flushed."""
        drained = asyncio.Event()
        sink = FileSink(tmp_path / "out.xml", high_water_mark=1, on_drain=drained.set)
        assert sink.write("data") is False

        await asyncio.wait_for(drained.wait(), timeout=5)
        assert sink.buffered == 0
        await sink.close()

    async def test_no_drain_without_backpressure(self, tmp_path):
        """on_drain should not fire if no write returned False."""
        calls = []
        sink = FileSink(tmp_path / "out.xml", on_drain=lambda: calls.append(1))
        sink.write("data")
        await sink.close()

        assert calls == []

    async def test_ignoring_backpressure_loses_no_data(self, tmp_path):
        """Data written past the high-water mark should still be written."""
        path = tmp_path / "out.xml"
        sink = FileSink(path, high_water_mark=1)
        for i in range(100):
            sink.write(f"{i},")
        await sink.close()

        assert path.read_text() == "".join(f"{i}," for i in range(100))

    async def test_write_after_close_raises(self, tmp_path):
        """Writing to a closed sink should raise RuntimeError."""
        sink = FileSink(tmp_path / "out.xml")
        await sink.close()
        with pytest.raises(RuntimeError):
            sink.write("late")

    async def test_close_twice_raises(self, tmp_path):
        """Closing twice should raise RuntimeError."""
        sink = FileSink(tmp_path / "out.xml")
        await sink.close()
        with pytest.raises(RuntimeError):
            await sink.close()

    async def test_close_without_writes_creates_empty_file(self, tmp_path):
        """Closing an unused sink should leave an empty file."""
        path = tmp_path / "out.xml"
        await FileSink(path).close()
        assert path.read_bytes() == b""

    async def test_write_failure_raises_on_close(self, tmp_path):
        """A failed write should surface when the sink is closed."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        sink = FileSink(blocker / "out.xml")
        sink.write("data")

        with pytest.raises(OSError):
            await sink.close()

    async def test_write_failure_calls_on_error(self, tmp_path):
        """A failed flush should report through on_error before close."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        failed = asyncio.Event()
        errors = []

        def on_error(error):
            errors.append(error)
            failed.set()

        drains = []
        sink = FileSink(blocker / "out.xml", high_water_mark=1, on_drain=lambda: drains.append(1), on_error=on_error)
        assert sink.write("data") is False

        await asyncio.wait_for(failed.wait(), timeout=5)
        assert len(errors) == 1
        assert isinstance(errors[0], OSError)
        assert drains == []

        with pytest.raises(OSError) as exc_info:
            await sink.close()
        assert exc_info.value is errors[0]


class TestGzipCompressor:
    async def test_compress_roundtrip(self, tmp_path):
        """Decompressing the output should give the original bytes."""
        src = tmp_path / "sitemap-1.xml"
        dst = tmp_path / "sitemap-1.xml.gz"
        src.write_text("<urlset></urlset>")

        await GzipCompressor().compress(str(src), str(dst))

        assert gzip.decompress(dst.read_bytes()) == src.read_bytes()

    async def test_remove(self, tmp_path):
        """remove should delete the file."""
        path = tmp_path / "sitemap-1.xml"
        path.write_text("x")

        await GzipCompressor().remove(str(path))

        assert not path.exists()

    async def test_compress_missing_source_raises(self, tmp_path):
        """Compressing a missing file should raise."""
        with pytest.raises(OSError):
            await GzipCompressor().compress(str(tmp_path / "missing.xml"), str(tmp_path / "missing.xml.gz"))

    def test_invalid_level_raises(self):
        """Levels outside 1..9 should be rejected."""
        with pytest.raises(ValueError):
            GzipCompressor(level=0)

    def test_suffix(self):
        """Compressed resources should use the .gz suffix."""
        assert GzipCompressor.suffix == ".gz"
