from __future__ import annotations

import hashlib
import io
import logging
import os
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from s3etag.config import ETagConfig
from s3etag.driver import format_line, hash_file, process_files, select_hasher
from s3etag.hashing.etag import ETag, MultipartETagHasher, SingleETagHasher
from tests.helpers import make_file, reference_etag, serve_fifo


class SelectHasherTests(unittest.TestCase):
    def test_threshold_boundary(self) -> None:
        config = ETagConfig(chunksize=1024, threshold=4096)

        self.assertIsInstance(select_hasher(4095, config), SingleETagHasher)
        self.assertIsInstance(select_hasher(4096, config), MultipartETagHasher)
        self.assertEqual(select_hasher(10_000, config).part_size, 1024)

    def test_paths_agree_when_threshold_equals_chunksize(self) -> None:
        config = ETagConfig(chunksize=64, threshold=64)
        for size in (0, 63, 64):
            data = b"q" * size
            single = SingleETagHasher()
            single.update(data)
            multi = MultipartETagHasher(64)
            multi.update(data)
            with self.subTest(size=size):
                self.assertEqual(single.finalize(), multi.finalize())
                self.assertIsInstance(select_hasher(size, config), SingleETagHasher if size < 64 else MultipartETagHasher)


class HashFileTests(unittest.TestCase):
    def test_multipart_file(self) -> None:
        with TemporaryDirectory() as tmpdir:
            data = bytes(range(256)) * 40
            path = make_file(Path(tmpdir) / "big.bin", data)
            for engine in ("hashlib", "pure"):
                for use_mmap in (True, False):
                    config = ETagConfig(chunksize=4096, threshold=4096, engine=engine, use_mmap=use_mmap)
                    with self.subTest(engine=engine, use_mmap=use_mmap):
                        self.assertEqual(str(hash_file(path, config)), reference_etag(data, 4096))

    def test_below_threshold_is_plain_md5_even_across_parts(self) -> None:
        with TemporaryDirectory() as tmpdir:
            data = b"k" * 5000
            path = make_file(Path(tmpdir) / "mid.bin", data)
            config = ETagConfig(chunksize=1024, threshold=8192)

            etag = hash_file(path, config)

        self.assertEqual(etag, ETag(hashlib.md5(data).digest()))

    def test_default_config(self) -> None:
        with TemporaryDirectory() as tmpdir:
            path = make_file(Path(tmpdir) / "small.txt", b"hello")
            self.assertEqual(str(hash_file(path)), hashlib.md5(b"hello").hexdigest())


class FormatLineTests(unittest.TestCase):
    def test_simple_form_is_padded(self) -> None:
        etag = ETag(hashlib.md5(b"").digest())
        line = format_line(etag, "empty.txt")

        self.assertEqual(line, b"d41d8cd98f00b204e9800998ecf8427e" + b" " * 8 + b"empty.txt\n")

    def test_multipart_form_shares_column(self) -> None:
        etag = ETag(b"\x01" * 16, 3)
        line = format_line(etag, Path("dir/big.iso"))

        self.assertEqual(line, b"01" * 16 + b"-3" + b" " * 6 + b"dir/big.iso\n")

    def test_long_values_are_not_cut(self) -> None:
        etag = ETag(b"\x01" * 16, 12345678)

        self.assertEqual(format_line(etag, "f", width=39), b"01" * 16 + b"-12345678 f\n")


class ProcessFilesTests(unittest.TestCase):
    def test_continues_after_failure_and_reports_it(self) -> None:
        with TemporaryDirectory() as tmpdir:
            good = make_file(Path(tmpdir) / "good.bin", b"good")
            missing = Path(tmpdir) / "missing.bin"
            other = make_file(Path(tmpdir) / "other.bin", b"other")
            out = io.BytesIO()

            with self.assertLogs("s3etag.driver", level=logging.ERROR) as logs:
                ok = process_files([good, missing, other], ETagConfig(), out)

        self.assertFalse(ok)
        lines = out.getvalue().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith(hashlib.md5(b"good").hexdigest().encode()))
        self.assertTrue(lines[0].endswith(str(good).encode()))
        self.assertTrue(lines[1].endswith(str(other).encode()))
        self.assertEqual(len(logs.records), 1)
        self.assertIn("missing.bin", logs.output[0])

    def test_all_success(self) -> None:
        with TemporaryDirectory() as tmpdir:
            paths = [make_file(Path(tmpdir) / f"{i}.bin", bytes([i]) * 100) for i in range(3)]
            out = io.BytesIO()
            ok = process_files(paths, ETagConfig(chunksize=32, threshold=32), out)

        self.assertTrue(ok)
        lines = out.getvalue().splitlines()
        self.assertEqual(
            [line.split()[0].decode() for line in lines],
            [reference_etag(bytes([i]) * 100, 32) for i in range(3)],
        )

    def test_directory_is_reported_not_fatal(self) -> None:
        with TemporaryDirectory() as tmpdir:
            out = io.BytesIO()
            with self.assertLogs("s3etag.driver", level=logging.ERROR):
                ok = process_files([Path(tmpdir)], ETagConfig(), out)

        self.assertFalse(ok)
        self.assertEqual(out.getvalue(), b"")


@unittest.skipUnless(hasattr(os, "mkfifo"), "named pipes not supported")
class NamedPipeTests(unittest.TestCase):
    """Pipes report a stat size of zero, so the form is chosen after reading."""

    def _hash_through_fifo(self, data: bytes, config: ETagConfig) -> bytes:
        with TemporaryDirectory() as tmpdir:
            fifo = Path(tmpdir) / "stream"
            os.mkfifo(fifo)
            writer = serve_fifo(fifo, data)
            out = io.BytesIO()
            ok = process_files([fifo], config, out)
            writer.join(timeout=10)

        self.assertTrue(ok)
        self.assertFalse(writer.is_alive())
        return out.getvalue()

    def test_large_stream_gets_multipart_form(self) -> None:
        data = bytes(range(256)) * (20 * 4096)
        line = self._hash_through_fifo(data, ETagConfig())

        self.assertEqual(line.split()[0].decode(), reference_etag(data, 8 << 20))
        self.assertTrue(line.split()[0].endswith(b"-3"))

    def test_stream_below_threshold_is_plain_md5(self) -> None:
        data = b"z" * 3000
        line = self._hash_through_fifo(data, ETagConfig(chunksize=1024, threshold=4096))

        self.assertEqual(line.split()[0].decode(), hashlib.md5(data).hexdigest())

    def test_stream_at_threshold_uses_parts(self) -> None:
        data = b"z" * 4096
        line = self._hash_through_fifo(data, ETagConfig(chunksize=1024, threshold=4096))

        self.assertEqual(line.split()[0].decode(), reference_etag(data, 1024))

    def test_empty_stream(self) -> None:
        line = self._hash_through_fifo(b"", ETagConfig())

        self.assertEqual(line.split()[0].decode(), hashlib.md5(b"").hexdigest())


if __name__ == "__main__":
    unittest.main()
