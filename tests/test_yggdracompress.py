import os
import struct
import sys
import unittest
import zlib
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from gameres.gameres import MalformedInputException, UnsupportedSizeException
from yggdra.yggdracompress import compress, decompress


class _HugeBuffer:
    def __len__(self):
        return 0x1_0000_0000


class CompressionFrameTests(unittest.TestCase):
    def test_round_trip(self):
        samples = [b"", b"a", b"hello", os.urandom(1000), b"A" * 100_000, bytes(range(256)) * 7]
        for data in samples:
            with self.subTest(length=len(data)):
                framed = compress(data)
                self.assertGreaterEqual(len(framed), 4)
                self.assertEqual(decompress(framed), data)

    def test_prefix_is_original_length(self):
        framed = compress(b"x" * 300)
        self.assertEqual(struct.unpack("<I", framed[:4])[0], 300)
        self.assertEqual(zlib.decompress(framed[4:]), b"x" * 300)

    def test_output_is_level_nine_zlib(self):
        data = b"abcabcabc" * 50
        self.assertEqual(compress(data)[4:], zlib.compress(data, 9))

    def test_trailing_alignment_padding_is_ignored(self):
        data = b"some text that compresses " * 10
        framed = compress(data) + b"\x00\x00\x00"
        self.assertEqual(decompress(framed), data)

    def test_embedded_length_is_authoritative(self):
        stream = zlib.compress(b"0123456789", 9)
        self.assertEqual(decompress(struct.pack("<I", 4) + stream), b"0123")
        self.assertEqual(decompress(struct.pack("<I", 12) + stream), b"0123456789\x00\x00")

    def test_short_frame_is_malformed(self):
        with self.assertRaises(MalformedInputException):
            decompress(b"\x01\x00")

    def test_corrupt_stream_is_malformed(self):
        with self.assertRaises(MalformedInputException):
            decompress(struct.pack("<I", 10) + b"not a zlib stream")

    def test_input_beyond_32_bits_is_rejected(self):
        with self.assertRaises(UnsupportedSizeException) as ctx:
            compress(_HugeBuffer())
        self.assertIn("data too long to compress", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
