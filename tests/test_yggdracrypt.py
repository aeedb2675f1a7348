import hashlib
import os
import random
import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from gameres.gameres import MalformedInputException
from yggdra.yggdracrypt import crypt, crypt_named, derive_key, encrypt, rot13


class Rot13Tests(unittest.TestCase):
    def test_letters_rotate_within_case(self):
        self.assertEqual(rot13(b"InfoData"), b"VasbQngn")
        self.assertEqual(rot13(b"NOPnop"), b"ABCabc")

    def test_other_bytes_pass_through(self):
        self.assertEqual(rot13(b"a.b_1-Z\xe3\x81\x82"), b"n.o_1-M\xe3\x81\x82")

    def test_str_and_bytes_agree(self):
        self.assertEqual(rot13("sub/a.txt"), rot13(b"sub/a.txt"))


class DeriveKeyTests(unittest.TestCase):
    def test_key_is_md5_of_rot13_as_le_words(self):
        digest = hashlib.md5(b"VasbQngn").digest()
        expected = tuple(int.from_bytes(digest[i:i + 4], "little") for i in range(0, 16, 4))
        self.assertEqual(derive_key(b"InfoData"), expected)
        self.assertEqual(derive_key("InfoData"), expected)

    def test_keystream_over_zero_bytes_repeats_digest(self):
        digest = hashlib.md5(rot13(b"a.txt")).digest()
        self.assertEqual(crypt_named(bytes(16), b"a.txt"), digest)
        self.assertEqual(crypt_named(bytes(40), b"a.txt"), (digest * 3)[:40])


class CryptTests(unittest.TestCase):
    def test_involution(self):
        rng = random.Random(1234)
        for name in (b"InfoData", b"a.txt", b"\xe3\x81\x82.png", b""):
            key = derive_key(name)
            for length in (0, 4, 8, 12, 16, 20, 1024, 4100):
                data = bytes(rng.getrandbits(8) for _ in range(length))
                with self.subTest(name=name, length=length):
                    self.assertEqual(crypt(crypt(data, key), key), data)

    def test_accepts_bytearray_and_memoryview(self):
        key = derive_key(b"x")
        data = os.urandom(32)
        self.assertEqual(crypt(bytearray(data), key), crypt(data, key))
        self.assertEqual(crypt(memoryview(data), key), crypt(data, key))

    def test_length_guard(self):
        key = derive_key(b"x")
        for length in (1, 2, 3, 5, 6, 7, 4097):
            with self.subTest(length=length):
                with self.assertRaises(MalformedInputException) as ctx:
                    crypt(bytes(length), key)
                self.assertIn("length must be divisible by 4", str(ctx.exception))

    def test_encrypt_pads_with_zeros_before_xor(self):
        out = encrypt(b"abcde", b"f.bin")
        self.assertEqual(len(out), 8)
        self.assertEqual(crypt_named(out, b"f.bin"), b"abcde\x00\x00\x00")

    def test_encrypt_aligned_input_is_not_padded(self):
        self.assertEqual(len(encrypt(b"abcd", b"f.bin")), 4)
        self.assertEqual(encrypt(b"", b"f.bin"), b"")


if __name__ == "__main__":
    unittest.main()
