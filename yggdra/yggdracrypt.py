# yggdracrypt.py - 엔트리 이름 기반 128비트 XOR 키스트림 암호
#
# 키 = MD5(rot13(이름)) 을 리틀엔디안 u32 4개로 해석한 값.
# 4바이트 단위 워드 i 에 key[i % 4] 를 XOR 하므로 암호화 = 복호화.
#
# Licensed under the MIT License.

import hashlib
import struct
import logging
from functools import lru_cache

import numpy as np

from gameres.gameres import MalformedInputException
from gameres.utility import pad4

_UPPER = b"ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = b"abcdefghijklmnopqrstuvwxyz"
ROT13_TABLE = bytes.maketrans(
    _UPPER + _LOWER,
    _UPPER[13:] + _UPPER[:13] + _LOWER[13:] + _LOWER[:13],
)


def _as_bytes(name) -> bytes:
    if isinstance(name, str):
        return name.encode("utf-8", "surrogateescape")
    return bytes(name)


# ASCII 영문자만 13칸 회전, 나머지 바이트는 그대로
def rot13(name) -> bytes:
    return _as_bytes(name).translate(ROT13_TABLE)


@lru_cache(maxsize=4096)
def _derive_key_cached(name: bytes):
    digest = hashlib.md5(rot13(name)).digest()
    return struct.unpack("<4I", digest)


def derive_key(name) -> tuple:
    return _derive_key_cached(_as_bytes(name))


# 4바이트 정렬된 데이터에 키스트림 적용 (대칭)
def crypt(data, key) -> bytes:
    if len(data) % 4 != 0:
        raise MalformedInputException(f"length must be divisible by 4 (got {len(data)})")
    if not data:
        return b""

    words = np.frombuffer(data, dtype="<u4")
    keystream = np.resize(np.asarray(key, dtype="<u4"), words.size)
    return np.bitwise_xor(words, keystream).astype("<u4").tobytes()


# 이름으로 키를 만들어 바로 적용
def crypt_named(data, name) -> bytes:
    return crypt(data, derive_key(name))


# 0으로 4바이트 정렬 후 암호화
def encrypt(data, name) -> bytes:
    padded = pad4(data)
    logging.debug(f"[yggdracrypt] encrypt {_as_bytes(name)!r}: {len(data)} → {len(padded)} bytes")
    return crypt_named(padded, name)
