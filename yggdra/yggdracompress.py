# yggdracompress.py - deflate 스트림 앞에 u32 원본 길이를 붙이는 압축 프레임
#
# [u32 LE 원본 길이][zlib 스트림 (level 9)]
#
# Licensed under the MIT License.

import zlib
import logging

from gameres.gameres import MalformedInputException, UnsupportedSizeException
from gameres.utility import LittleEndian
from yggdra.yggdraconst import UINT32_MAX


def compress(data) -> bytes:
    if len(data) > UINT32_MAX:
        raise UnsupportedSizeException("data too long to compress")

    stream = zlib.compress(bytes(data), 9)
    return LittleEndian.GetBytes32(len(data)) + stream


# 앞 4바이트의 길이를 그대로 믿고 그 크기만큼 inflate.
# 정렬 패딩 등 스트림 뒤쪽 잉여 바이트는 무시됨.
def decompress(framed) -> bytes:
    if len(framed) < 4:
        raise MalformedInputException(f"compressed frame too short ({len(framed)} bytes)")

    expected = LittleEndian.ToUInt32(framed, 0)
    if expected == 0:
        return b""

    inflater = zlib.decompressobj()
    try:
        data = inflater.decompress(bytes(framed[4:]), expected)
    except zlib.error as exc:
        raise MalformedInputException(f"corrupt deflate stream: {exc}") from exc

    if len(data) < expected:
        # 원본과 동일하게 나머지는 0으로 채운 버퍼를 돌려줌
        logging.warning(f"[yggdracompress] inflate 결과 부족: {len(data)} / {expected} bytes")
        data += b"\x00" * (expected - len(data))
    return data
