# infotable.py - InfoData 메타데이터 블롭 (엔트리 레코드 배열 + 스트링 테이블)
#
# 블롭:   [u32 레코드 영역 길이][u32 스트링 테이블 길이][레코드 * N][스트링 테이블]
# 레코드: [u32 name_offset][u32 packed_length][u32 data_offset]  (12 bytes)
#   packed_length bit31 = 폴더, bit30 = 압축 (폴더에서는 무의미), bit0-29 = 크기
#   폴더의 data_offset = 첫 자식 레코드의 바이트 오프셋 (자식 인덱스 * 12)
#   파일의 data_offset = 컨텐츠 영역 기준 바이트 오프셋
#
# Licensed under the MIT License.

import struct
import logging
from dataclasses import dataclass
from typing import List

from gameres.gameres import CapacityExceededException, MalformedInputException
from gameres.utility import LittleEndian, get_cstring
from yggdra.yggdraconst import (
    COMPRESSED_FLAG,
    ENTRY_RECORD_SIZE,
    FOLDER_FLAG,
    INFO_TABLE_HEADER_SIZE,
    SIZE_MASK,
    UINT32_MAX,
)

_RECORD = struct.Struct("<3I")


@dataclass
class EntryRecord:
    name_offset: int
    packed_length: int
    data_offset: int

    @property
    def is_dir(self) -> bool:
        return bool(self.packed_length & FOLDER_FLAG)

    # 폴더일 때는 읽지 않음
    @property
    def is_compressed(self) -> bool:
        return not self.is_dir and bool(self.packed_length & COMPRESSED_FLAG)

    @property
    def size(self) -> int:
        return self.packed_length & SIZE_MASK

    def to_bytes(self) -> bytes:
        return _RECORD.pack(self.name_offset, self.packed_length, self.data_offset)


# 인코딩 입력. 폴더의 offset 은 "자식 시작 인덱스", 파일의 offset 은 컨텐츠 오프셋.
@dataclass
class TableEntry:
    name: bytes
    is_dir: bool = False
    length: int = 0
    offset: int = 0
    is_compressed: bool = False


def pack_length(size: int, is_dir: bool, is_compressed: bool = False) -> int:
    if is_dir:
        if size < 0 or size > SIZE_MASK:
            raise CapacityExceededException("too many files in folder")
        return size | FOLDER_FLAG

    if size < 0 or size > SIZE_MASK:
        raise CapacityExceededException("single file too big")
    if is_compressed:
        return size | COMPRESSED_FLAG
    return size


def _make_record(entry: TableEntry, name_offset: int) -> EntryRecord:
    name = entry.name.decode("utf-8", "replace")
    try:
        packed = pack_length(entry.length, entry.is_dir, entry.is_compressed)
    except CapacityExceededException as exc:
        raise CapacityExceededException(exc.message, name=name) from None

    if entry.is_dir:
        data_offset = entry.offset * ENTRY_RECORD_SIZE
        if data_offset > UINT32_MAX:
            raise CapacityExceededException("file table too big", name=name)
    else:
        data_offset = entry.offset
        if data_offset > UINT32_MAX:
            raise CapacityExceededException("combined files too big", name=name, offset=data_offset)

    return EntryRecord(name_offset, packed, data_offset)


# 엔트리마다 이름을 스트링 테이블 끝에 이어 붙이고 (중복 제거 없음) 레코드 생성
def encode_info_table(entries: List[TableEntry]) -> bytes:
    records = bytearray()
    strings = bytearray()

    for entry in entries:
        name_offset = len(strings)
        if name_offset > UINT32_MAX:
            raise CapacityExceededException("string table too big", name=entry.name.decode("utf-8", "replace"))
        strings += entry.name
        strings += b"\x00"
        records += _make_record(entry, name_offset).to_bytes()

    if len(records) > UINT32_MAX:
        raise CapacityExceededException("file table too big")
    if len(strings) > UINT32_MAX:
        raise CapacityExceededException("string table too big")

    logging.debug(f"[infotable] 인코딩 완료: 레코드 {len(entries)}개, 스트링 {len(strings)} bytes")
    return (
        LittleEndian.GetBytes32(len(records))
        + LittleEndian.GetBytes32(len(strings))
        + bytes(records)
        + bytes(strings)
    )


class InfoTable:
    def __init__(self, records: List[EntryRecord], strings: bytes):
        self.records = records
        self.strings = strings

    def __len__(self):
        return len(self.records)

    # 오프셋부터 널 문자까지
    def name_at(self, offset: int) -> bytes:
        if offset >= len(self.strings):
            raise MalformedInputException("name offset outside string table", offset=offset)
        return get_cstring(self.strings, offset)

    def name_of(self, index: int) -> bytes:
        return self.name_at(self.records[index].name_offset)

    # 인코딩 입력 형태로 되돌림 (폴더 offset 은 자식 인덱스)
    def to_entries(self) -> List[TableEntry]:
        result = []
        for record in self.records:
            if record.is_dir:
                offset = record.data_offset // ENTRY_RECORD_SIZE
            else:
                offset = record.data_offset
            result.append(TableEntry(
                name=self.name_at(record.name_offset),
                is_dir=record.is_dir,
                length=record.size,
                offset=offset,
                is_compressed=record.is_compressed,
            ))
        return result

    @classmethod
    def decode(cls, blob) -> "InfoTable":
        if len(blob) < INFO_TABLE_HEADER_SIZE:
            raise MalformedInputException(f"metadata blob truncated ({len(blob)} bytes)")

        length_data = LittleEndian.ToUInt32(blob, 0)
        length_strings = LittleEndian.ToUInt32(blob, 4)

        if length_data % ENTRY_RECORD_SIZE != 0:
            raise MalformedInputException(f"record region length {length_data} is not a multiple of {ENTRY_RECORD_SIZE}")

        offset_strings = INFO_TABLE_HEADER_SIZE + length_data
        end = offset_strings + length_strings
        if end > len(blob):
            raise MalformedInputException(
                f"metadata blob truncated: need {end} bytes, have {len(blob)}"
            )

        records = [
            EntryRecord(*fields)
            for fields in _RECORD.iter_unpack(bytes(blob[INFO_TABLE_HEADER_SIZE:offset_strings]))
        ]
        strings = bytes(blob[offset_strings:end])

        logging.debug(f"[infotable] 디코딩 완료: 레코드 {len(records)}개, 스트링 {len(strings)} bytes")
        return cls(records, strings)
