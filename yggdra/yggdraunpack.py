# yggdraunpack.py - Yggdra .bin 아카이브 언팩
#
# 컨테이너: [u32 InfoData 압축 크기][u32 컨텐츠 전체 크기][암호화된 InfoData][파일 데이터...]
# InfoData 는 "InfoData" 키로 복호화 → 압축 해제 → 엔트리 테이블.
# 엔트리 트리는 평탄화된 레코드 배열 위의 (자식 시작 인덱스, 개수) 로만 연결됨.
#
# Licensed under the MIT License.

import os
import logging
from typing import Callable, List, Optional

from formats.arcfile import ArcFile, Entry
from formats.fileview import FileView
from gameres.gameres import ArchiveException, ArchiveFormat, MalformedInputException
from gameres.utility import BinarySaver, LittleEndian, align4, safe_component
from yggdra.infotable import InfoTable
from yggdra.yggdracompress import decompress
from yggdra.yggdraconst import CONTAINER_HEADER_SIZE, ENTRY_RECORD_SIZE, INFO_DATA_NAME
from yggdra.yggdracrypt import crypt_named


class YggdraArchive(ArcFile):
    def __init__(self, view, format, entries, info_table: InfoTable, info_data: bytes,
                 content_base: int, content_size: int):
        super().__init__(view, format, entries)
        self.info_table = info_table    # [역할] 디코딩된 레코드 + 스트링 테이블
        self.info_data = info_data      # [역할] 복호화/압축 해제된 InfoData 원본 (디버그 덤프용)
        self.content_base = content_base  # [역할] 파일 데이터 영역 시작 (InfoData 바로 뒤)
        self.content_size = content_size

    # 레코드 배열을 폴더 트리로 해석하며 엔트리를 방문 순서대로 내보냄.
    # 인덱스별 첫 방문만 유효 (잘못된 / 순환 오프셋 방어).
    # 재귀 대신 명시적 스택을 쓰지만 방문 순서는 깊이 우선 전위 순회와 동일.
    def walk(self):
        count = len(self.entries)
        visited = bytearray(count)

        for root_index in range(count):
            stack = [(root_index, None)]
            while stack:
                index, parent = stack.pop()
                if index >= count or visited[index]:
                    continue
                visited[index] = 1

                entry = self.entries[index]
                entry.parent = parent
                entry.parts = (parent.parts if parent else ()) + (entry.name,)
                entry.path = "/".join(entry.parts)
                yield entry

                if entry.is_dir:
                    end = min(entry.child_start + entry.size, count)
                    for child in range(end - 1, entry.child_start - 1, -1):
                        stack.append((child, entry))

    # 파일 엔트리 → 복호화 (+ 압축 해제) 된 원본 바이트
    def read_entry(self, entry: Entry) -> bytes:
        aligned_size = align4(entry.size)
        raw = self.view.read_exact(self.content_base + entry.offset, aligned_size, name=entry.name)
        data = crypt_named(raw, entry.raw_name)

        if entry.is_compressed:
            try:
                return decompress(data)
            except MalformedInputException as exc:
                raise MalformedInputException(exc.message, name=entry.name, offset=entry.offset) from exc

        # 정렬 패딩 제거
        return data[:entry.size]

    def extract_entry(self, entry: Entry, out_dir: str):
        for part in entry.parts:
            safe_component(part, entry.offset)
        target = os.path.join(out_dir, *entry.parts)

        if entry.is_dir:
            BinarySaver.make_dir(entry.name, target)
            logging.debug(f"[yggdraunpack] 폴더 생성: {entry.path} (자식 {entry.size}개)")
        else:
            BinarySaver.save(entry.name, self.read_entry(entry), target)
            logging.debug(
                f"[yggdraunpack] 파일 추출: {entry.path} (size={entry.size}, compressed={entry.is_compressed})"
            )

    # 전체 추출. keep_going=False 면 첫 실패에서 중단 (원본 동작),
    # True 면 실패한 엔트리 (폴더면 그 하위 전체) 만 건너뛰고 예외 목록을 반환.
    def extract_all(self, out_dir: str, keep_going: bool = False,
                    callback: Optional[Callable[[Entry], None]] = None) -> List[ArchiveException]:
        BinarySaver.make_dir(self.name, out_dir)
        errors = []
        failed = set()  # 실패했거나 건너뛴 엔트리 인덱스

        for entry in self.walk():
            if entry.parent is not None and entry.parent.index in failed:
                failed.add(entry.index)
                logging.debug(f"[yggdraunpack] 상위 폴더 실패로 건너뜀: {entry.path}")
            else:
                try:
                    self.extract_entry(entry, out_dir)
                except ArchiveException as exc:
                    if not keep_going:
                        raise
                    logging.error(f"[yggdraunpack] 추출 실패, 건너뜀: {exc}")
                    errors.append(exc)
                    failed.add(entry.index)
            if callback:
                callback(entry)

        logging.info(f"[yggdraunpack] 추출 완료: {len(self.entries)}개 엔트리, 실패 {len(errors)}개 → {out_dir}")
        return errors

    def dump_info_data(self, output_path: str):
        BinarySaver.save(INFO_DATA_NAME.decode("ascii"), self.info_data, output_path)


class YggdraOpener(ArchiveFormat):
    def __init__(self):
        super().__init__()
        self.name = "Yggdra BIN archive"  # [설명용 텍스트]

    def open_archive(self, view: FileView) -> YggdraArchive:
        header = view.read_exact(0, CONTAINER_HEADER_SIZE, name="header")
        info_size = LittleEndian.ToUInt32(header, 0)
        content_size = LittleEndian.ToUInt32(header, 4)

        # 헤더의 크기는 패딩 전 값, 실제로는 4바이트 정렬되어 기록됨
        aligned_info_size = align4(info_size)
        raw = view.read_exact(CONTAINER_HEADER_SIZE, aligned_info_size, name=INFO_DATA_NAME.decode("ascii"))
        info_data = decompress(crypt_named(raw, INFO_DATA_NAME))
        table = InfoTable.decode(info_data)

        content_base = CONTAINER_HEADER_SIZE + aligned_info_size
        if content_base + content_size != view.get_max_offset():
            logging.warning(
                f"[yggdraunpack] 컨텐츠 크기 불일치: header={content_size}, "
                f"file={view.get_max_offset() - content_base}"
            )

        entries = []
        for index, record in enumerate(table.records):
            raw_name = table.name_at(record.name_offset)
            entry = Entry(
                os.fsdecode(raw_name),
                record.data_offset,
                record.size,
                index=index,
                is_dir=record.is_dir,
                is_compressed=record.is_compressed,
                raw_name=raw_name,
            )
            if entry.is_dir:
                entry.child_start = record.data_offset // ENTRY_RECORD_SIZE
            entries.append(entry)

        logging.debug(f"[yggdraunpack] ✅ 열기 성공 (entries={len(entries)}, content_base=0x{content_base:X})")
        return YggdraArchive(view, self, entries, table, info_data, content_base, content_size)
