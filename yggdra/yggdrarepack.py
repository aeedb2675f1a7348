# yggdrarepack.py - 폴더 트리 → Yggdra .bin 아카이브 리팩
#
# 1. add_auto: 폴더를 재귀 탐색해 노드 트리 구성 (하위 폴더의 자식은 이름 내림차순)
# 2. finalize_folders: 레벨 단위 평탄화. 한 레벨의 노드를 먼저 연속으로 배치한 뒤
#    각 폴더의 자식을 재귀적으로 뒤에 붙임. 폴더 offset = 첫 자식 인덱스.
# 3. write.encode_files: 파일별 압축 여부 결정 → 4바이트 패딩 → 암호화 → 오프셋 부여
# 4. write.build_info_data: 엔트리 테이블 → 압축 → "InfoData" 키로 암호화
# 5. save: [헤더 8바이트][InfoData][파일 데이터...]
#
# Licensed under the MIT License.

import os
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from gameres.gameres import ArchiveIOException, CapacityExceededException
from gameres.utility import LittleEndian
from yggdra.infotable import TableEntry, encode_info_table, pack_length
from yggdra.yggdracompress import compress
from yggdra.yggdraconst import INFO_DATA_NAME, NO_COMPRESS_EXTENSIONS, UINT32_MAX
from yggdra.yggdracrypt import encrypt


# 탐색 단계의 트리 노드
@dataclass
class PackNode:
    path: str
    name: bytes
    is_dir: bool = False
    children: List["PackNode"] = field(default_factory=list)


# 평탄화된 엔트리. 인코딩 후 data 에는 패딩 + 암호화된 페이로드가 들어감.
@dataclass
class PackEntry(TableEntry):
    path: str = ""
    data: bytes = b""


def _scan_dir(path: str):
    try:
        with os.scandir(path) as it:
            return sorted(it, key=lambda d: os.fsencode(d.name))
    except OSError as exc:
        raise ArchiveIOException(f"cannot list directory {path}: {exc.strerror}") from exc


def collect_pack_entries(path: str) -> List[PackNode]:
    nodes = []
    for item in _scan_dir(path):
        name = os.fsencode(item.name)
        if item.is_file():
            nodes.append(PackNode(item.path, name, False))
        elif item.is_dir():
            node = PackNode(item.path, name, True)
            node.children = collect_pack_entries(item.path)
            # 안정 정렬, 이름 내림차순 (바이트 비교)
            node.children.sort(key=lambda n: n.name, reverse=True)
            nodes.append(node)
        else:
            logging.warning(f"[yggdrarepack] 일반 파일/폴더 아님, 건너뜀: {item.path}")
    return nodes


def flatten_pack_entries(nodes: List[PackNode]) -> List[PackEntry]:
    flat = []

    def _flatten(level: List[PackNode]):
        start = len(flat)
        for node in level:
            flat.append(PackEntry(name=node.name, is_dir=node.is_dir, path=node.path))
        for i, node in enumerate(level):
            if node.is_dir:
                entry = flat[start + i]
                entry.length = len(node.children)
                entry.offset = len(flat)
                _flatten(node.children)

    _flatten(nodes)
    return flat


# 이름이 확장자보다 짧으면 일치로 취급함 (원본 포맷 도구와 동일한 판정)
def ends_with_case_insensitive(name: bytes, ending: bytes) -> bool:
    if len(name) < len(ending):
        return True
    return name[len(name) - len(ending):].lower() == ending.lower()


def should_compress(name: bytes) -> bool:
    return not any(ends_with_case_insensitive(name, ext) for ext in NO_COMPRESS_EXTENSIONS)


def _read_source(entry: PackEntry) -> bytes:
    try:
        with open(entry.path, "rb") as f:
            return f.read()
    except OSError as exc:
        raise ArchiveIOException(
            f"cannot read {entry.path}: {exc.strerror}", name=os.fsdecode(entry.name)
        ) from exc


# 평문 리팩과 달리 파일 전부를 암호화 + (필요 시) 압축해서 기록함.
class DatWriter:
    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        self.nodes = []
        self.entries = []
        self.total_length = 0
        self.info_size = 0
        self.info_data = b""
        self.write = self.Writer(self)
        self.save = self.Save(self)

    @property
    def file_entries(self) -> List[PackEntry]:
        return [e for e in self.entries if not e.is_dir]

    def add_auto(self):
        self.nodes = collect_pack_entries(self.base_dir)
        logging.debug(f"[add_auto] 최상위 항목 {len(self.nodes)}개: {self.base_dir}")

    def finalize_folders(self):
        self.entries = flatten_pack_entries(self.nodes)
        logging.debug(f"[finalize_folders] 평탄화 완료 (엔트리 수: {len(self.entries)})")

    class Writer:
        def __init__(self, outer):
            self.outer = outer

        # 평탄화 순서대로 한 번만 돌며 크기 / 압축 플래그 / 오프셋 결정
        def encode_files(self, callback: Optional[Callable[[PackEntry], None]] = None):
            total = 0
            for entry in self.outer.entries:
                if entry.is_dir:
                    continue

                data = _read_source(entry)
                entry.is_compressed = False
                if should_compress(entry.name):
                    compressed = compress(data)
                    if len(compressed) < len(data):
                        data = compressed
                        entry.is_compressed = True

                entry.length = len(data)
                try:
                    pack_length(entry.length, False)
                except CapacityExceededException as exc:
                    raise CapacityExceededException(exc.message, name=os.fsdecode(entry.name)) from None

                entry.data = encrypt(data, entry.name)
                entry.offset = total
                total += len(entry.data)

                logging.debug(
                    f"[write_data] {entry.path} | offset=0x{entry.offset:X}, size=0x{entry.length:X}, "
                    f"compressed={entry.is_compressed}"
                )
                if callback:
                    callback(entry)

            if total > UINT32_MAX:
                raise CapacityExceededException("combined files too big", offset=total)
            self.outer.total_length = total
            logging.info(f"[encode_files] 파일 인코딩 완료 (총 {len(self.outer.file_entries)}개, {total} bytes)")

        # 엔트리 테이블 → 압축 → 패딩 + 암호화. 헤더에는 패딩 전 크기가 들어감.
        def build_info_data(self):
            blob = encode_info_table(self.outer.entries)
            compressed = compress(blob)
            if len(compressed) > UINT32_MAX:
                raise CapacityExceededException("file table too big")

            self.outer.info_size = len(compressed)
            self.outer.info_data = encrypt(compressed, INFO_DATA_NAME)
            logging.info(
                f"[build_info_data] InfoData 작성 완료 (원본 {len(blob)} → 압축 {len(compressed)} bytes)"
            )

    # 리팩 후 .bin 저장
    class Save:
        def __init__(self, outer):
            self.outer = outer

        def to_stream(self, f):
            outer = self.outer
            try:
                f.write(LittleEndian.GetBytes32(outer.info_size))
                f.write(LittleEndian.GetBytes32(outer.total_length))
                f.write(outer.info_data)
                for entry in outer.file_entries:
                    f.write(entry.data)
            except OSError as exc:
                raise ArchiveIOException(f"cannot write archive: {exc.strerror}") from exc

        def to_file(self, path: str):
            try:
                f = open(path, "wb")
            except OSError as exc:
                raise ArchiveIOException(f"cannot create {path}: {exc.strerror}") from exc
            with f:
                self.to_stream(f)
            logging.info(f"[완료] BIN 리팩 → {path}")
