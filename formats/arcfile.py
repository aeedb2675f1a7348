# arcfile.py - 아카이브 엔트리와 컨테이너 베이스
#
# Licensed under the MIT License.

import logging
from typing import List


# 디코딩된 엔트리. index 는 평탄화된 레코드 배열상의 위치.
class Entry:
    def __init__(self, name: str, offset: int, size: int, index: int = -1,
                 is_dir: bool = False, is_compressed: bool = False, raw_name: bytes = None):
        self.name = name
        self.raw_name = raw_name if raw_name is not None else name.encode("utf-8")
        self.offset = offset
        self.size = size
        self.index = index
        self.is_dir = is_dir
        self.is_compressed = is_compressed
        self.child_start = None  # 폴더: 첫 자식 레코드 인덱스
        self.parent = None  # walk 중 결정되는 상위 폴더 엔트리
        self.parts = ()
        self.path = None  # walk 중에 결정되는 출력 루트 기준 상대 경로

    def __repr__(self):
        kind = "dir" if self.is_dir else "file"
        return (
            f"<Entry #{self.index} {kind} name={self.name!r}, "
            f"offset=0x{self.offset:X}, size=0x{self.size:X}, compressed={self.is_compressed}>"
        )


# ArcFile 컨테이너. entries 는 레코드 배열 순서 그대로 유지.
class ArcFile:
    def __init__(self, view, format, entries: List[Entry]):
        self.view = view
        self.format = format
        self.name = view.name if hasattr(view, 'name') else "unnamed"
        self.entries = entries

        logging.debug(f"[ArcFile] '{self.name}' 초기화, 항목 수: {len(self.entries)}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    #내부 View 리소스를 정리
    def close(self):
        self.view.close()
        logging.debug(f"[ArcFile] '{self.name}' 닫힘")
