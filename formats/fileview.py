# fileview.py - 아카이브 파일을 읽기 전용 바이트 저장소로 여는 뷰
#
# Licensed under the MIT License.

import os
import io
import logging

from gameres.gameres import ArchiveIOException, MalformedInputException


#FileView: 오프셋 기반 읽기 (64비트 오프셋 그대로 사용)
class FileView:
    def __init__(self, filepath: str):
        self.filepath = filepath
        self.name = os.path.basename(filepath)
        try:
            self.file = open(filepath, "rb")
            self.size = os.fstat(self.file.fileno()).st_size
        except OSError as exc:
            raise ArchiveIOException(f"cannot open {filepath}: {exc.strerror}") from exc
        self.stream = self.file

        logging.debug(f"[fileview] '{self.name}' 열림 (크기: {self.size} bytes)")

    def __len__(self):
        return self.size

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # 최대 size 바이트를 읽음. 파일 끝에 걸리면 짧게 반환.
    def read_at(self, offset: int, size: int, name: str = None) -> bytes:
        logging.debug(f"[fileview] read_at 호출 - offset=0x{offset:X}, size={size}, file_size={self.size}")

        if offset < 0 or offset > self.size:
            raise MalformedInputException("Seek offset out of range", name=name or self.name, offset=offset)

        available = self.size - offset
        read_size = min(size, available)

        try:
            self.stream.seek(offset, io.SEEK_SET)
            return self.stream.read(read_size)
        except OSError as exc:
            raise ArchiveIOException(f"cannot read {self.filepath}: {exc.strerror}", offset=offset) from exc

    # 정확히 size 바이트를 읽음. 모자라면 범위 초과 오류.
    def read_exact(self, offset: int, size: int, name: str = None) -> bytes:
        data = self.read_at(offset, size, name)
        if len(data) != size:
            raise MalformedInputException(
                f"read past end of archive: wanted {size} bytes, got {len(data)}",
                name=name,
                offset=offset,
            )
        return data

    # 전체 파일 크기 (최대 오프셋) 반환
    def get_max_offset(self) -> int:
        return self.size

    def close(self):
        if not self.file.closed:
            self.file.close()
            logging.debug(f"[fileview] '{self.name}' 닫힘")
