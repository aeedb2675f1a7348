# utility.py - 엔디안 / 바이너리 / 로그 / 메타데이터 헬퍼
#
# Licensed under the MIT License.

import os
import json
import logging
from logging.handlers import RotatingFileHandler

from gameres.gameres import ArchiveIOException, MalformedInputException

# ============================
# Endian Utilities
# ============================
class LittleEndian:
    @staticmethod
    def ToUInt32(buf, index):
        return int.from_bytes(buf[index:index+4], 'little')

    # u32 → 4바이트 리틀엔디안
    @staticmethod
    def GetBytes32(val: int) -> bytes:
        return val.to_bytes(4, 'little')

# ============================
# ASCII / Binary helpers
# ============================

# 4바이트 경계로 올림
def align4(value: int) -> int:
    return (value + 3) & ~3

# 4바이트 경계까지 0으로 채움
def pad4(data: bytes) -> bytes:
    extra = len(data) & 3
    if not extra:
        return bytes(data)
    return bytes(data) + b'\x00' * (4 - extra)

# index부터 널 문자 직전까지 읽음. 널 문자가 없으면 버퍼 끝까지.
def get_cstring(buf: bytes, index: int) -> bytes:
    end = buf.find(b'\x00', index)
    if end < 0:
        end = len(buf)
    return bytes(buf[index:end])

# 아카이브에 기록된 이름 → 디스크 경로 구성 요소
# 구분자나 상위 폴더 참조가 들어간 이름은 출력 폴더를 벗어나므로 거부함.
def safe_component(text: str, offset: int = None) -> str:
    if text in ("", ".", "..") or "/" in text or "\\" in text or "\x00" in text:
        raise MalformedInputException("unsafe entry name", name=repr(text), offset=offset)
    return text

# ============================
# 세이브 관련 유틸
# ============================

class BinarySaver:
    @staticmethod
    def save(name: str, content: bytes, save_path: str):
        try:
            dir_path = os.path.dirname(save_path)
            if dir_path:
                os.makedirs(dir_path, exist_ok=True)
            with open(save_path, "wb") as f:
                f.write(content)
        except OSError as exc:
            raise ArchiveIOException(f"cannot write {save_path}: {exc.strerror}", name=name) from exc
        logging.debug(f"[utility] {name} → 바이너리 저장 완료 ({len(content)} bytes)")

    @staticmethod
    def make_dir(name: str, dir_path: str):
        try:
            os.makedirs(dir_path, exist_ok=True)
        except OSError as exc:
            raise ArchiveIOException(f"cannot create directory {dir_path}: {exc.strerror}", name=name) from exc


# 메타데이터 저장 및 출력
# ============================
class EntryMetadataManager:
    def __init__(self, json_path: str):
        self.json_path = json_path

    def save_metadata(self, entries, output_path=None):
        if output_path is None:
            output_path = self.json_path

        def get_hex(val):
            return f"0x{val:X}" if isinstance(val, int) else val

        meta_list = []
        for entry in entries:
            meta = {
                "name": entry.name,
                "path": entry.path,
                "entry_index": entry.index,
                "is_dir": entry.is_dir,
                "is_compressed": entry.is_compressed,
                "size": get_hex(entry.size),
                "offset": get_hex(entry.offset),
            }
            if entry.is_dir:
                meta["child_start"] = entry.child_start
            meta_list.append(meta)

        try:
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(meta_list, f, ensure_ascii=False, indent=2)
        except OSError as exc:
            raise ArchiveIOException(f"cannot write {output_path}: {exc.strerror}") from exc

        logging.info(f"[EntryMetadataManager] {len(meta_list)}개 엔트리에 메타데이터 저장 완료 → {output_path}")
        return output_path


# ============================
# 로거 설정
# ============================

class SafeRotatingFileHandler(RotatingFileHandler):
    def doRollover(self):
        try:
            super().doRollover()
        except OSError as e:
            logging.warning(f"[SafeRotatingFileHandler] 롤오버 실패 (무시됨): {e}")

LOG_FORMAT = "[%(levelname)s] %(message)s"

# 루트 로거에 파일 + 콘솔 핸들러를 붙이고, 붙인 핸들러 목록을 돌려줌
def setup_logger(log_path: str = None, console_level=logging.WARNING):
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(LOG_FORMAT)
    handlers = []

    if log_path:
        file_handler = SafeRotatingFileHandler(
            log_path,
            mode='a',
            maxBytes=100_000_000,
            backupCount=5,
            encoding='utf-8',
            delay=True,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)
    return handlers

def teardown_logger(handlers):
    logger = logging.getLogger()
    for handler in handlers:
        logger.removeHandler(handler)
        handler.close()
