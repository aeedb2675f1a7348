# unpack.py - Yggdra .bin 전체 언팩 / 목록 출력

import logging
import time

from tqdm import tqdm

from formats.fileview import FileView
from gameres.utility import EntryMetadataManager
from yggdra.yggdraunpack import YggdraOpener


def run_unpack(archive_path: str, out_dir: str, keep_going: bool = False, meta_path: str = None,
               dump_path: str = None, progress: bool = True):
    start = time.time()

    with FileView(archive_path) as view:
        archive = YggdraOpener().open_archive(view)

        if dump_path:
            archive.dump_info_data(dump_path)
            logging.info(f"[unpack] InfoData 덤프 → {dump_path}")

        with tqdm(total=len(archive.entries), desc="복호화 진행중", unit="파일", disable=not progress) as bar:
            errors = archive.extract_all(out_dir, keep_going=keep_going, callback=lambda entry: bar.update())

        if meta_path:
            # 방문 순서대로 기록
            EntryMetadataManager(meta_path).save_metadata(list(archive.walk()))

    elapsed = time.time() - start
    logging.info(f"[완료] 언팩 시간: {elapsed:.2f}초 → {out_dir}")
    return errors


def run_list(archive_path: str, out=print):
    with FileView(archive_path) as view:
        archive = YggdraOpener().open_archive(view)
        for entry in archive.walk():
            if entry.is_dir:
                out(f"{entry.path}/  [dir, {entry.size} entries]")
            else:
                flag = "z" if entry.is_compressed else "-"
                out(f"{entry.path}  [{flag} 0x{entry.offset:08X} {entry.size}]")
        return archive.entries
