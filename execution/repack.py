# repack.py - 폴더 → Yggdra .bin 리팩

import os
import logging
import time

from tqdm import tqdm

from gameres.gameres import ArchiveIOException
from yggdra.yggdrarepack import DatWriter


def run_repack(input_dir: str, output_path: str, progress: bool = True):
    start = time.time()

    # 원본과 같이 출력 파일을 먼저 만들어 둠 (실패 시 바로 중단)
    try:
        out = open(output_path, "wb")
    except OSError as exc:
        raise ArchiveIOException(f"cannot create {output_path}: {exc.strerror}") from exc

    try:
        with out:
            writer = DatWriter(input_dir)
            writer.add_auto()
            writer.finalize_folders()
            logging.debug(f"[repack] 등록된 entry 수: {len(writer.entries)}")

            file_count = len(writer.file_entries)
            with tqdm(total=file_count, desc="암호화 진행중", unit="파일", disable=not progress) as bar:
                writer.write.encode_files(callback=lambda entry: bar.update())

            writer.write.build_info_data()
            writer.save.to_stream(out)
    except BaseException:
        # 중간에 실패한 아카이브는 유효하지 않으므로 남기지 않음
        logging.error(f"[repack] 리팩 실패, 불완전한 출력 삭제: {output_path}")
        try:
            os.remove(output_path)
        except OSError as exc:
            logging.warning(f"[repack] 출력 삭제 실패: {exc}")
        raise

    elapsed = time.time() - start
    logging.info(f"[완료] 리팩 성공 ({elapsed:.2f}초) → {output_path}")
    return writer
