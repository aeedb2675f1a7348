import sys
import os
import logging
import argparse

# Nuitka 대응: 실행 경로 기반으로 base_dir 설정
if getattr(sys, 'frozen', False):
    base_dir = os.path.dirname(sys.executable)
else:
    base_dir = os.path.dirname(os.path.abspath(__file__))

if base_dir not in sys.path:
    sys.path.insert(0, base_dir)

from execution import unpack, repack
from gameres.gameres import ArchiveException, ArchiveIOException
from gameres.utility import setup_logger, teardown_logger
from yggdra.yggdraconst import EXTRACT_SUFFIX, PACK_SUFFIX

USAGE = (
    "Usage for unpacking: yggdra file.bin\n"
    "Usage for packing: yggdra folder"
)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="yggdra",
        description="Yggdra .bin archive UnPacker / RePacker",
        usage="%(prog)s [options] <file.bin | folder>",
    )
    parser.add_argument("path", nargs="?", help="언팩할 .bin 파일 또는 리팩할 폴더")
    parser.add_argument("-o", "--output", help="출력 경로 (기본: <file>.ex / <folder>_new.bin)")
    parser.add_argument("--list", action="store_true", help="추출하지 않고 엔트리 목록만 출력")
    parser.add_argument("--meta", action="store_true", help="언팩 후 <output>_meta.json 저장")
    parser.add_argument("--dump-infodata", action="store_true", help="복호화된 InfoData를 <output>_InfoData로 저장")
    parser.add_argument("--keep-going", action="store_true", help="실패한 엔트리를 건너뛰고 나머지 계속 추출")
    parser.add_argument("--no-progress", action="store_true", help="진행 표시줄 끄기")
    parser.add_argument("-v", "--verbose", action="store_true", help="콘솔에 INFO 로그 출력")
    parser.add_argument("--log-file", default=os.path.join(base_dir, "yggdra_runlog.txt"), help="로그 파일 경로")
    return parser


def dispatch(args) -> int:
    if not args.path:
        print(USAGE)
        return -1

    # 끝의 경로 구분자 제거
    in_path = args.path.rstrip("/\\")
    if not in_path:
        print(USAGE)
        return -1
    progress = not args.no_progress

    if os.path.isfile(in_path):
        if args.list:
            unpack.run_list(in_path)
            return 0

        out_dir = args.output or in_path + EXTRACT_SUFFIX
        logging.info(f"[언팩] archive: {in_path}, out_dir: {out_dir}")
        errors = unpack.run_unpack(
            in_path,
            out_dir,
            keep_going=args.keep_going,
            meta_path=out_dir + "_meta.json" if args.meta else None,
            dump_path=out_dir + "_InfoData" if args.dump_infodata else None,
            progress=progress,
        )
        if errors:
            print(f"[오류] {len(errors)}개 엔트리 추출 실패:")
            for exc in errors:
                print(f"  - {exc}")
            return -1
        print(f"[완료] 언팩 → {out_dir}")
        return 0

    if os.path.isdir(in_path):
        out_path = args.output or in_path + PACK_SUFFIX
        logging.info(f"[리팩] input_dir: {in_path}, out: {out_path}")
        repack.run_repack(in_path, out_path, progress=progress)
        print(f"[완료] 리팩 → {out_path}")
        return 0

    print(f"[오류] 파일 또는 폴더가 존재하지 않습니다: {in_path}")
    print(USAGE)
    return -1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    handlers = setup_logger(args.log_file, logging.INFO if args.verbose else logging.WARNING)
    try:
        logging.info("==== 실행 시작 ====")
        return dispatch(args)
    except ArchiveIOException as e:
        logging.exception(f"[main] 입출력 오류: {e}")
        return -1
    except ArchiveException as e:
        logging.exception(f"[main] 아카이브 오류: {e}")
        return -2
    except KeyboardInterrupt:
        print("\n[취소] 사용자에 의해 중단되었습니다.")
        logging.warning("[main] 사용자 중단 (Ctrl+C)")
        return -3
    finally:
        logging.info("==== 실행 종료 ====")
        teardown_logger(handlers)


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
