# yggdraconst.py - Yggdra 아카이브 포맷 고정 상수
#
# Licensed under the MIT License.

# 메타데이터 블롭의 키스트림 시드 이름
INFO_DATA_NAME = b"InfoData"

# [u32 압축 메타데이터 크기][u32 전체 컨텐츠 크기] 바로 뒤에 메타데이터 블롭이 옴
CONTAINER_HEADER_SIZE = 8

# 메타데이터 블롭 내부 헤더: [u32 엔트리 배열 길이][u32 스트링 테이블 길이]
INFO_TABLE_HEADER_SIZE = 8
ENTRY_RECORD_SIZE = 12

# packed_length 비트 배치
FOLDER_FLAG = 0x8000_0000
COMPRESSED_FLAG = 0x4000_0000
SIZE_MASK = 0x3FFF_FFFF

UINT32_MAX = 0xFFFF_FFFF

# 이미 압축된 포맷으로 간주해 deflate를 건너뛰는 확장자
NO_COMPRESS_EXTENSIONS = (b".pck", b".webp", b".webm", b".png", b".ogg", b".opus")

# 출력 경로 접미사 (CLI)
EXTRACT_SUFFIX = ".ex"
PACK_SUFFIX = "_new.bin"
