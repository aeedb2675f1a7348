# gameres.py - 아카이브 포맷 공통 베이스 클래스와 예외 정의
#
# Licensed under the MIT License.

from abc import ABC, abstractmethod
from typing import Optional


# 예외 처리
# 모든 코덱 오류의 베이스. 엔트리 이름과 오프셋을 같이 들고 다님 (진단용)
class ArchiveException(Exception):
    def __init__(self, message: str, name: Optional[str] = None, offset: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.name = name
        self.offset = offset

    def __str__(self):
        context = []
        if self.name is not None:
            context.append(f"entry={self.name}")
        if self.offset is not None:
            context.append(f"offset=0x{self.offset:X}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


# 잘린 헤더, 4바이트 정렬 위반, 범위 밖 오프셋 등 입력 데이터 자체가 깨진 경우
class MalformedInputException(ArchiveException):
    pass


# 32비트 / 30비트 필드에 값이 들어가지 않는 경우 (잘라내지 않고 실패)
class CapacityExceededException(ArchiveException):
    pass


# 파일 열기/읽기/쓰기, 디렉토리 생성 실패
class ArchiveIOException(ArchiveException):
    pass


# 32비트 길이 필드로 표현할 수 없는 입력
class UnsupportedSizeException(ArchiveException):
    pass


# 리소스 기능
class IResource(ABC):
    def __init__(self):
        self._name = getattr(self, "__class__").__name__  # 기본값 설정

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str):
        self._name = value

    @property
    @abstractmethod
    def type(self) -> str:
        pass


# 아카이브 포맷
class ArchiveFormat(IResource):
    def __init__(self):
        super().__init__()
        self.name = "unknown"

    @property
    def type(self) -> str:
        return "archive"

    def open_archive(self, view):
        raise NotImplementedError("포맷 오프너 구현 필요")

