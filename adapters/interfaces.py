"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class IStorageAdapter(Protocol):
    """영속 저장소 어댑터 인터페이스

    고정 키 하나에 아이템 컬렉션 전체를 blob으로 저장.
    부분/델타 쓰기 없음. read/write 모두 실패할 수 있음 (예외 발생).
    """

    @property
    def key(self) -> str:
        """저장 키"""
        ...

    async def read(self) -> bytes | None:
        """저장된 blob 조회

        Returns:
            저장된 bytes 또는 None (데이터 없음)
        """
        ...

    async def write(self, data: bytes) -> None:
        """blob 전체 교체

        Args:
            data: 직렬화된 아이템 컬렉션 전체
        """
        ...
