"""
타입 정의 모듈

Enum 등 핵심 타입 정의
모든 Enum은 str을 상속하여 문자열 직렬화 가능
"""

from enum import Enum


class WriteState(str, Enum):
    """영속 쓰기 상태

    전이 규칙:
    - APPLIED → QUEUED: 메모리 반영 후 쓰기 큐에 등록
    - QUEUED → WRITING: 워커가 쓰기 시작
    - WRITING → PERSISTED: 어댑터 확인
    - WRITING → FAILED: 어댑터 실패 (재시도 가능하면 다시 WRITING)
    """

    APPLIED = "APPLIED"
    QUEUED = "QUEUED"
    WRITING = "WRITING"
    PERSISTED = "PERSISTED"
    FAILED = "FAILED"


class ChangeKind(str, Enum):
    """Ledger 변경 종류 (구독자 알림용)"""

    ADDED = "ADDED"
    UPDATED = "UPDATED"
    INCREMENTED = "INCREMENTED"
    DECREMENTED = "DECREMENTED"
    REMOVED = "REMOVED"
    LOADED = "LOADED"
