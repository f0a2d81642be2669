"""
스토리지 모듈

SQLite 기반 blob 저장소 제공
"""

from core.storage.blob_store import BlobStore

__all__ = [
    "BlobStore",
]
