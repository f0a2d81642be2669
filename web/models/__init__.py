"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import ItemWriteRequest
from web.models.responses import (
    HealthResponse,
    ItemListResponse,
    ItemResponse,
    MutationResponse,
    RevenueResponse,
)

__all__ = [
    # Requests
    "ItemWriteRequest",
    # Responses
    "HealthResponse",
    "ItemResponse",
    "ItemListResponse",
    "MutationResponse",
    "RevenueResponse",
]
