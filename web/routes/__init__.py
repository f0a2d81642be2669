"""
API 라우트 패키지

각 기능별 라우터 모듈:
- health: 헬스 체크
- items: 아이템 Ledger API
"""
