"""
pytest 공통 fixture 정의
"""

import tempfile
from pathlib import Path

import pytest

from adapters.mock.storage import MockStorage
from core.config.loader import Settings
from core.ledger import LedgerStore


@pytest.fixture
def temp_dir() -> Path:
    """OS 독립적인 임시 디렉토리 생성"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def reset_settings() -> None:
    """Settings 싱글턴 초기화"""
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def temp_settings_file(temp_dir: Path) -> Path:
    """테스트용 settings.yaml 파일 생성"""
    settings_content = f"""# 테스트용 settings.yaml
storage:
  db_path: "{(temp_dir / 'ledger.db').as_posix()}"
  key: test_items

ledger:
  write_retries: 2
  retry_delay_sec: 0.5

web:
  host: 0.0.0.0
  port: 9000

logging:
  level: debug
"""
    settings_path = temp_dir / "settings.yaml"
    settings_path.write_text(settings_content, encoding="utf-8")
    return settings_path


@pytest.fixture
def storage() -> MockStorage:
    """Mock 저장소"""
    return MockStorage()


@pytest.fixture
def ledger(storage: MockStorage) -> LedgerStore:
    """MockStorage 기반 LedgerStore"""
    return LedgerStore(storage)
