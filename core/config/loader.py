"""
설정 로더

settings.yaml 로드 및 저장소/Ledger/Web 설정 생성.
파일이 없으면 기본값 사용.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, Paths


@dataclass(frozen=True)
class StorageConfig:
    """저장소 설정"""

    db_path: Path
    key: str


@dataclass(frozen=True)
class LedgerConfig:
    """Ledger 쓰기 설정"""

    write_retries: int
    retry_delay_sec: float


@dataclass(frozen=True)
class WebConfig:
    """Web 서버 설정"""

    host: str
    port: int


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    storage: StorageConfig
    ledger: LedgerConfig
    web: WebConfig
    log_level: str


class SettingsLoadError(Exception):
    """설정 로드 실패 예외"""

    pass


def load_config(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스 (파일이 없으면 기본값)

    Raises:
        SettingsLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    data: dict[str, Any] = {}

    if path.exists():
        try:
            content = path.read_text(encoding="utf-8")
            loaded = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

        if loaded is not None:
            if not isinstance(loaded, dict):
                raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")
            data = loaded

    storage = _section(data, "storage")
    ledger = _section(data, "ledger")
    web = _section(data, "web")
    logging_section = _section(data, "logging")

    db_path = Path(storage.get("db_path") or Paths.DB_FILE)
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    key = storage.get("key", Defaults.STORAGE_KEY)
    if not isinstance(key, str) or not key:
        raise SettingsLoadError("storage.key는 비어 있지 않은 문자열이어야 합니다")

    write_retries = _as_int(ledger.get("write_retries", Defaults.WRITE_RETRIES), "ledger.write_retries")
    if write_retries < 0:
        raise SettingsLoadError("ledger.write_retries는 0 이상이어야 합니다")

    retry_delay = _as_float(ledger.get("retry_delay_sec", Defaults.RETRY_DELAY_SEC), "ledger.retry_delay_sec")
    if retry_delay < 0:
        raise SettingsLoadError("ledger.retry_delay_sec는 0 이상이어야 합니다")

    port = _as_int(web.get("port", Defaults.WEB_PORT), "web.port")

    log_level = str(logging_section.get("level", Defaults.LOG_LEVEL)).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise SettingsLoadError(f"logging.level이 유효하지 않습니다: {log_level!r}")

    return AppConfig(
        storage=StorageConfig(db_path=db_path, key=key),
        ledger=LedgerConfig(write_retries=write_retries, retry_delay_sec=retry_delay),
        web=WebConfig(host=str(web.get("host", Defaults.WEB_HOST)), port=port),
        log_level=log_level,
    )


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return section


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise SettingsLoadError(f"{name}는 정수여야 합니다: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"{name}는 정수여야 합니다: {value!r}") from e


def _as_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise SettingsLoadError(f"{name}는 숫자여야 합니다: {value!r}") from e


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_config(settings_path)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def db_path(self) -> Path:
        """DB 경로"""
        return self.config.storage.db_path

    @property
    def storage_key(self) -> str:
        """Ledger 저장 키"""
        return self.config.storage.key

    @property
    def write_retries(self) -> int:
        """쓰기 재시도 횟수"""
        return self.config.ledger.write_retries

    @property
    def retry_delay_sec(self) -> float:
        """쓰기 재시도 대기 (초)"""
        return self.config.ledger.retry_delay_sec

    @property
    def web_host(self) -> str:
        return self.config.web.host

    @property
    def web_port(self) -> int:
        return self.config.web.port

    @property
    def log_level(self) -> str:
        """로그 레벨 이름 (INFO, DEBUG 등)"""
        return self.config.log_level

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
