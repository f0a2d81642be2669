"""
로깅 설정

실행 프로세스(web 등) 시작 시 한 번 호출.
콘솔(stdout)과 일별 롤링 파일 두 곳에 같은 포맷으로 기록.

사용법:
    from core.logging import setup_logging
    setup_logging("web", console_level=settings.log_level)
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 7일치 보관

# WARNING 이상만 남길 라이브러리 로거
NOISY_LOGGERS = (
    "aiosqlite",       # 쿼리마다 executing/completed 로그
    "asyncio",
    "httpx",           # TestClient 요청 로그
    "uvicorn.access",  # 요청마다 access 로그
)

# 프로세스별 로그 디렉토리 (없으면 LOGS_DIR)
PROCESS_LOG_DIRS: dict[str, Path] = {
    "web": Paths.WEB_LOGS_DIR,
}


def resolve_level(level: int | str) -> int:
    """레벨 이름("debug", "INFO") 또는 숫자를 logging 레벨로 변환

    Raises:
        ValueError: 알 수 없는 레벨 이름
    """
    if isinstance(level, int):
        return level

    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def get_log_file_path(process_name: str) -> Path:
    """프로세스 로그 파일 경로 (logs/<process>/<process>.log)"""
    log_dir = PROCESS_LOG_DIRS.get(process_name, Paths.LOGS_DIR)
    return log_dir / f"{process_name}.log"


def _console_handler(level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _daily_file_handler(
    log_file: Path,
    level: int,
    formatter: logging.Formatter,
) -> logging.Handler:
    handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"  # web.log.2026-10-19
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    process_name: str,
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """루트 로거 초기화

    기존 루트 핸들러는 닫고 교체하므로 여러 번 호출해도 중복 출력 없음.

    Args:
        process_name: 프로세스 이름 (로그 파일명)
        console_level: 콘솔 레벨 (숫자 또는 이름)
        file_level: 파일 레벨 (숫자 또는 이름)
        log_dir: 로그 디렉토리 (None이면 get_log_file_path 기준)

    Returns:
        루트 Logger
    """
    console = resolve_level(console_level)
    to_file = resolve_level(file_level)

    log_file = (
        log_dir / f"{process_name}.log"
        if log_dir is not None
        else get_log_file_path(process_name)
    )
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    # 필터링은 핸들러에서
    root_logger.setLevel(min(console, to_file))

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    root_logger.addHandler(_console_handler(console, formatter))
    root_logger.addHandler(_daily_file_handler(log_file, to_file, formatter))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(
        f"로깅 초기화 완료: {process_name} "
        f"(콘솔 {logging.getLevelName(console)}, "
        f"파일 {log_file} {logging.getLevelName(to_file)})"
    )

    return root_logger
