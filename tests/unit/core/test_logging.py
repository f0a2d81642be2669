"""
core/logging.py 테스트
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import pytest

from core.constants import Paths
from core.logging import NOISY_LOGGERS, get_log_file_path, resolve_level, setup_logging


@pytest.fixture
def restore_root_logger():
    """루트 로거 핸들러 복원"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    """setup_logging 테스트"""

    def test_handlers(self, temp_dir: Path, restore_root_logger: None) -> None:
        """콘솔 + 일별 파일 핸들러"""
        root = setup_logging("web", console_level="warning", file_level="debug", log_dir=temp_dir)

        file_handlers = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]
        assert len(root.handlers) == 2
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == temp_dir / "web.log"
        assert file_handlers[0].level == logging.DEBUG
        assert root.level == logging.DEBUG

    def test_noisy_loggers_quieted(self, temp_dir: Path, restore_root_logger: None) -> None:
        """불필요한 로거는 WARNING"""
        setup_logging("web", log_dir=temp_dir)

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_repeated_setup_no_duplicates(self, temp_dir: Path, restore_root_logger: None) -> None:
        """여러 번 호출해도 핸들러 중복 없음"""
        setup_logging("web", log_dir=temp_dir)
        root = setup_logging("web", log_dir=temp_dir)

        assert len(root.handlers) == 2


class TestGetLogFilePath:
    """get_log_file_path 테스트"""

    def test_web(self) -> None:
        assert get_log_file_path("web") == Paths.WEB_LOGS_DIR / "web.log"

    def test_other(self) -> None:
        assert get_log_file_path("tool") == Paths.LOGS_DIR / "tool.log"


class TestResolveLevel:
    """resolve_level 테스트"""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (logging.DEBUG, logging.DEBUG),
            ("debug", logging.DEBUG),
            (" WARNING ", logging.WARNING),
        ],
    )
    def test_resolve(self, level: int | str, expected: int) -> None:
        assert resolve_level(level) == expected

    def test_unknown(self) -> None:
        """알 수 없는 이름 → ValueError"""
        with pytest.raises(ValueError):
            resolve_level("loud")
