"""
Web 진입점

실행 방법:
    python -m web
    python -m web --settings config/settings.yaml --port 8080
"""

import argparse
from pathlib import Path

import uvicorn

from core.config.loader import get_settings
from core.logging import setup_logging
from web.app import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="ItemLedger Web 서버")
    parser.add_argument("--settings", type=Path, default=None, help="settings.yaml 경로")
    parser.add_argument("--host", default=None, help="바인드 호스트")
    parser.add_argument("--port", type=int, default=None, help="바인드 포트")
    args = parser.parse_args()

    settings = get_settings(args.settings)

    # 로깅 설정 (콘솔 + 파일)
    setup_logging("web", console_level=settings.log_level, file_level=settings.log_level)

    uvicorn.run(
        create_app(),
        host=args.host or settings.web_host,
        port=args.port or settings.web_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
