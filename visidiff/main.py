"""Точка входа в приложение."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from visidiff.config import DEFAULT_CONFIG, ComparerConfig, ConfigError

logger = logging.getLogger(__name__)


def _side_path(value: str) -> Optional[Path]:
    # "-" marks an absent side
    return None if value == "-" else Path(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="visidiff",
        description="Сравнение двух версий изображения: onion skin, side-by-side и карта различий.",
    )
    parser.add_argument("previous", nargs="?", type=_side_path, help="прежняя версия, \"-\" если её нет (новый файл)")
    parser.add_argument("current", nargs="?", type=_side_path, help="текущая версия, \"-\" если её нет (файл удалён)")
    parser.add_argument("--config", type=Path, help="JSON с настройками сравнения")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="уровень логирования",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Создаёт и запускает главное окно приложения."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = DEFAULT_CONFIG
    if args.config is not None:
        try:
            config = ComparerConfig.from_json(args.config)
        except ConfigError as exc:
            logger.error("%s", exc)
            return 2

    # imported late so --help works without a display
    from visidiff.app import ComparerApp

    app = ComparerApp(config=config)
    if args.previous is not None or args.current is not None:
        app.after(0, lambda: app.open_paths(args.previous, args.current))
    app.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
