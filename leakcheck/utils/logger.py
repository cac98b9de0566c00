"""ロギング設定モジュール。"""

import logging
import sys
from pathlib import Path
from typing import List, Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    format_string: str = DEFAULT_FORMAT
) -> logging.Logger:
    """ロギング設定をセットアップする。

    標準出力はレポート専用のため、コンソールには標準エラーを使う。

    Args:
        level: ログレベル（DEBUG, INFO, WARNING, ERROR, CRITICAL）
        log_file: ログファイルへのパス（省略可）
        format_string: ログのフォーマット文字列

    Returns:
        ルートロガー
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # 繰り返し呼ばれても出力が重複しないようにする
    root_logger.handlers.clear()

    formatter = logging.Formatter(format_string)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    return root_logger


class ProgressLogger:
    """ファイル処理の進捗をログ出力するヘルパークラス。"""

    def __init__(
        self,
        total: int,
        logger: Optional[logging.Logger] = None,
        log_interval: int = 10
    ):
        """進捗ロガーを初期化する。

        Args:
            total: 処理するファイルの総数
            logger: 使用するロガー
            log_interval: 何ファイルごとに出力するか
        """
        self.total = total
        self.current = 0
        self.logger = logger or logging.getLogger(__name__)
        self.log_interval = max(1, log_interval)

    def update(self, item: Optional[str] = None) -> None:
        """1ファイル分進める。

        Args:
            item: 処理したファイル名（省略可）
        """
        self.current += 1
        if self.current % self.log_interval and self.current != self.total:
            return

        percent = 100.0 * self.current / self.total if self.total else 100.0
        msg = f"Processed {self.current}/{self.total} files ({percent:.1f}%)"
        if item:
            msg += f" - {item}"
        self.logger.debug(msg)

    def complete(self, message: str = "Complete") -> None:
        self.logger.info(f"{message}: {self.current}/{self.total} files")
