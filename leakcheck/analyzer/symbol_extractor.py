"""ソーステキストから呼び出しシンボルを抽出するモジュール。"""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import logging
import re

from ..config import ConfigError, DEFAULT_PREFIX
from ..models.result import ScanWarning
from ..utils.logger import ProgressLogger

logger = logging.getLogger(__name__)


class FileReadError(Exception):
    """ソースファイルを読み込めない場合のエラー。"""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path
        self.reason = reason


class SymbolExtractor:
    """プレフィックスに一致する呼び出しシンボルを抽出する。

    マッチングは字句的なもので、コメントや文字列リテラル内の
    出現も抽出対象に含まれる。
    """

    def __init__(
        self,
        prefix: str = DEFAULT_PREFIX,
        max_workers: int = 4,
        encoding: str = "utf-8"
    ):
        """抽出器を初期化する。

        Args:
            prefix: シンボルのリテラルプレフィックス（例: "obs_"）
            max_workers: ファイル読み込みの並列数（1以下で逐次読み込み）
            encoding: ソースファイルの文字エンコーディング

        Raises:
            ConfigError: プレフィックスが空の場合
        """
        if not prefix:
            raise ConfigError("Symbol prefix must not be empty")

        self.prefix = prefix
        self.max_workers = max_workers
        self.encoding = encoding
        # "(" の直前で終わる <prefix><単語文字> の並び
        self._regex = re.compile(re.escape(prefix) + r"[A-Za-z0-9_]*(?=\()")

    def extract(self, text: str) -> List[str]:
        """テキストから呼び出しシンボルを出現順に抽出する。

        Args:
            text: ソースファイルの内容

        Returns:
            シンボルのリスト（重複を含む）
        """
        return self._regex.findall(text)

    def extract_file(self, path: Path) -> List[str]:
        """ファイルを読み込んでシンボルを抽出する。

        Args:
            path: ソースファイルのパス

        Returns:
            シンボルのリスト

        Raises:
            FileReadError: ファイルを読み込めない場合
        """
        try:
            text = Path(path).read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise FileReadError(Path(path), str(e)) from e

        return self.extract(text)

    def extract_all(
        self,
        paths: Sequence[Path],
        progress: Optional[ProgressLogger] = None
    ) -> Tuple[List[str], List[ScanWarning]]:
        """全ファイルからシンボルを抽出し、スキャン順に連結する。

        読み込みは並列に行うが、結果は入力順に再構成される。
        読み込みに失敗したファイルは警告として記録し、空の結果として扱う。

        Args:
            paths: スキャン順のファイルパス
            progress: 進捗ロガー（省略可）

        Returns:
            (全シンボルのリスト, 警告のリスト) のタプル
        """
        paths = list(paths)
        if progress is None:
            progress = ProgressLogger(len(paths), logger, log_interval=50)

        if self.max_workers <= 1 or len(paths) <= 1:
            per_file = [self._read_one(p) for p in paths]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                per_file = list(executor.map(self._read_one, paths))

        symbols: List[str] = []
        warnings: List[ScanWarning] = []

        for path, (file_symbols, warning) in zip(paths, per_file):
            if warning is not None:
                warnings.append(warning)
            symbols.extend(file_symbols)
            progress.update(str(path))

        if paths:
            progress.complete("Symbol extraction complete")
        logger.info(f"Extracted {len(symbols)} symbols from {len(paths)} files")
        return symbols, warnings

    def _read_one(self, path: Path) -> Tuple[List[str], Optional[ScanWarning]]:
        try:
            return self.extract_file(path), None
        except FileReadError as e:
            logger.warning(str(e))
            return [], ScanWarning(path=str(path), message=e.reason)
