"""設定管理モジュール。"""

from dataclasses import dataclass, field, fields
from typing import List, Dict, Optional, Any
from pathlib import Path
import os
import logging

import yaml

from .scanner.file_scanner import DEFAULT_FILE_GLOB, DEFAULT_EXCLUDE_DIRS

logger = logging.getLogger(__name__)


DEFAULT_PREFIX = "obs_"
OUTPUT_FORMATS = ("text", "json")


class ConfigError(Exception):
    """設定が不正、またはスキャン対象を決定できない場合のエラー。"""
    pass


@dataclass
class Config:
    """アプリケーション設定。"""

    # スキャン対象ディレクトリ（anchorからの相対パス）
    target: Optional[str] = None
    anchor: str = "."

    # シンボル抽出設定
    prefix: str = DEFAULT_PREFIX
    file_glob: str = DEFAULT_FILE_GLOB
    exclude_dirs: List[str] = field(
        default_factory=lambda: sorted(DEFAULT_EXCLUDE_DIRS)
    )
    max_workers: int = 4

    # 生成/解放ルール（空の場合はデフォルトルール）
    rules: List[Dict[str, Any]] = field(default_factory=list)

    # 出力設定
    output_format: str = "text"
    fail_on_leaks: bool = True

    # ロギング設定
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @classmethod
    def from_yaml(cls, file_path: str) -> "Config":
        """YAMLファイルから設定を読み込む。

        Args:
            file_path: YAML設定ファイルのパス

        Returns:
            Configインスタンス

        Raises:
            ConfigError: ファイルを読み込めない場合
        """
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {file_path}")

        config = cls.from_dict(data)

        logger.info(f"Configuration loaded from {file_path}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """辞書から設定を作成する。

        Args:
            data: 設定辞書

        Returns:
            Configインスタンス
        """
        config = cls()
        names = {f.name for f in fields(cls)}

        for key, value in data.items():
            if key in names:
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown configuration key ignored: {key}")

        return config

    def validate(self) -> List[str]:
        """設定を検証する。

        Returns:
            検証エラーのリスト（有効な場合は空）
        """
        errors = []

        if not self.prefix:
            errors.append("prefix must not be empty")
        if not self.file_glob:
            errors.append("file_glob must not be empty")
        if not isinstance(self.max_workers, int) or self.max_workers < 1:
            errors.append(f"max_workers must be a positive integer: {self.max_workers}")
        if self.output_format not in OUTPUT_FORMATS:
            errors.append(
                f"output_format must be one of {', '.join(OUTPUT_FORMATS)}: "
                f"{self.output_format}"
            )
        if not isinstance(self.rules, list):
            errors.append("rules must be a list")
        if not isinstance(self.exclude_dirs, list) or not all(
            isinstance(name, str) for name in self.exclude_dirs
        ):
            errors.append("exclude_dirs must be a list of directory names")

        return errors

    def apply_environment(self) -> None:
        """環境変数による上書きを適用する。

        LEAKCHECK_PREFIXが設定されていればprefixを置き換える。
        """
        self.prefix = os.getenv("LEAKCHECK_PREFIX", self.prefix)

    def resolve_target(self) -> Path:
        """スキャン対象ディレクトリの絶対パスを求める。

        Returns:
            anchorを基準に解決したパス（targetが絶対パスならそのまま）

        Raises:
            ConfigError: targetが未設定の場合
        """
        if not self.target:
            raise ConfigError("No directory provided.")

        return (Path(self.anchor) / self.target).resolve()

    def build_rules(self) -> list:
        """設定されたルールをコンパイルする。

        Returns:
            評価順のPairRuleのリスト

        Raises:
            ConfigError: ルール定義が不正な場合
            PatternError: ルールの正規表現が不正な場合
        """
        from .io.rules_loader import RulesLoader

        return RulesLoader().load(self.rules)

    def to_dict(self) -> dict:
        """設定を辞書に変換する。

        Returns:
            辞書形式の設定
        """
        return {
            "target": self.target,
            "anchor": self.anchor,
            "prefix": self.prefix,
            "file_glob": self.file_glob,
            "exclude_dirs": list(self.exclude_dirs),
            "max_workers": self.max_workers,
            "rules": list(self.rules),
            "output_format": self.output_format,
            "fail_on_leaks": self.fail_on_leaks,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }

    def to_yaml(self) -> str:
        """設定をYAML文字列に変換する。

        Returns:
            YAML形式の設定
        """
        return yaml.dump(
            self.to_dict(),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )
