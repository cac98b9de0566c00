"""リソースリークチェックツールのメインエントリーポイント。"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence
from dataclasses import dataclass
import logging

from .config import Config, ConfigError
from .io.rules_loader import RulesLoader
from .scanner.file_scanner import FileScanner, NotFoundError, compile_glob
from .analyzer.symbol_extractor import SymbolExtractor
from .analyzer.pair_classifier import PairClassifier
from .report.leak_reporter import LeakReporter, EXIT_FATAL, EXIT_OK
from .models.result import Report
from .models.rule import PairRule, PatternError
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)


PROMPT = "Which directory do you want to check? "


@dataclass
class ScanStats:
    """スキャン統計情報。"""
    files: int = 0
    symbols: int = 0
    leftover: int = 0
    leaks: int = 0
    warnings: int = 0


class LeakChecker:
    """ファイル走査からレポート作成までをまとめるメインクラス。

    runは呼び出しごとに独立しており、同じツリーに対して
    何度実行しても同じレポートを返す。
    """

    def __init__(self, config: Config, rules: Optional[Sequence[PairRule]] = None):
        """チェッカーを初期化する。

        Args:
            config: アプリケーション設定
            rules: 評価順のルール（省略時は設定から生成）

        Raises:
            ConfigError: 設定が不正な場合
            PatternError: ルールまたはファイルglobが不正な場合
        """
        self.config = config
        self.rules = list(rules) if rules is not None else config.build_rules()
        # globの誤りはスキャン開始前に検出する
        compile_glob(config.file_glob)
        self.stats = ScanStats()

        self.extractor = SymbolExtractor(
            prefix=config.prefix,
            max_workers=config.max_workers
        )
        self.classifier = PairClassifier(self.rules)
        self.reporter = LeakReporter()

        logger.info(f"LeakChecker initialized with {len(self.rules)} rules")

    def run(self, root: Path) -> Report:
        """ディレクトリをスキャンしてレポートを作成する。

        Args:
            root: スキャン対象ディレクトリ

        Returns:
            最終レポート

        Raises:
            NotFoundError: ディレクトリが存在しない場合
        """
        logger.info(f"Scanning started: {root}")

        scanner = FileScanner(
            root,
            pattern=self.config.file_glob,
            exclude_dirs=set(self.config.exclude_dirs)
        )
        paths = list(scanner.scan())
        logger.info(f"Found {len(paths)} matching files")

        symbols, read_warnings = self.extractor.extract_all(paths)
        result = self.classifier.classify(symbols)

        report = self.reporter.build_report(
            symbols,
            result,
            warnings=scanner.warnings + read_warnings,
            files_scanned=len(paths)
        )

        self.stats = ScanStats(
            files=len(paths),
            symbols=len(symbols),
            leftover=len(report.leftover),
            leaks=len(report.leaks),
            warnings=len(report.warnings)
        )
        self._log_statistics()
        return report

    def _log_statistics(self) -> None:
        """スキャン統計をログ出力する。"""
        logger.info("=" * 50)
        logger.info("Scan Statistics:")
        logger.info(f"  Files scanned: {self.stats.files}")
        logger.info(f"  Symbols: {self.stats.symbols}")
        logger.info(f"  Leftover: {self.stats.leftover}")
        logger.info(f"  Possible leaks: {self.stats.leaks}")
        logger.info(f"  Warnings: {self.stats.warnings}")
        logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    """コマンドライン引数パーサーを作成する。"""
    parser = argparse.ArgumentParser(
        prog="obs-memleak-check",
        description=(
            "Report *_create calls that have no matching "
            "*_release/*_destroy call in a source tree."
        )
    )
    parser.add_argument(
        "directory",
        nargs="?",
        help="Directory to check, relative to the anchor (prompted if omitted)"
    )
    parser.add_argument(
        "-c", "--config",
        help="YAML configuration file"
    )
    parser.add_argument(
        "--anchor",
        help=(
            "Base directory the target is resolved against "
            "(default: current directory; use .. for a checkout next to the tool)"
        )
    )
    parser.add_argument(
        "--prefix",
        help="Symbol prefix to extract (default: obs_)"
    )
    parser.add_argument(
        "--glob",
        dest="file_glob",
        help="Glob of files to scan, relative to the target (default: src/**/*.rs)"
    )
    parser.add_argument(
        "--rules",
        help="YAML file with the ordered create/release rule list"
    )
    parser.add_argument(
        "-j", "--jobs",
        type=int,
        dest="max_workers",
        help="Number of files read in parallel"
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=["text", "json"],
        help="Report format on stdout"
    )
    parser.add_argument(
        "--no-fail-on-leaks",
        action="store_true",
        help="Exit with status 0 even when leaks are found"
    )
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print the effective configuration as YAML and exit"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file"
    )
    return parser


def _load_config(args: argparse.Namespace) -> Config:
    """設定ファイルとコマンドライン引数から設定を作成する。

    優先順位はコマンドライン引数、環境変数、設定ファイルの順。
    """
    config = Config.from_yaml(args.config) if args.config else Config()
    config.apply_environment()

    if args.directory:
        config.target = args.directory
    for key in ("anchor", "prefix", "file_glob", "max_workers", "output_format", "log_file"):
        value = getattr(args, key)
        if value is not None:
            setattr(config, key, value)
    if args.no_fail_on_leaks:
        config.fail_on_leaks = False
    if args.verbose:
        config.log_level = "DEBUG"

    return config


def _prompt_for_directory() -> Optional[str]:
    """対象ディレクトリを対話的に問い合わせる。"""
    try:
        answer = input(PROMPT)
    except EOFError:
        return None
    return answer.strip() or None


def main(argv: Optional[List[str]] = None) -> int:
    """メインエントリーポイント。

    Args:
        argv: コマンドライン引数（省略時はsys.argv）

    Returns:
        終了コード
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = _load_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FATAL

    setup_logging(level=config.log_level, log_file=config.log_file)

    if args.print_config:
        sys.stdout.write(config.to_yaml())
        return EXIT_OK

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return EXIT_FATAL

    if not config.target:
        config.target = _prompt_for_directory()
    if not config.target:
        print("No directory provided.", file=sys.stderr)
        return EXIT_FATAL

    try:
        rules = (
            RulesLoader().load_from_yaml(args.rules)
            if args.rules
            else config.build_rules()
        )
        checker = LeakChecker(config, rules)
        report = checker.run(config.resolve_target())
    except (ConfigError, PatternError, NotFoundError) as e:
        logger.error(f"Fatal error: {e}")
        return EXIT_FATAL
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return EXIT_FATAL

    reporter = checker.reporter
    if config.output_format == "json":
        sys.stdout.write(reporter.render_json(report))
    else:
        sys.stdout.write(reporter.render(report))

    warnings_text = reporter.render_warnings(report)
    if warnings_text:
        sys.stderr.write(warnings_text)

    return reporter.exit_code(report, fail_on_leaks=config.fail_on_leaks)


if __name__ == "__main__":
    sys.exit(main())
