"""分類結果とレポートのモデル。"""

from dataclasses import dataclass, field
from typing import FrozenSet, Tuple


@dataclass(frozen=True)
class RuleOutcome:
    """1つのルールを適用した結果。

    flagged と rescued はいずれも生成シンボルで、
    最初に出現した順序を保持する（重複なし）。
    """
    rule_name: str
    flagged: Tuple[str, ...] = ()
    rescued: Tuple[str, ...] = ()
    claimed: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ClassificationResult:
    """全ルール適用後の分類結果。"""
    flagged: Tuple[str, ...] = ()
    claimed: FrozenSet[str] = frozenset()
    outcomes: Tuple[RuleOutcome, ...] = ()

    def is_claimed(self, symbol: str) -> bool:
        return symbol in self.claimed


@dataclass(frozen=True)
class ScanWarning:
    """スキャン中に発生した致命的でない問題。"""
    path: str
    message: str

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.message}

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class Report:
    """最終レポート。"""
    leftover: Tuple[str, ...] = ()
    leaks: Tuple[str, ...] = ()
    warnings: Tuple[ScanWarning, ...] = field(default_factory=tuple)
    files_scanned: int = 0

    @property
    def has_leaks(self) -> bool:
        return len(self.leaks) > 0

    def to_dict(self) -> dict:
        """JSON出力用の辞書に変換する。

        Returns:
            レポートの辞書表現
        """
        return {
            "files_scanned": self.files_scanned,
            "leftover": list(self.leftover),
            "leaks": list(self.leaks),
            "warnings": [w.to_dict() for w in self.warnings],
        }
