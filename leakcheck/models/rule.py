"""生成/解放ペアルールのモデル。"""

from dataclasses import dataclass
from typing import Pattern
import re

from pydantic import BaseModel, Field


class PatternError(Exception):
    """ルールパターンまたはファイルglobが不正な場合のエラー。"""
    pass


def compile_pattern(pattern: str, what: str = "pattern") -> Pattern[str]:
    """正規表現をコンパイルする。

    Args:
        pattern: 正規表現文字列
        what: エラーメッセージに含めるパターンの説明

    Returns:
        コンパイル済みパターン

    Raises:
        PatternError: 正規表現が不正な場合
    """
    try:
        return re.compile(pattern)
    except re.error as e:
        raise PatternError(f"Invalid {what} {pattern!r}: {e}") from e


@dataclass(frozen=True)
class PairRule:
    """1つのリソースライフサイクル規約を表す生成/解放パターンの組。

    パターンはシンボル全体に対して照合する（前方一致ではない）。
    match_base_name が False のルールは共有の解放関数を表し、
    解放候補が1つでもあれば全ての生成候補が解放済みとみなされる。
    """
    name: str
    create_pattern: Pattern[str]
    release_pattern: Pattern[str]
    match_base_name: bool = True

    @classmethod
    def from_strings(
        cls,
        name: str,
        create: str,
        release: str,
        match_base_name: bool = True
    ) -> "PairRule":
        """文字列パターンからルールを生成する。

        Args:
            name: ルール名（ログ出力用）
            create: 生成関数にマッチする正規表現
            release: 解放関数にマッチする正規表現
            match_base_name: ベース名の包含で解放関数を対応付けるかどうか

        Returns:
            PairRuleインスタンス

        Raises:
            PatternError: いずれかのパターンが不正な場合
        """
        return cls(
            name=name,
            create_pattern=compile_pattern(create, f"create pattern of rule '{name}'"),
            release_pattern=compile_pattern(release, f"release pattern of rule '{name}'"),
            match_base_name=match_base_name,
        )

    def matches_create(self, symbol: str) -> bool:
        return self.create_pattern.fullmatch(symbol) is not None

    def matches_release(self, symbol: str) -> bool:
        return self.release_pattern.fullmatch(symbol) is not None

    def __str__(self) -> str:
        return (
            f"{self.name}: {self.create_pattern.pattern} -> "
            f"{self.release_pattern.pattern}"
        )


class RuleSpec(BaseModel):
    """設定ファイルから読み込むルール定義。"""

    name: str = Field(
        default="",
        description="ルール名（省略時は連番から生成）"
    )
    create: str = Field(
        min_length=1,
        description="生成関数のシンボル全体にマッチする正規表現"
    )
    release: str = Field(
        min_length=1,
        description="解放関数のシンボル全体にマッチする正規表現"
    )
    match_base_name: bool = Field(
        default=True,
        description="Falseの場合、解放候補が1つでもあれば生成候補を解放済みとみなす"
    )

    def to_rule(self, index: int = 0) -> PairRule:
        """コンパイル済みのPairRuleに変換する。

        Args:
            index: ルール一覧内の位置（名前が空の場合に使用）

        Returns:
            PairRuleインスタンス
        """
        name = self.name or f"rule-{index + 1}"
        return PairRule.from_strings(
            name, self.create, self.release, self.match_base_name
        )
