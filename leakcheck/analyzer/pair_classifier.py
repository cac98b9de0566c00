"""生成/解放ペアの分類モジュール。

各ルールの結果を独立に計算し（evaluate_rule）、ルール順に畳み込んで
最終的なリーク集合を得る（fold_outcomes）。後のルールは前のルールが
検出したシンボルを救済できるため、ルールの順序は結果に影響する。

生成シンボルと解放シンボルの対応付けは近似的なもので、
生成シンボルから "create" を1回だけ取り除いたベース名が
解放シンボルに部分文字列として含まれるかどうかで判定する。
無関係なシンボル同士が一致することもある。
match_base_name が False のルール（例: 全エンコーダ共通の
obs_encoder_release）では、解放候補の存在だけで判定する。
"""

from typing import AbstractSet, Dict, Iterable, List, Sequence
import logging

from ..models.result import ClassificationResult, RuleOutcome
from ..models.rule import PairRule

logger = logging.getLogger(__name__)


CREATE_MARKER = "create"


def base_name(symbol: str) -> str:
    """生成シンボルのベース名を返す。

    Args:
        symbol: 生成シンボル（例: "obs_source_create"）

    Returns:
        最初の "create" を取り除いた文字列（例: "obs_source_"）
    """
    return symbol.replace(CREATE_MARKER, "", 1)


def has_release(
    rule: PairRule,
    symbol: str,
    release_candidates: AbstractSet[str]
) -> bool:
    """生成シンボルに対応する解放シンボルがあるかを判定する。"""
    if not rule.match_base_name:
        return len(release_candidates) > 0

    name = base_name(symbol)
    return any(name in release for release in release_candidates)


def evaluate_rule(rule: PairRule, symbols: Sequence[str]) -> RuleOutcome:
    """1つのルールを全シンボルに適用する。

    Args:
        rule: 適用するルール
        symbols: スキャン順の全シンボル

    Returns:
        ルールの適用結果
    """
    create_candidates = [s for s in symbols if rule.matches_create(s)]
    release_candidates = set(s for s in symbols if rule.matches_release(s))

    flagged: List[str] = []
    rescued: List[str] = []
    seen = set()

    for symbol in create_candidates:
        # 判定はシンボルの文字列のみに依存するため、同じシンボルは一度だけ評価する
        if symbol in seen:
            continue
        seen.add(symbol)

        if has_release(rule, symbol, release_candidates):
            rescued.append(symbol)
        else:
            flagged.append(symbol)

    return RuleOutcome(
        rule_name=rule.name,
        flagged=tuple(flagged),
        rescued=tuple(rescued),
        claimed=frozenset(create_candidates) | frozenset(release_candidates),
    )


def fold_outcomes(outcomes: Iterable[RuleOutcome]) -> ClassificationResult:
    """ルールの適用結果をルール順に畳み込む。

    シンボルごとに最後に判定したルールの結果が優先される。
    一度救済されたシンボルが後のルールで再検出された場合は末尾に追加される。

    Args:
        outcomes: ルール順の適用結果

    Returns:
        分類結果
    """
    outcomes = tuple(outcomes)
    # dictを挿入順序付きの集合として使う
    flagged: Dict[str, None] = {}
    claimed = set()

    for outcome in outcomes:
        for symbol in outcome.flagged:
            flagged.setdefault(symbol, None)
        for symbol in outcome.rescued:
            flagged.pop(symbol, None)
        claimed |= outcome.claimed

    return ClassificationResult(
        flagged=tuple(flagged),
        claimed=frozenset(claimed),
        outcomes=outcomes,
    )


class PairClassifier:
    """順序付きルール一覧でシンボルを分類する。"""

    def __init__(self, rules: Sequence[PairRule]):
        """分類器を初期化する。

        Args:
            rules: 評価順のルール一覧
        """
        self.rules = tuple(rules)

    def classify(self, symbols: Sequence[str]) -> ClassificationResult:
        """全シンボルを分類する。

        Args:
            symbols: スキャン順の全シンボル（重複を含む）

        Returns:
            分類結果
        """
        outcomes = []
        for rule in self.rules:
            outcome = evaluate_rule(rule, symbols)
            logger.debug(
                f"Rule {rule.name}: {len(outcome.flagged)} flagged, "
                f"{len(outcome.rescued)} rescued, {len(outcome.claimed)} claimed"
            )
            outcomes.append(outcome)

        result = fold_outcomes(outcomes)
        logger.info(
            f"Classified {len(symbols)} symbols with {len(self.rules)} rules: "
            f"{len(result.flagged)} possible leaks"
        )
        return result
