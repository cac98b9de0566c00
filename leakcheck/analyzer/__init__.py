"""呼び出しシンボルの抽出と生成/解放ペアの分類モジュール。"""

from .symbol_extractor import SymbolExtractor, FileReadError, DEFAULT_PREFIX
from .pair_classifier import (
    PairClassifier,
    base_name,
    has_release,
    evaluate_rule,
    fold_outcomes,
)

__all__ = [
    "SymbolExtractor",
    "FileReadError",
    "DEFAULT_PREFIX",
    "PairClassifier",
    "base_name",
    "has_release",
    "evaluate_rule",
    "fold_outcomes",
]
