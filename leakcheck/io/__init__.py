"""Rule loading module."""

from .rules_loader import RulesLoader, DEFAULT_RULES

__all__ = ["RulesLoader", "DEFAULT_RULES"]
