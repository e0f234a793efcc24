"""Rule configuration for arcbos_ops."""

from .settings import RuleSet, get_default_rules, load_rules_file

__all__ = ["RuleSet", "get_default_rules", "load_rules_file"]
