"""Campusmail configuration: category rule book and classifier settings."""

from campusmail.config.rules import (
    CategoryRuleSet,
    ContentWeights,
    Priority,
    RuleBook,
    RuleConfigError,
    SenderPatterns,
    load_rule_book,
)
from campusmail.config.settings import ClassifierSettings

__all__ = [
    "CategoryRuleSet",
    "ClassifierSettings",
    "ContentWeights",
    "Priority",
    "RuleBook",
    "RuleConfigError",
    "SenderPatterns",
    "load_rule_book",
]
