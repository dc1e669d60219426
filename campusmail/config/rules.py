"""
Campusmail Rule Book: per-category keyword and sender rules.

Rules are hand-curated YAML (see categories.yaml) loaded once into an
immutable RuleBook. A reload builds a new RuleBook; nothing mutates one in
place, so classifier threads can share it without locking.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "categories.yaml"


class RuleConfigError(ValueError):
    """Raised when a rule file cannot be turned into a RuleBook."""


class Priority(Enum):
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


@dataclass(frozen=True)
class SenderPatterns:
    """Sender allow-lists and deny-lists for one category."""
    sender_domains: Tuple[str, ...] = ()
    sender_names: Tuple[str, ...] = ()
    exclude_domains: Tuple[str, ...] = ()
    exclude_names: Tuple[str, ...] = ()
    name_patterns: Tuple[str, ...] = ()  # regex, matched against the raw sender


@dataclass(frozen=True)
class CategoryRuleSet:
    name: str
    priority: Priority = Priority.NORMAL
    primary_keywords: Tuple[str, ...] = ()
    secondary_keywords: Tuple[str, ...] = ()
    phrases: Tuple[str, ...] = ()
    exclusion_keywords: Tuple[str, ...] = ()
    patterns: SenderPatterns = field(default_factory=SenderPatterns)
    active: bool = True


@dataclass(frozen=True)
class ContentWeights:
    """Field and term-tier multipliers for weighted keyword scoring."""
    subject: float = 2.0
    snippet: float = 1.5
    body: float = 1.0
    phrase: float = 1.5
    primary_keyword: float = 1.2
    secondary_keyword: float = 1.0


@dataclass(frozen=True)
class RuleBook:
    """Immutable snapshot of every category rule set plus scoring weights."""
    categories: Mapping[str, CategoryRuleSet]
    category_weights: Mapping[str, float] = field(default_factory=lambda: MappingProxyType({}))
    content_weights: ContentWeights = field(default_factory=ContentWeights)
    source: str = ""

    def get(self, name: str) -> Optional[CategoryRuleSet]:
        return self.categories.get(name)

    def weight_for(self, name: str) -> float:
        return self.category_weights.get(name, 1.0)

    def active_names(self) -> List[str]:
        """Active category names in configured order."""
        return [name for name, rules in self.categories.items() if rules.active]

    def __len__(self) -> int:
        return len(self.categories)


def _as_terms(value, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        raise RuleConfigError(f"{where}: expected a list of strings, got {type(value).__name__}")
    return tuple(str(item) for item in value)


def _parse_priority(value, where: str) -> Priority:
    if value is None:
        return Priority.NORMAL
    try:
        return Priority(str(value).strip().lower())
    except ValueError:
        raise RuleConfigError(f"{where}: unknown priority {value!r}") from None


def rule_set_from_dict(name: str, data: Optional[dict]) -> CategoryRuleSet:
    """Build a CategoryRuleSet from one YAML category mapping."""
    data = data or {}
    if not isinstance(data, dict):
        raise RuleConfigError(f"category {name!r}: expected a mapping")

    patterns = data.get("patterns") or {}
    if not isinstance(patterns, dict):
        raise RuleConfigError(f"category {name!r}: patterns must be a mapping")

    where = f"category {name!r}"
    return CategoryRuleSet(
        name=name,
        priority=_parse_priority(data.get("priority"), where),
        primary_keywords=_as_terms(data.get("primary_keywords"), f"{where}.primary_keywords"),
        secondary_keywords=_as_terms(data.get("secondary_keywords"), f"{where}.secondary_keywords"),
        phrases=_as_terms(data.get("phrases"), f"{where}.phrases"),
        exclusion_keywords=_as_terms(data.get("exclusion_keywords"), f"{where}.exclusion_keywords"),
        patterns=SenderPatterns(
            sender_domains=_as_terms(patterns.get("sender_domains"), f"{where}.sender_domains"),
            sender_names=_as_terms(patterns.get("sender_names"), f"{where}.sender_names"),
            exclude_domains=_as_terms(patterns.get("exclude_domains"), f"{where}.exclude_domains"),
            exclude_names=_as_terms(patterns.get("exclude_names"), f"{where}.exclude_names"),
            name_patterns=_as_terms(patterns.get("name_patterns"), f"{where}.name_patterns"),
        ),
        active=bool(data.get("active", True)),
    )


def _parse_weights(raw, where: str) -> Dict[str, float]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise RuleConfigError(f"{where}: expected a mapping")
    try:
        return {str(k): float(v) for k, v in raw.items()}
    except (TypeError, ValueError) as e:
        raise RuleConfigError(f"{where}: {e}") from None


def rule_book_from_dict(document: dict, source: str = "") -> RuleBook:
    """Build a RuleBook from an already-parsed YAML document."""
    if not isinstance(document, dict):
        raise RuleConfigError("rule document must be a mapping")

    raw_categories = document.get("categories") or {}
    if not isinstance(raw_categories, dict):
        raise RuleConfigError("categories must be a mapping of name -> rules")

    categories = {
        str(name): rule_set_from_dict(str(name), data)
        for name, data in raw_categories.items()
    }

    content = _parse_weights(document.get("content_weights"), "content_weights")
    unknown = set(content) - set(ContentWeights.__dataclass_fields__)
    if unknown:
        raise RuleConfigError(f"content_weights: unknown keys {sorted(unknown)}")

    return RuleBook(
        categories=MappingProxyType(categories),
        category_weights=MappingProxyType(_parse_weights(document.get("category_weights"), "category_weights")),
        content_weights=ContentWeights(**content),
        source=source,
    )


def load_rule_book(path: Optional[str] = None) -> RuleBook:
    """Load a RuleBook from YAML. Defaults to the packaged categories.yaml."""
    rules_path = Path(path) if path else DEFAULT_RULES_PATH
    try:
        document = yaml.safe_load(rules_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise RuleConfigError(f"{rules_path}: invalid YAML: {e}") from e

    book = rule_book_from_dict(document, source=str(rules_path))
    logger.info("Rule book loaded: %d categories from %s", len(book), rules_path)
    return book
