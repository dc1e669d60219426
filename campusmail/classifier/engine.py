"""
Campusmail Keyword Classifier: rule-based category decision for one email.

Pipeline (first stage to decide wins):
  1. subject names a category outright (identity keyword)  -> 0.98
  2. Professor sender identity at >= 0.88                 -> that confidence
  3. per-category loop in ranked order: exclusion, then sender patterns
     (>= 0.90 returns immediately), then body-only keyword scoring
  4. best tentative match, or the configured fallback

classify() never raises: any fault becomes the fallback decision with
method "keyword-error".
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import List, Mapping, Optional, Sequence

from campusmail.cache import CategoryCache
from campusmail.classifier.exclusion import is_excluded
from campusmail.classifier.keyword_matcher import match_weighted
from campusmail.classifier.profiles import (
    INSTITUTIONAL_SYSTEM_DOMAINS,
    PROFILES,
    CategoryProfile,
    match_specific_sender,
    profile_for,
)
from campusmail.classifier.ranking import evaluation_order
from campusmail.classifier.sender_patterns import (
    domain_matches,
    extract_domain,
    extract_name,
    name_matches,
)
from campusmail.config.rules import CategoryRuleSet, RuleBook, load_rule_book
from campusmail.config.settings import ClassifierSettings

logger = logging.getLogger(__name__)

SUBJECT_KEYWORD_CONFIDENCE = 0.98
SENDER_OVERRIDE_THRESHOLD = 0.88
IMMEDIATE_SENDER_THRESHOLD = 0.90
INSTITUTIONAL_SYSTEM_CONFIDENCE = 0.90

KEYWORD_SCORE_NORMALIZER = 10.0
KEYWORD_CONFIDENCE_CAP = 0.90
KEYWORD_CONFIDENCE_FLOOR = 0.75

# Tentative matches this close to the top one prefer sender evidence.
SENDER_TIE_TOLERANCE = 0.05


@dataclass
class ClassificationDecision:
    label: str
    confidence: float
    method: str
    matched_pattern: Optional[str] = None
    matched_value: Optional[str] = None
    matched_keywords: Optional[List[str]] = None
    matched_phrases: Optional[List[str]] = None
    keyword_score: Optional[float] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class SenderMatch:
    category: str
    confidence: float
    method: str  # specific-sender | sender-domain | sender-name
    matched_pattern: Optional[str] = None
    matched_value: Optional[str] = None


@dataclass
class Candidate:
    """Tentative per-category match collected during the evaluation loop."""
    category: str
    confidence: float
    method: str
    from_sender: bool
    matched_pattern: Optional[str] = None
    matched_value: Optional[str] = None
    matched_keywords: List[str] = field(default_factory=list)
    matched_phrases: List[str] = field(default_factory=list)
    keyword_score: Optional[float] = None


def keyword_confidence(score: float, category_weight: float) -> float:
    """Map a weighted keyword score into the [0.75, 0.90] band."""
    normalized = min(score * category_weight / KEYWORD_SCORE_NORMALIZER, KEYWORD_CONFIDENCE_CAP)
    return round(max(normalized, KEYWORD_CONFIDENCE_FLOOR), 2)


def pick_best(candidates: Sequence[Candidate]) -> Candidate:
    """Highest confidence wins; within SENDER_TIE_TOLERANCE of the top, sender evidence wins."""
    ranked = sorted(candidates, key=lambda c: c.confidence, reverse=True)
    top = ranked[0]
    if top.from_sender:
        return top
    for candidate in ranked[1:]:
        if top.confidence - candidate.confidence > SENDER_TIE_TOLERANCE:
            break
        if candidate.from_sender:
            return candidate
    return top


class KeywordClassifier:
    """Classify emails into campus categories with keyword and sender rules."""

    def __init__(
        self,
        cache: Optional[CategoryCache] = None,
        settings: Optional[ClassifierSettings] = None,
        profiles: Optional[Mapping[str, CategoryProfile]] = None,
    ):
        self.settings = settings or ClassifierSettings()
        if cache is None:
            rules_path = self.settings.rules_path
            cache = CategoryCache(
                loader=lambda: load_rule_book(rules_path),
                ttl=self.settings.cache_ttl_seconds,
            )
        self.cache = cache
        self.profiles = PROFILES if profiles is None else profiles

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def classify(self, email: dict, categories: Optional[Sequence[str]] = None) -> ClassificationDecision:
        """Return one decision for an email.

        Args:
            email: {"subject", "from" (or "sender"), "snippet", "body"}.
            categories: Active category names. Defaults to the rule book's
                active categories in configured order.
        """
        try:
            rule_book = self.cache.get()
            names = list(categories) if categories is not None else rule_book.active_names()
            return self._classify(email or {}, names, rule_book)
        except Exception as e:
            logger.exception("Keyword classification failed")
            return self._fallback("keyword-error", error=str(e))

    def match_sender_patterns(
        self, sender: Optional[str], rule_set: CategoryRuleSet
    ) -> Optional[SenderMatch]:
        """Specific-sender identity, then domain allow-list, then name allow-list."""
        if not sender or rule_set is None:
            return None

        specific = match_specific_sender(
            sender, rule_set.name, rule_set.patterns.name_patterns, self.profiles
        )
        if specific is not None:
            return SenderMatch(
                category=rule_set.name,
                confidence=specific.confidence,
                method="specific-sender",
                matched_pattern=specific.pattern,
                matched_value=sender,
            )

        domain = extract_domain(sender)
        if domain:
            for pattern in rule_set.patterns.sender_domains:
                if domain_matches(domain, pattern):
                    return SenderMatch(
                        category=rule_set.name,
                        confidence=self.settings.sender_domain_confidence,
                        method="sender-domain",
                        matched_pattern=pattern,
                        matched_value=domain,
                    )

        name = extract_name(sender)
        if name:
            for pattern in rule_set.patterns.sender_names:
                if name_matches(name, pattern):
                    return SenderMatch(
                        category=rule_set.name,
                        confidence=self.settings.sender_name_confidence,
                        method="sender-name",
                        matched_pattern=pattern,
                        matched_value=name,
                    )
        return None

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _classify(self, email: dict, names: List[str], rule_book: RuleBook) -> ClassificationDecision:
        subject = email.get("subject") or ""
        sender = email.get("from") or email.get("sender") or ""
        snippet = email.get("snippet") or ""
        body = email.get("body") or ""

        configured = [name for name in names if rule_book.get(name) is not None]
        if not configured:
            return self._fallback("keyword-default")

        decision = self._subject_override(subject, sender, snippet, configured, rule_book)
        if decision is not None:
            return decision

        decision = self._sender_override(subject, sender, snippet, configured, rule_book)
        if decision is not None:
            return decision

        candidates: List[Candidate] = []
        for name in evaluation_order(configured, rule_book, sender, self.profiles):
            rule_set = rule_book.get(name)
            if is_excluded(sender, subject, snippet, rule_set):
                continue

            sender_match = self.match_sender_patterns(sender, rule_set)
            if sender_match is not None:
                if sender_match.confidence >= IMMEDIATE_SENDER_THRESHOLD:
                    logger.info("High-confidence sender match: %s (%.2f)", name, sender_match.confidence)
                    return self._from_sender(sender_match)
                candidates.append(Candidate(
                    category=name,
                    confidence=sender_match.confidence,
                    method=sender_match.method,
                    from_sender=True,
                    matched_pattern=sender_match.matched_pattern,
                    matched_value=sender_match.matched_value,
                ))

            # Subject and snippet were spent on the identity check; score body only.
            body_match = match_weighted("", "", body, rule_set, rule_book.content_weights)
            if body_match.score > 0:
                candidates.append(Candidate(
                    category=name,
                    confidence=keyword_confidence(body_match.score, rule_book.weight_for(name)),
                    method="body-keyword+phrase" if body_match.matched_phrases else "body-keyword",
                    from_sender=False,
                    matched_keywords=body_match.matched_keywords,
                    matched_phrases=body_match.matched_phrases,
                    keyword_score=body_match.score,
                ))

        if not candidates:
            return self._no_match(sender)

        best = pick_best(candidates)
        if best.confidence < self.settings.keyword_minimum_confidence:
            logger.warning("Low confidence match (%.2f) for %r, falling back", best.confidence, subject)
            return self._fallback("keyword-low-confidence-fallback")

        return ClassificationDecision(
            label=best.category,
            confidence=best.confidence,
            method=f"keyword-{best.method}",
            matched_pattern=best.matched_pattern,
            matched_value=best.matched_value,
            matched_keywords=best.matched_keywords or None,
            matched_phrases=best.matched_phrases or None,
            keyword_score=best.keyword_score,
        )

    def _subject_override(self, subject, sender, snippet, names, rule_book) -> Optional[ClassificationDecision]:
        if not subject:
            return None
        for name in names:
            if not profile_for(name, self.profiles).subject_matches(subject):
                continue
            if is_excluded(sender, subject, snippet, rule_book.get(name)):
                continue
            logger.info("Subject category keyword match: %r -> %s", subject, name)
            return ClassificationDecision(
                label=name,
                confidence=SUBJECT_KEYWORD_CONFIDENCE,
                method="subject-category-keyword",
                matched_pattern=f'Subject contains "{name}" keyword',
                matched_value=subject,
            )
        return None

    def _sender_override(self, subject, sender, snippet, names, rule_book) -> Optional[ClassificationDecision]:
        for name in names:
            if not profile_for(name, self.profiles).sender_override:
                continue
            rule_set = rule_book.get(name)
            match = self.match_sender_patterns(sender, rule_set)
            if match is None or match.confidence < SENDER_OVERRIDE_THRESHOLD:
                continue
            if is_excluded(sender, subject, snippet, rule_set):
                continue
            logger.info("%s sender match: %r (%.2f)", name, subject, match.confidence)
            return ClassificationDecision(
                label=name,
                confidence=match.confidence,
                method=f"sender-{match.method}",
                matched_pattern=match.matched_pattern,
                matched_value=sender,
            )
        return None

    def _no_match(self, sender: str) -> ClassificationDecision:
        domain = (extract_domain(sender) or "").lower()
        if domain and any(marker in domain for marker in INSTITUTIONAL_SYSTEM_DOMAINS):
            return ClassificationDecision(
                label=self.settings.fallback_category,
                confidence=INSTITUTIONAL_SYSTEM_CONFIDENCE,
                method="keyword-service-now-other",
            )
        return self._fallback("keyword-no-match")

    def _from_sender(self, match: SenderMatch) -> ClassificationDecision:
        return ClassificationDecision(
            label=match.category,
            confidence=match.confidence,
            method=f"sender-{match.method}",
            matched_pattern=match.matched_pattern,
            matched_value=match.matched_value,
        )

    def _fallback(self, method: str, error: Optional[str] = None) -> ClassificationDecision:
        return ClassificationDecision(
            label=self.settings.fallback_category,
            confidence=self.settings.default_confidence,
            method=method,
            error=error,
        )
