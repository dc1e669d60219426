"""Campusmail classification service."""

import logging
from dataclasses import asdict
from typing import Iterable, List, Optional

from campusmail.cache import CategoryCache
from campusmail.classifier.engine import KeywordClassifier
from campusmail.classifier.exclusion import exclusion_reason
from campusmail.classifier.keyword_matcher import match_weighted
from campusmail.classifier.sender_patterns import count_keyword_matches
from campusmail.config.rules import DEFAULT_RULES_PATH, load_rule_book
from campusmail.config.settings import ClassifierSettings
from campusmail.services.hot_reload import RulesReloader

logger = logging.getLogger(__name__)


class ClassificationService:
    """Classify emails against the cached rule book, reloading it when the file changes."""

    def __init__(
        self,
        settings: Optional[ClassifierSettings] = None,
        cache: Optional[CategoryCache] = None,
        classifier: Optional[KeywordClassifier] = None,
        reloader: Optional[RulesReloader] = None,
    ):
        self.settings = settings or ClassifierSettings.from_env()

        if cache is None:
            if classifier is not None:
                cache = classifier.cache
            else:
                rules_path = self.settings.rules_path
                cache = CategoryCache(
                    loader=lambda: load_rule_book(rules_path),
                    ttl=self.settings.cache_ttl_seconds,
                )
        self.cache = cache
        self.classifier = classifier or KeywordClassifier(cache=cache, settings=self.settings)

        if reloader is None and self.settings.auto_reload:
            reloader = RulesReloader(
                paths=[self.settings.rules_path or DEFAULT_RULES_PATH],
                on_change=self.invalidate,
                check_interval=self.settings.reload_check_interval,
            )
        self.reloader = reloader

    def classify(self, email: dict) -> dict:
        """Return the decision for one email as a plain dict."""
        if self.reloader is not None:
            self.reloader.check_and_apply()
        return self.classifier.classify(email).to_dict()

    def classify_many(self, emails: Iterable[dict]) -> List[dict]:
        return [self.classify(email) for email in emails]

    def explain(self, email: dict, category: str) -> dict:
        """Diagnostics for one category: why it would or would not match this email."""
        rule_book = self.cache.get()
        rule_set = rule_book.get(category)
        if rule_set is None:
            return {"category": category, "configured": False}

        subject = email.get("subject") or ""
        sender = email.get("from") or email.get("sender") or ""
        snippet = email.get("snippet") or ""
        body = email.get("body") or ""

        sender_match = self.classifier.match_sender_patterns(sender, rule_set)
        weighted = match_weighted(subject, snippet, body, rule_set, rule_book.content_weights)
        totals = count_keyword_matches(
            f"{subject} {snippet} {body}",
            list(rule_set.primary_keywords) + list(rule_set.secondary_keywords),
        )
        return {
            "category": category,
            "configured": True,
            "excluded_by": exclusion_reason(sender, subject, snippet, rule_set),
            "sender_match": asdict(sender_match) if sender_match else None,
            "weighted_match": weighted.to_dict(),
            "keyword_totals": {
                "count": totals.count,
                "matched": totals.matched,
                "score": totals.score,
            },
        }

    def invalidate(self):
        """Drop the cached rule book; the next classify reloads it."""
        self.cache.invalidate()
