"""Weighted keyword and phrase scoring for one category."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from campusmail.classifier.sender_patterns import count_occurrences, match_phrases
from campusmail.config.rules import CategoryRuleSet, ContentWeights


@dataclass
class MatchResult:
    score: float = 0.0
    matched_keywords: List[str] = field(default_factory=list)
    matched_phrases: List[str] = field(default_factory=list)

    @property
    def match_count(self) -> int:
        return len(self.matched_keywords) + len(self.matched_phrases)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "matched_keywords": list(self.matched_keywords),
            "matched_phrases": list(self.matched_phrases),
            "match_count": self.match_count,
        }


def _score_tier(
    keywords: Sequence[str],
    fields: Sequence[tuple],
    tier_weight: float,
    result: MatchResult,
):
    for keyword in keywords:
        keyword_score = 0.0
        for text, field_weight in fields:
            occurrences = count_occurrences(text, keyword)
            if occurrences:
                keyword_score += occurrences * tier_weight * field_weight
        if keyword_score > 0:
            result.matched_keywords.append(keyword)
            result.score += keyword_score


def match_weighted(
    subject: Optional[str],
    snippet: Optional[str],
    body: Optional[str],
    rule_set: CategoryRuleSet,
    weights: Optional[ContentWeights] = None,
) -> MatchResult:
    """Score subject/snippet/body against a category's keywords and phrases.

    A keyword adds occurrences x tier weight x field weight for every field
    it appears in, so a term in both subject and body counts twice. Phrases
    are matched once against the concatenated text and scaled by the
    phrase weight.
    """
    weights = weights or ContentWeights()
    subject = subject or ""
    snippet = snippet or ""
    body = body or ""
    fields = (
        (subject, weights.subject),
        (snippet, weights.snippet),
        (body, weights.body),
    )

    result = MatchResult()
    _score_tier(rule_set.primary_keywords, fields, weights.primary_keyword, result)
    _score_tier(rule_set.secondary_keywords, fields, weights.secondary_keyword, result)

    if rule_set.phrases:
        phrases = match_phrases(f"{subject} {snippet} {body}", rule_set.phrases)
        if phrases.count:
            result.matched_phrases.extend(phrases.matched)
            result.score += phrases.score * weights.phrase

    return result
