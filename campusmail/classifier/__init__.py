"""
Campusmail Classifier

Rule-based email categorisation:
  - sender_patterns: domain/name wildcard matching and keyword counting
  - profiles:        per-category sender identity table
  - keyword_matcher: field-weighted keyword and phrase scoring
  - exclusion:       category-local exclusion rules
  - engine:          KeywordClassifier, the decision pipeline
"""

from campusmail.classifier.engine import ClassificationDecision, KeywordClassifier, SenderMatch
from campusmail.classifier.exclusion import exclusion_reason, is_excluded
from campusmail.classifier.keyword_matcher import MatchResult, match_weighted
from campusmail.classifier.profiles import PROFILES, CategoryProfile, match_specific_sender

__all__ = [
    "CategoryProfile",
    "ClassificationDecision",
    "KeywordClassifier",
    "MatchResult",
    "PROFILES",
    "SenderMatch",
    "exclusion_reason",
    "is_excluded",
    "match_specific_sender",
    "match_weighted",
]
