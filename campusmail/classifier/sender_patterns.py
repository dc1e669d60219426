"""
Sender and term matching helpers.

Header parsing here is deliberately permissive (regex, not RFC 5322): real
"From" strings are noisy and the only requirement is telling institutional
senders apart.
"""

import functools
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence

logger = logging.getLogger(__name__)

PHRASE_MATCH_SCORE = 2.5
LONG_KEYWORD_LENGTH = 5
LONG_KEYWORD_SCORE = 1.5

_ANGLE_ADDRESS = re.compile(r"<(.+?)>")
_DOMAIN = re.compile(r"@(.+)$")
_DISPLAY_NAME = re.compile(r"^([^<]+)<")

_PAREN_TITLE = re.compile(
    r"\(([^)]*(?:Assistant|Associate)?\s*(?:Professor|Faculty|Prof\.).*?)\)", re.IGNORECASE
)
_NAME_BEFORE_PAREN = re.compile(r"^([^(<]+)")
_DR_NAME = re.compile(r"\b(Dr\.)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)", re.IGNORECASE)
_PROFESSOR_WORD = re.compile(r"(Assistant|Associate)?\s*(?:Professor|Prof\.|Faculty)", re.IGNORECASE)
_DR_ANYWHERE = re.compile(r"Dr\.", re.IGNORECASE)


@dataclass
class TermTally:
    """Occurrence totals for a list of keywords or phrases."""
    count: int = 0
    matched: List[str] = field(default_factory=list)
    score: float = 0.0


# ------------------------------------------------------------------
# Header parsing
# ------------------------------------------------------------------

def extract_domain(sender: Optional[str]) -> Optional[str]:
    """Return the part after '@' of "Name <a@b>" or "a@b", or None."""
    if not sender:
        return None
    angle = _ANGLE_ADDRESS.search(sender)
    address = angle.group(1) if angle else sender
    match = _DOMAIN.search(address)
    return match.group(1).strip() if match else None


def extract_name(sender: Optional[str]) -> Optional[str]:
    """Display name before '<', or everything before '@' when there is none."""
    if not sender:
        return None
    match = _DISPLAY_NAME.match(sender)
    if match:
        return match.group(1).strip()
    return sender.split("@")[0].strip()


def extract_address(sender: Optional[str]) -> Optional[str]:
    """Lower-cased mail address, or None when the sender has no '@'."""
    if not sender:
        return None
    angle = _ANGLE_ADDRESS.search(sender)
    address = (angle.group(1) if angle else sender).strip().lower()
    return address if "@" in address else None


# ------------------------------------------------------------------
# Pattern tests
# ------------------------------------------------------------------

@functools.lru_cache(maxsize=1024)
def _wildcard_regex(pattern: str) -> Pattern:
    body = re.escape(pattern.lower()).replace(r"\*", ".*")
    return re.compile(f"^{body}$", re.IGNORECASE)


def domain_matches(domain: Optional[str], pattern: Optional[str]) -> bool:
    """Exact (case-insensitive) domain match, or '*' wildcard match."""
    if not domain or not pattern:
        return False
    if domain.lower() == pattern.lower():
        return True
    if "*" in pattern:
        return _wildcard_regex(pattern).match(domain) is not None
    return False


def name_matches(name: Optional[str], pattern: Optional[str]) -> bool:
    if not name or not pattern:
        return False
    return pattern.lower() in name.lower()


def matches_exact_email(sender: Optional[str], address: Optional[str]) -> bool:
    if not sender or not address:
        return False
    angle = _ANGLE_ADDRESS.search(sender)
    email = angle.group(1) if angle else sender
    return email.strip().lower() == address.lower()


@functools.lru_cache(maxsize=256)
def compile_sender_regex(pattern: str) -> Optional[Pattern]:
    """Compile a configured sender regex; malformed patterns become None."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        logger.warning("Ignoring malformed sender pattern %r: %s", pattern, e)
        return None


def extract_professor_title(sender: Optional[str]) -> Optional[dict]:
    """Detect an academic title in the sender string.

    Tries, in order: a parenthesised title ("(CSE Associate Professor)"),
    "Dr. First Last", a bare Professor/Faculty word, then "Dr." anywhere.

    Returns:
        {"title", "name", "full_match"} or None.
    """
    if not sender:
        return None

    paren = _PAREN_TITLE.search(sender)
    if paren:
        leading = _NAME_BEFORE_PAREN.match(sender)
        name = leading.group(1).strip() if leading else extract_name(sender)
        return {"title": paren.group(1).strip(), "name": name, "full_match": paren.group(0).strip()}

    doctor = _DR_NAME.search(sender)
    if doctor:
        return {"title": doctor.group(1), "name": doctor.group(2), "full_match": doctor.group(0).strip()}

    if _PROFESSOR_WORD.search(sender):
        return {"title": "Professor", "name": extract_name(sender), "full_match": sender}

    if _DR_ANYWHERE.search(sender):
        return {"title": "Dr.", "name": extract_name(sender), "full_match": sender}

    return None


# ------------------------------------------------------------------
# Term counting
# ------------------------------------------------------------------

@functools.lru_cache(maxsize=4096)
def word_pattern(term: str) -> Pattern:
    """Word-bounded, case-insensitive matcher for a literal term."""
    return re.compile(rf"\b{re.escape(term.lower())}\b", re.IGNORECASE)


def count_occurrences(text: str, term: str) -> int:
    if not text or not term:
        return 0
    return len(word_pattern(term).findall(text))


def contains_term(text: Optional[str], term: str) -> bool:
    """Substring test for multi-word terms, word-bounded for single words."""
    if not text or not term:
        return False
    if " " in term:
        return term.lower() in text.lower()
    return word_pattern(term).search(text) is not None


def count_keyword_matches(text: Optional[str], keywords: Sequence[str]) -> TermTally:
    """Plain keyword totals without field weighting.

    Each occurrence scores 1, or 1.5 for keywords longer than five characters.
    """
    tally = TermTally()
    if not text or not keywords:
        return tally

    for keyword in keywords:
        occurrences = count_occurrences(text, keyword)
        if occurrences:
            tally.matched.append(keyword)
            tally.score += occurrences * (LONG_KEYWORD_SCORE if len(keyword) > LONG_KEYWORD_LENGTH else 1)

    tally.count = len(tally.matched)
    return tally


def match_phrases(text: Optional[str], phrases: Sequence[str]) -> TermTally:
    """Case-insensitive substring counts; each occurrence scores 2.5."""
    tally = TermTally()
    if not text or not phrases:
        return tally

    lower_text = text.lower()
    for phrase in phrases:
        occurrences = lower_text.count(phrase.lower()) if phrase else 0
        if occurrences:
            tally.matched.append(phrase)
            tally.score += occurrences * PHRASE_MATCH_SCORE

    tally.count = len(tally.matched)
    return tally


def calculate_confidence(score: float, base_confidence: float) -> float:
    """Boost a base confidence by up to 0.15 from a keyword score, capped at 0.95."""
    confidence = base_confidence
    if score > 0:
        boost = min(score * 0.02, 0.15)
        confidence = min(confidence + boost, 0.95)
    return round(confidence, 2)
