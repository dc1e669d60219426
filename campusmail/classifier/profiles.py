"""
Per-category identity table.

Each known category gets a CategoryProfile:
  - identity_keywords: short subject terms that name the category outright
  - sender_rule: ordered sender checks giving affirmative, high-confidence
    identity for well-known institutional senders
  - float_signature: sender markers that move the category to the front of
    the high-priority tier
  - tie_rank: fixed order inside the high tier (HOD, Professor, rest, Other)
  - sender_override: may win right after the subject check

Adding a category means adding a row here; the classifier's control flow
does not change.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple

from campusmail.classifier.sender_patterns import (
    compile_sender_regex,
    contains_term,
    extract_domain,
    extract_name,
    extract_professor_title,
)


@dataclass(frozen=True)
class SenderContext:
    """Lower-cased views of one sender string, computed once per email."""
    raw: str
    sender: str
    name: str
    domain: str

    @classmethod
    def from_sender(cls, sender: Optional[str]) -> "SenderContext":
        raw = sender or ""
        return cls(
            raw=raw,
            sender=raw.lower(),
            name=(extract_name(raw) or "").lower(),
            domain=(extract_domain(raw) or "").lower(),
        )


@dataclass(frozen=True)
class SpecificSenderMatch:
    confidence: float
    pattern: str
    detail: Optional[str] = None
    matched: bool = True


@dataclass(frozen=True)
class MarkerCheck:
    """Substring markers over the sender's domain, full string and name.

    Every entry of domain_all must be in the domain. If any *_any list is
    set, at least one of those markers must also hit.
    """
    confidence: float
    pattern: str
    domain_all: Tuple[str, ...] = ()
    domain_any: Tuple[str, ...] = ()
    sender_any: Tuple[str, ...] = ()
    name_any: Tuple[str, ...] = ()

    def match(self, ctx: SenderContext, name_patterns: Sequence[str] = ()) -> Optional[SpecificSenderMatch]:
        if any(marker not in ctx.domain for marker in self.domain_all):
            return None
        if not (self.domain_any or self.sender_any or self.name_any):
            if not self.domain_all:
                return None
            return SpecificSenderMatch(self.confidence, self.pattern, ctx.domain)

        for marker in self.domain_any:
            if marker in ctx.domain:
                return SpecificSenderMatch(self.confidence, self.pattern, ctx.domain)
        for marker in self.sender_any:
            if marker in ctx.sender:
                return SpecificSenderMatch(self.confidence, self.pattern, ctx.raw)
        for marker in self.name_any:
            if marker in ctx.name:
                return SpecificSenderMatch(self.confidence, self.pattern, marker)
        return None


@dataclass(frozen=True)
class TitleCheck:
    """Academic title in the sender, or a configured sender regex."""
    confidence: float
    pattern: str

    def match(self, ctx: SenderContext, name_patterns: Sequence[str] = ()) -> Optional[SpecificSenderMatch]:
        title = extract_professor_title(ctx.raw)
        if title:
            return SpecificSenderMatch(self.confidence, self.pattern, title["title"])
        for raw_pattern in name_patterns:
            regex = compile_sender_regex(raw_pattern)
            if regex is not None and regex.search(ctx.raw):
                return SpecificSenderMatch(self.confidence, self.pattern, raw_pattern)
        return None


@dataclass(frozen=True)
class FloatSignature:
    """Sender markers that move a category to the front of the high tier."""
    sender_any: Tuple[str, ...] = ()
    domain_any: Tuple[str, ...] = ()
    domain_prefix: Tuple[str, ...] = ()

    def matches(self, ctx: SenderContext) -> bool:
        return (
            any(marker in ctx.sender for marker in self.sender_any)
            or any(marker in ctx.domain for marker in self.domain_any)
            or any(ctx.domain.startswith(prefix) for prefix in self.domain_prefix)
        )


@dataclass(frozen=True)
class CategoryProfile:
    identity_keywords: Tuple[str, ...] = ()
    sender_rule: Tuple[object, ...] = ()  # MarkerCheck | TitleCheck, first hit wins
    float_signature: Optional[FloatSignature] = None
    float_precedence: int = 0
    tie_rank: int = 2
    sender_override: bool = False

    def subject_matches(self, subject: Optional[str]) -> bool:
        return any(contains_term(subject, keyword) for keyword in self.identity_keywords)


DEFAULT_PROFILE = CategoryProfile()

HOD_MARKERS = (
    "hod cse", "hod ece", "hod me", "hod ce", "hod ",
    "head of department", "head of dept",
)

PROFESSOR_NAMES = (
    "nishant gupta", "kanika singla", "anubhava srivastava", "kapil kumar", "preeti sharma",
)

PROFESSOR_NAME_INDICATORS = (
    "professor", "dr.", "assistant professor", "associate professor", "faculty",
)


PROFILES: Mapping[str, CategoryProfile] = MappingProxyType({
    "HOD": CategoryProfile(
        identity_keywords=("hod", "head of department", "dept head"),
        sender_rule=(
            MarkerCheck(0.98, "HOD domain", domain_all=("hod.", "sharda.ac.in")),
            MarkerCheck(0.95, "HOD sender", sender_any=HOD_MARKERS, name_any=("hod",)),
        ),
        float_signature=FloatSignature(
            sender_any=("hod cse", "hod ", "head of department", "head of dept"),
            domain_any=("hod.",),
            domain_prefix=("hod",),
        ),
        float_precedence=2,
        tie_rank=0,
    ),
    "NPTEL": CategoryProfile(
        identity_keywords=("nptel", "swayam", "mooc", "online course"),
        sender_rule=(
            MarkerCheck(
                0.95, "NPTEL sender",
                domain_any=("nptel.iitm.ac.in", "nptel.ac.in"),
                sender_any=("onlinecourses@nptel", "swayam.gov.in"),
            ),
        ),
    ),
    "Professor": CategoryProfile(
        identity_keywords=("professor", "assignment", "quiz", "viva", "class test"),
        sender_rule=(
            MarkerCheck(0.95, "Professor name match", name_any=PROFESSOR_NAMES),
            TitleCheck(0.92, "Professor title"),
            MarkerCheck(
                0.88, "Professor domain + name",
                domain_all=("sharda.ac.in",), name_any=PROFESSOR_NAME_INDICATORS,
            ),
        ),
        tie_rank=1,
        sender_override=True,
    ),
    "Placement": CategoryProfile(
        identity_keywords=(
            "placement", "recruitment", "hiring", "internship",
            "campus drive", "off-campus", "pool campus",
        ),
        sender_rule=(
            MarkerCheck(
                0.95, "Placement sender",
                sender_any=(
                    "placement", "recruitment", "career services", "talent acquisition",
                    "campus hiring", "shardainformatics.com",
                ),
            ),
        ),
    ),
    "Promotions": CategoryProfile(
        identity_keywords=("promotions", "promotion", "discount"),
        sender_rule=(
            MarkerCheck(
                0.95, "Promotions sender",
                sender_any=("'promotions' via", '"promotions" via', "promotions' via", "promotions via"),
            ),
            MarkerCheck(
                0.98, "HealthCity/ShardaCare sender",
                domain_any=("shardacare.com",), sender_any=("healthcity",),
            ),
            MarkerCheck(0.90, "Promotions in sender name", name_any=("promotions",)),
        ),
        float_signature=FloatSignature(
            sender_any=("'promotions' via", "promotions via", "promotions' via"),
        ),
        float_precedence=0,
    ),
    "Whats happening": CategoryProfile(
        identity_keywords=(
            "what's happening", "whats happening", "hackathon", "fest", "workshop", "seminar",
        ),
        sender_rule=(
            MarkerCheck(
                0.92, "Whats happening sender",
                sender_any=("'what's happening' via", "what's happening via", "whatshappening@"),
            ),
        ),
        float_signature=FloatSignature(
            sender_any=("what's happening", "whats happening", "batch2022-2023"),
        ),
        float_precedence=1,
    ),
    "E-Zone": CategoryProfile(
        identity_keywords=("e-zone", "ezone", "sharda portal", "student portal"),
        sender_rule=(
            MarkerCheck(
                0.98, "E-Zone sender",
                domain_any=("ezone",),
                sender_any=("ezone@shardauniversity.com", "e-zone online portal"),
            ),
        ),
    ),
    "Other": CategoryProfile(
        sender_rule=(
            MarkerCheck(
                0.95, "ServiceNow domain",
                domain_any=(
                    "service-now.com", "servicenow.com", "nowlearning.com", "signonmail.servicenow.com",
                ),
            ),
            MarkerCheck(0.95, "ServiceNow sender", sender_any=("servicenow university", "nowlearning@")),
            MarkerCheck(
                0.95, "OpenAI/ChatGPT domain",
                domain_any=("email.openai.com", "openai.com", "chatgpt.com"),
            ),
            MarkerCheck(
                0.95, "OpenAI/ChatGPT sender",
                sender_any=("chatgpt", "openai", "noreply@email.openai.com"),
            ),
            MarkerCheck(0.95, "GitHub sender", domain_any=("github.com",), sender_any=("github",)),
        ),
        tie_rank=3,
    ),
})

# Sender domains of institutional systems that have no category of their own.
INSTITUTIONAL_SYSTEM_DOMAINS = ("service-now.com", "servicenow.com", "nowlearning.com")


def profile_for(category_name: str, profiles: Optional[Mapping[str, CategoryProfile]] = None) -> CategoryProfile:
    table = PROFILES if profiles is None else profiles
    return table.get(category_name, DEFAULT_PROFILE)


def match_specific_sender(
    sender: Optional[str],
    category_name: str,
    name_patterns: Sequence[str] = (),
    profiles: Optional[Mapping[str, CategoryProfile]] = None,
) -> Optional[SpecificSenderMatch]:
    """Affirmative sender identity for one category, or None.

    Only the checks of the named category are consulted. A None result says
    nothing about exclusion.
    """
    if not sender or not category_name:
        return None
    ctx = SenderContext.from_sender(sender)
    for check in profile_for(category_name, profiles).sender_rule:
        hit = check.match(ctx, name_patterns)
        if hit is not None:
            return hit
    return None
