"""Category-local exclusion checks."""

import logging
from typing import Optional

from campusmail.classifier.sender_patterns import extract_address, extract_domain, extract_name
from campusmail.config.rules import CategoryRuleSet

logger = logging.getLogger(__name__)


def exclusion_reason(
    sender: Optional[str],
    subject: Optional[str],
    snippet: Optional[str],
    rule_set: Optional[CategoryRuleSet],
) -> Optional[str]:
    """Return why rule_set's category is ruled out for this email, or None.

    Checks run in a fixed order and stop at the first hit:
      1. exclusion keyword anywhere in sender + subject + snippet
      2. sender domain (or full address) contains an exclude_domains entry
      3. sender name, or the raw sender string, contains an exclude_names entry
    """
    if rule_set is None:
        return None

    all_text = f"{sender or ''} {subject or ''} {snippet or ''}".lower()
    for keyword in rule_set.exclusion_keywords:
        if keyword.lower() in all_text:
            return f"keyword:{keyword}"

    patterns = rule_set.patterns
    # One direction only (sender contains entry): an entry like hod.cse@sharda.ac.in
    # must not exclude every sharda.ac.in sender.
    if patterns.exclude_domains:
        domain = (extract_domain(sender) or "").lower()
        address = extract_address(sender) or ""
        for entry in patterns.exclude_domains:
            lower_entry = entry.lower()
            if domain and (domain == lower_entry or lower_entry in domain):
                return f"domain:{entry}"
            if address and lower_entry in address:
                return f"domain:{entry}"

    if patterns.exclude_names:
        name = (extract_name(sender) or "").lower()
        sender_lower = (sender or "").lower()
        for entry in patterns.exclude_names:
            lower_entry = entry.lower()
            if name and (name == lower_entry or lower_entry in name):
                return f"name:{entry}"
            if lower_entry in sender_lower:
                return f"sender:{entry}"

    return None


def is_excluded(
    sender: Optional[str],
    subject: Optional[str],
    snippet: Optional[str],
    rule_set: Optional[CategoryRuleSet],
) -> bool:
    reason = exclusion_reason(sender, subject, snippet, rule_set)
    if reason is not None:
        logger.debug("Excluded from %s (%s)", rule_set.name, reason)
        return True
    return False
