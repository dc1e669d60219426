"""
Evaluation order for the per-category loop.

Categories run high -> normal -> low tier. Inside the high tier the order
comes from a numeric key instead of an ad hoc comparator:
  1. categories whose float signature matches the sender, by precedence
     (Promotions, Whats happening, HOD)
  2. tie_rank: HOD, Professor, everything else, Other last
  3. configured order
Normal and low tiers keep configured order.
"""

from typing import List, Mapping, Optional, Sequence, Tuple

from campusmail.classifier.profiles import CategoryProfile, SenderContext, profile_for
from campusmail.config.rules import Priority, RuleBook

_TIER_INDEX = {Priority.HIGH: 0, Priority.NORMAL: 1, Priority.LOW: 2}


def ranking_key(
    position: int,
    priority: Priority,
    profile: CategoryProfile,
    ctx: SenderContext,
) -> Tuple[int, int, int, int, int]:
    tier = _TIER_INDEX[priority]
    if priority is not Priority.HIGH:
        return (tier, 0, 0, 0, position)

    floated = profile.float_signature is not None and profile.float_signature.matches(ctx)
    if floated:
        return (tier, 0, profile.float_precedence, profile.tie_rank, position)
    return (tier, 1, 0, profile.tie_rank, position)


def evaluation_order(
    names: Sequence[str],
    rule_book: RuleBook,
    sender: Optional[str],
    profiles: Optional[Mapping[str, CategoryProfile]] = None,
) -> List[str]:
    """Order configured category names for evaluation. Unconfigured names are dropped."""
    ctx = SenderContext.from_sender(sender)
    keyed = []
    for position, name in enumerate(names):
        rule_set = rule_book.get(name)
        if rule_set is None:
            continue
        key = ranking_key(position, rule_set.priority, profile_for(name, profiles), ctx)
        keyed.append((key, name))
    keyed.sort()
    return [name for _, name in keyed]
