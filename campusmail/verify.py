#!/usr/bin/env python3
"""
campusmail-verify: sanity-check a rule file and optionally classify one email.

    campusmail-verify
    campusmail-verify --rules my_rules.yaml --json
    campusmail-verify --subject "Pool campus drive" --from "TPO <tpo@sharda.ac.in>"
"""

import argparse
import json
import logging
import sys
from collections import Counter
from typing import List, Optional

from campusmail.cache import CategoryCache
from campusmail.classifier.engine import KeywordClassifier
from campusmail.classifier.sender_patterns import compile_sender_regex
from campusmail.config.rules import RuleBook, RuleConfigError, load_rule_book
from campusmail.config.settings import ClassifierSettings

logger = logging.getLogger(__name__)

TIERS = ("primary_keywords", "secondary_keywords", "phrases", "exclusion_keywords")


def find_problems(rule_book: RuleBook) -> List[str]:
    """List rule-book issues that silently weaken classification."""
    problems = []
    for name, rule_set in rule_book.categories.items():
        for tier in TIERS:
            terms = getattr(rule_set, tier)
            if any(not term.strip() for term in terms):
                problems.append(f"{name}: empty term in {tier}")
            duplicates = sorted(t for t, n in Counter(t.lower() for t in terms).items() if n > 1)
            if duplicates:
                problems.append(f"{name}: duplicate {tier}: {', '.join(duplicates)}")
        for pattern in rule_set.patterns.name_patterns:
            if compile_sender_regex(pattern) is None:
                problems.append(f"{name}: malformed name pattern {pattern!r}")
        if name not in rule_book.category_weights:
            problems.append(f"{name}: no category weight (defaults to 1.0)")
    return problems


def summarize(rule_book: RuleBook) -> dict:
    categories = {}
    for name, rule_set in rule_book.categories.items():
        categories[name] = {
            "priority": rule_set.priority.value,
            "active": rule_set.active,
            "keywords": len(rule_set.primary_keywords) + len(rule_set.secondary_keywords),
            "phrases": len(rule_set.phrases),
            "weight": rule_book.weight_for(name),
        }
    return {
        "source": rule_book.source,
        "category_count": len(rule_book),
        "total_keywords": sum(c["keywords"] for c in categories.values()),
        "categories": categories,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="campusmail-verify",
        description="Validate a campusmail rule file and optionally classify one email",
    )
    parser.add_argument('--rules', type=str, default=None, help='Rule file (default: packaged categories.yaml)')
    parser.add_argument('--json', action='store_true', help='Print machine-readable JSON')
    parser.add_argument('--subject', type=str, default=None, help='Email subject')
    parser.add_argument('--from', dest='sender', type=str, default=None, help='Email From header')
    parser.add_argument('--snippet', type=str, default=None, help='Email preview snippet')
    parser.add_argument('--body', type=str, default=None, help='Email body text')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if args.verbose else logging.WARNING,
    )

    try:
        rule_book = load_rule_book(args.rules)
    except (RuleConfigError, OSError) as e:
        print(f"Failed to load rules: {e}", file=sys.stderr)
        return 1

    report = summarize(rule_book)
    report["problems"] = find_problems(rule_book)

    email = {
        "subject": args.subject,
        "from": args.sender,
        "snippet": args.snippet,
        "body": args.body,
    }
    if any(value is not None for value in email.values()):
        classifier = KeywordClassifier(
            cache=CategoryCache.preloaded(rule_book),
            settings=ClassifierSettings.from_env(),
        )
        report["decision"] = classifier.classify(email).to_dict()

    if args.json:
        print(json.dumps(report, indent=2, ensure_ascii=False))
    else:
        print(f"Rules: {report['source']}")
        print(f"Categories: {report['category_count']}")
        for name, info in report["categories"].items():
            print(f"  - {name} [{info['priority']}] keywords={info['keywords']} phrases={info['phrases']}")
        print(f"Total keywords: {report['total_keywords']}")
        if report["problems"]:
            print("Problems:")
            for problem in report["problems"]:
                print(f"  ! {problem}")
        else:
            print("No problems found")
        if "decision" in report:
            print(json.dumps(report["decision"], indent=2, ensure_ascii=False))

    return 1 if report["problems"] else 0


if __name__ == "__main__":
    sys.exit(main())
