"""Tests for category-local exclusion rules."""

from campusmail.classifier.exclusion import exclusion_reason, is_excluded
from campusmail.config.rules import CategoryRuleSet, SenderPatterns


def _rules(**patterns):
    return CategoryRuleSet(
        name="Placement",
        exclusion_keywords=("servicenow", "security alert"),
        patterns=SenderPatterns(**patterns),
    )


class TestExclusion:

    def test_keyword_in_subject(self):
        rules = _rules()
        assert exclusion_reason("a@b.com", "Security Alert for your account", "", rules) == "keyword:security alert"

    def test_keyword_in_sender(self):
        assert is_excluded("ServiceNow University <learn@x.com>", "", "", _rules())

    def test_keyword_in_snippet(self):
        assert is_excluded("a@b.com", "Hello", "via ServiceNow portal", _rules())

    def test_body_is_not_checked(self):
        assert not is_excluded("a@b.com", "Hello", "", _rules())

    def test_exclude_domain_contained_in_sender_domain(self):
        rules = _rules(exclude_domains=("google.com",))
        assert exclusion_reason("no-reply@accounts.google.com", "", "", rules) == "domain:google.com"

    def test_exclude_domain_as_full_address(self):
        rules = _rules(exclude_domains=("hod.cse@sharda.ac.in",))
        assert is_excluded("HOD <hod.cse@sharda.ac.in>", "", "", rules)
        assert not is_excluded("Dr. X <x.y@sharda.ac.in>", "", "", rules)

    def test_exclude_name(self):
        rules = _rules(exclude_names=("HOD CSE",))
        assert exclusion_reason("HOD CSE <hod.cse@sharda.ac.in>", "", "", rules) == "name:HOD CSE"

    def test_exclude_name_in_raw_sender(self):
        rules = _rules(exclude_names=("gfg",))
        assert exclusion_reason("updates.gfg@mailer.example", "", "", rules) == "name:gfg"
        assert exclusion_reason("Team <updates.gfg@mailer.example>", "", "", rules) == "sender:gfg"

    def test_keyword_checked_first(self):
        rules = _rules(exclude_domains=("x.com",))
        assert exclusion_reason("servicenow@x.com", "", "", rules) == "keyword:servicenow"

    def test_no_rule_set(self):
        assert exclusion_reason("a@b.com", "", "", None) is None

    def test_exclusion_is_category_local(self, rule_book):
        sender = "ChatGPT <noreply@email.openai.com>"
        assert is_excluded(sender, "", "", rule_book.get("E-Zone"))
        assert not is_excluded(sender, "", "", rule_book.get("Other"))
