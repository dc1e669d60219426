"""Tests for campusmail.classifier.sender_patterns and the sender identity table."""

import logging

import pytest

from campusmail.classifier.profiles import match_specific_sender
from campusmail.classifier.sender_patterns import (
    calculate_confidence,
    compile_sender_regex,
    count_keyword_matches,
    domain_matches,
    extract_address,
    extract_domain,
    extract_name,
    extract_professor_title,
    match_phrases,
    matches_exact_email,
    name_matches,
)


class TestHeaderParsing:

    def test_extract_domain_from_display_form(self):
        assert extract_domain("HOD CSE <hod.cse@sharda.ac.in>") == "sharda.ac.in"

    def test_extract_domain_from_bare_address(self):
        assert extract_domain("noreply@email.openai.com") == "email.openai.com"

    def test_extract_domain_without_at(self):
        assert extract_domain("Campus Notices") is None
        assert extract_domain("") is None
        assert extract_domain(None) is None

    def test_extract_name_from_display_form(self):
        assert extract_name("HOD CSE <hod.cse@sharda.ac.in>") == "HOD CSE"

    def test_extract_name_from_bare_address(self):
        assert extract_name("nishant.gupta@sharda.ac.in") == "nishant.gupta"

    def test_extract_address(self):
        assert extract_address("Dr. X <X.Y@Sharda.ac.in>") == "x.y@sharda.ac.in"
        assert extract_address("plain@example.com") == "plain@example.com"
        assert extract_address("No Address") is None

    def test_matches_exact_email(self):
        assert matches_exact_email("HOD <hod.cse@sharda.ac.in>", "HOD.CSE@sharda.ac.in")
        assert not matches_exact_email("HOD <hod.ece@sharda.ac.in>", "hod.cse@sharda.ac.in")
        assert not matches_exact_email(None, "hod.cse@sharda.ac.in")


class TestPatternMatching:

    def test_domain_exact_is_case_insensitive(self):
        assert domain_matches("NPTEL.ac.in", "nptel.ac.in")
        assert not domain_matches("mail.nptel.ac.in", "nptel.ac.in")

    def test_domain_wildcard(self):
        assert domain_matches("mail.nptel.ac.in", "*.nptel.ac.in")
        assert not domain_matches("nptel.ac.in.evil.com", "*.nptel.ac.in")

    def test_wildcard_dot_is_literal(self):
        assert domain_matches("mail.nptel.ac.in", "mail.nptel.*")
        assert not domain_matches("mailXnptel.ac.in", "mail.nptel.*")

    def test_name_matches_substring(self):
        assert name_matches("SU Placement Cell", "placement")
        assert not name_matches("Library Desk", "placement")
        assert not name_matches(None, "placement")

    def test_malformed_regex_is_non_match(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert compile_sender_regex("prof\\.(never-closed") is None
        assert "malformed" in caplog.text.lower()


class TestTermCounting:

    def test_count_keyword_matches_long_keyword_bonus(self):
        tally = count_keyword_matches("Interview tomorrow, bring your resume. Interview at 10.", ["interview", "job"])
        assert tally.count == 1
        assert tally.matched == ["interview"]
        assert tally.score == pytest.approx(3.0)

    def test_count_keyword_matches_short_keyword(self):
        tally = count_keyword_matches("a job and another job", ["job"])
        assert tally.score == pytest.approx(2.0)

    def test_count_keyword_matches_word_boundary(self):
        tally = count_keyword_matches("jobless", ["job"])
        assert tally.count == 0

    def test_match_phrases_counts_substrings(self):
        tally = match_phrases("Campus Drive today. campus drive tomorrow.", ["campus drive", "walk-in"])
        assert tally.count == 1
        assert tally.matched == ["campus drive"]
        assert tally.score == pytest.approx(5.0)

    def test_empty_inputs(self):
        assert count_keyword_matches("", ["job"]).count == 0
        assert match_phrases(None, ["campus drive"]).score == 0


class TestProfessorTitle:

    def test_parenthesised_title(self):
        info = extract_professor_title("Kanika Singla (CSE Associate Professor) <k.s@sharda.ac.in>")
        assert info is not None
        assert "Associate Professor" in info["title"]
        assert info["name"] == "Kanika Singla"

    def test_doctor_name(self):
        info = extract_professor_title("Dr. Preeti Sharma <preeti.sharma@sharda.ac.in>")
        assert info["title"] == "Dr."
        assert info["name"] == "Preeti Sharma"

    def test_no_title(self):
        assert extract_professor_title("Events Team <events@sharda.ac.in>") is None
        assert extract_professor_title(None) is None


class TestCalculateConfidence:

    def test_boost_and_cap(self):
        assert calculate_confidence(0, 0.8) == 0.8
        assert calculate_confidence(2, 0.8) == 0.84
        assert calculate_confidence(100, 0.85) == 0.95


class TestSpecificSender:

    def test_hod_domain(self):
        match = match_specific_sender("Office <office@hod.sharda.ac.in>", "HOD")
        assert match.confidence == 0.98

    def test_hod_display_name(self):
        match = match_specific_sender("HOD CSE <hod.cse@sharda.ac.in>", "HOD")
        assert match.confidence == 0.95

    def test_nptel_domain(self):
        match = match_specific_sender("NPTEL <onlinecourses@nptel.iitm.ac.in>", "NPTEL")
        assert match.confidence == 0.95

    def test_professor_known_name(self):
        match = match_specific_sender("Dr. Nishant Gupta <nishant.gupta@sharda.ac.in>", "Professor")
        assert match.confidence == 0.95

    def test_professor_title(self):
        match = match_specific_sender("Asha Rao (Assistant Professor) <asha.rao@gmail.com>", "Professor")
        assert match.confidence == 0.92

    def test_other_openai(self):
        match = match_specific_sender("noreply@email.openai.com", "Other")
        assert match.confidence == 0.95

    def test_only_named_category_is_consulted(self):
        assert match_specific_sender("noreply@email.openai.com", "HOD") is None

    def test_unknown_category(self):
        assert match_specific_sender("a@b.com", "Library") is None
        assert match_specific_sender(None, "HOD") is None
