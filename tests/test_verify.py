"""Tests for the campusmail-verify CLI."""

import json

from campusmail.config.rules import rule_book_from_dict
from campusmail.verify import find_problems, main


class TestVerifyCli:

    def test_packaged_rules_are_clean(self, capsys):
        assert main(["--json"]) == 0
        report = json.loads(capsys.readouterr().out)
        assert report["category_count"] == 8
        assert report["problems"] == []
        assert report["total_keywords"] > 0
        assert "Professor" in report["categories"]

    def test_text_report(self, capsys, rules_file):
        assert main(["--rules", str(rules_file)]) == 0
        out = capsys.readouterr().out
        assert "Categories: 1" in out
        assert "Library [normal] keywords=3 phrases=0" in out
        assert "No problems found" in out

    def test_classifies_given_email(self, capsys):
        code = main(["--json", "--subject", "Meeting", "--from", "HOD CSE <hod.cse@sharda.ac.in>"])
        assert code == 0
        report = json.loads(capsys.readouterr().out)
        assert report["decision"]["label"] == "HOD"

    def test_broken_file(self, capsys, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("categories: [oops", encoding="utf-8")
        assert main(["--rules", str(path)]) == 1
        assert "Failed to load rules" in capsys.readouterr().err

    def test_missing_file(self, tmp_path):
        assert main(["--rules", str(tmp_path / "absent.yaml")]) == 1

    def test_problems_set_exit_code(self, capsys, tmp_path):
        path = tmp_path / "dupes.yaml"
        path.write_text(
            "categories:\n"
            "  Library:\n"
            "    primary_keywords: [\"book\", \"Book\"]\n",
            encoding="utf-8",
        )
        assert main(["--rules", str(path)]) == 1
        out = capsys.readouterr().out
        assert "Library: duplicate primary_keywords: book" in out
        assert "Library: no category weight" in out


class TestFindProblems:

    def test_reports_each_problem_kind(self):
        book = rule_book_from_dict({
            "categories": {
                "Faculty": {
                    "secondary_keywords": ["lab", " "],
                    "patterns": {"name_patterns": ["(unbalanced"]},
                },
            },
            "category_weights": {"Faculty": 1.0},
        })
        problems = find_problems(book)
        assert "Faculty: empty term in secondary_keywords" in problems
        assert "Faculty: malformed name pattern '(unbalanced'" in problems
        assert len(problems) == 2
