"""Shared pytest fixtures for campusmail tests."""

import os

import pytest

from campusmail.cache import CategoryCache
from campusmail.classifier.engine import KeywordClassifier
from campusmail.config.rules import load_rule_book, rule_book_from_dict
from campusmail.config.settings import ClassifierSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Ensure no CAMPUSMAIL_* settings leak in from the host environment."""
    for key in list(os.environ):
        if key.startswith("CAMPUSMAIL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(scope="session")
def rule_book():
    """The packaged categories.yaml rule book."""
    return load_rule_book()


@pytest.fixture
def settings():
    return ClassifierSettings()


@pytest.fixture
def classifier(rule_book, settings):
    return KeywordClassifier(cache=CategoryCache.preloaded(rule_book), settings=settings)


@pytest.fixture
def make_classifier():
    """Build a classifier over an inline rule document."""
    def _make(document, **settings_overrides):
        book = rule_book_from_dict(document, source="inline")
        return KeywordClassifier(
            cache=CategoryCache.preloaded(book),
            settings=ClassifierSettings(**settings_overrides),
        )
    return _make


@pytest.fixture
def rules_file(tmp_path):
    """Write a small rule file and return its path."""
    path = tmp_path / "rules.yaml"
    path.write_text(
        "categories:\n"
        "  Library:\n"
        "    priority: normal\n"
        "    primary_keywords: [\"library\", \"overdue\"]\n"
        "    secondary_keywords: [\"book\"]\n"
        "category_weights:\n"
        "  Library: 1.0\n",
        encoding="utf-8",
    )
    return path
