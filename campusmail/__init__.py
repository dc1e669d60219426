"""Campusmail: keyword and sender-rule email classifier for campus inboxes."""

from campusmail.service import ClassificationService

__version__ = "0.1.0"

__all__ = ["ClassificationService"]
