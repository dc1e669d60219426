"""Classifier tunables loaded from the environment (CAMPUSMAIL_* variables)."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class ClassifierSettings:
    fallback_category: str = "Other"
    default_confidence: float = 0.5
    keyword_minimum_confidence: float = 0.7
    sender_domain_confidence: float = 0.85
    sender_name_confidence: float = 0.80
    cache_ttl_seconds: float = 300.0
    rules_path: Optional[str] = None
    auto_reload: bool = False
    reload_check_interval: float = 2.0

    @classmethod
    def from_env(cls) -> "ClassifierSettings":
        """Read settings from the process environment and an optional .env file."""
        load_dotenv()
        return cls(
            fallback_category=os.getenv("CAMPUSMAIL_FALLBACK_CATEGORY", "Other"),
            default_confidence=float(os.getenv("CAMPUSMAIL_DEFAULT_CONFIDENCE", "0.5")),
            keyword_minimum_confidence=float(os.getenv("CAMPUSMAIL_KEYWORD_MIN_CONFIDENCE", "0.7")),
            sender_domain_confidence=float(os.getenv("CAMPUSMAIL_SENDER_DOMAIN_CONFIDENCE", "0.85")),
            sender_name_confidence=float(os.getenv("CAMPUSMAIL_SENDER_NAME_CONFIDENCE", "0.80")),
            cache_ttl_seconds=float(os.getenv("CAMPUSMAIL_CACHE_TTL", "300")),
            rules_path=os.getenv("CAMPUSMAIL_RULES_PATH") or None,
            auto_reload=os.getenv("CAMPUSMAIL_AUTO_RELOAD", "false").lower() == "true",
            reload_check_interval=float(os.getenv("CAMPUSMAIL_RELOAD_CHECK_INTERVAL", "2.0")),
        )
