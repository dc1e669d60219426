"""Background services for campusmail."""

from campusmail.services.hot_reload import RulesReloader

__all__ = ["RulesReloader"]
