"""
Notify Service - localized chat messages

Responsibilities:
- Load the (language, key) message catalog once at startup
- Render messages with the configured chat prefix
- Deliver change notifications to privileged members only
"""

from .catalog import MessageCatalog, FALLBACK_LANGUAGE
from .notifier import Notifier

__all__ = ["MessageCatalog", "Notifier", "FALLBACK_LANGUAGE"]
