"""
Message Catalog

Maps (language, key) to a chat template. Loaded once at startup from
the bundled YAML file; lookups fall back to English, then to the key.
"""

from pathlib import Path
from typing import Any

import yaml

from server_optimizer.common.exceptions import ConfigError
from server_optimizer.common.logging_setup import get_service_logger

logger = get_service_logger("notify.catalog")

FALLBACK_LANGUAGE = "en"
DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent.parent / "locales" / "messages.yaml"


class MessageCatalog:
    """Localized chat message templates"""

    def __init__(self, messages: dict[str, dict[str, str]]):
        self._messages = messages
        # Case-insensitive lookup of language codes
        self._languages = {lang.lower(): lang for lang in messages}

    @classmethod
    def load(cls, path: Path | str | None = None) -> "MessageCatalog":
        """
        Load the catalog from a YAML file.

        Raises:
            ConfigError: If the file cannot be read or has no English table
        """
        path = Path(path) if path else DEFAULT_CATALOG_PATH
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot load message catalog: {e}", path=str(path)) from e

        if not isinstance(data, dict) or not isinstance(data.get(FALLBACK_LANGUAGE), dict):
            raise ConfigError("Message catalog has no 'en' table", path=str(path))

        messages = {
            str(lang): {str(k): str(v) for k, v in table.items()}
            for lang, table in data.items()
            if isinstance(table, dict)
        }

        logger.info(
            f"Loaded {len(messages)} languages from {path.name}",
            extra={"languages": sorted(messages)},
        )
        return cls(messages)

    @property
    def languages(self) -> list[str]:
        return sorted(self._messages)

    def supports(self, language: str) -> bool:
        return language.lower() in self._languages

    def get(self, key: str, language: str = FALLBACK_LANGUAGE) -> str:
        """Template for key in language, falling back to English, then the key"""
        lang = self._languages.get(language.lower())
        if lang:
            message = self._messages[lang].get(key)
            if message:
                return message

        return self._messages[FALLBACK_LANGUAGE].get(key, key)

    def format(self, key: str, language: str = FALLBACK_LANGUAGE, **params: Any) -> str:
        """Render a template with named parameters"""
        template = self.get(key, language)
        try:
            return template.format(**params)
        except (KeyError, IndexError) as e:
            logger.warning(f"Message '{key}' ({language}) missing parameter {e}")
            return template
