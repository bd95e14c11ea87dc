"""Localization — nested locale tables with dotted-key lookup.

Tables are loaded once from ``trend_analyzer/locales/<lang>.json``. A missing
key never raises: the key itself is returned and a warning is logged.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from ..constants import DEFAULT_LANGUAGE, LANGUAGES

logger = logging.getLogger(__name__)

_LOCALES_DIR = Path(__file__).resolve().parent.parent / "locales"


def load_locale_tables(locales_dir: Path = _LOCALES_DIR) -> dict[str, dict[str, Any]]:
    """Read every supported locale table. A missing or broken file yields an empty table."""
    tables: dict[str, dict[str, Any]] = {}
    for lang in LANGUAGES:
        path = locales_dir / f"{lang}.json"
        try:
            tables[lang] = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not load translations for %s from %s: %s", lang, path, exc)
            tables[lang] = {}
    return tables


class Translator:
    def __init__(self, tables: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._tables = dict(tables) if tables is not None else load_locale_tables()

    def translate(
        self,
        key: str,
        language: str = DEFAULT_LANGUAGE,
        replacements: Optional[Mapping[str, Any]] = None,
    ) -> str:
        result: Any = self._tables.get(language, {})
        for part in key.split("."):
            if not isinstance(result, Mapping) or part not in result:
                logger.warning('Translation key "%s" not found for language "%s"', key, language)
                return key
            result = result[part]

        translation = str(result)
        for name, value in (replacements or {}).items():
            translation = translation.replace(f"{{{name}}}", str(value))
        return translation
