# services/i18n.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

import yaml
from loguru import logger

LANG_DIR = Path(__file__).resolve().parent / "lang"
FALLBACK_LANG = "en"


def normalize_lang(lang: str | None) -> str:
    """
    Normalisiert Sprachangaben auf 'de' oder 'en'.
    Akzeptiert 'de', 'de-DE', 'DE', 'en', 'en-US', etc.
    """
    if not lang:
        return "de"
    l = str(lang).strip().lower()
    return "de" if l.startswith("de") else "en"


@lru_cache(maxsize=8)
def load_messages(lang: str, lang_dir: str = str(LANG_DIR)) -> Dict[str, str]:
    path = Path(lang_dir) / f"{lang}.yml"
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        logger.warning(f"No language file for {lang}: {path}")
        return {}
    return {str(k): str(v) for k, v in data.items()}


class Translator:
    """Looks up messages by key; ``{0}``, ``{1}`` ... are replaced positionally."""

    def __init__(self, lang: str | None = None, messages: Optional[Dict[str, str]] = None) -> None:
        self.lang = normalize_lang(lang)
        if messages is not None:
            self._messages = dict(messages)
        else:
            self._messages = dict(load_messages(FALLBACK_LANG))
            self._messages.update(load_messages(self.lang))

    def __call__(self, key: str, *args: object) -> str:
        return self.msg(key, *args)

    def msg(self, key: str, *args: object) -> str:
        text = self._messages.get(key)
        if text is None:
            return f"[translate:{key}]"
        for i, arg in enumerate(args):
            text = text.replace("{%d}" % i, str(arg))
        return text
