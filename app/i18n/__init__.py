# -*- coding: utf-8 -*-
"""
User-visible text.
No hardcoded announcement or reply strings in logic.

Language resolution:
- If language not in LANGUAGES → use DEFAULT_LANGUAGE (en)
- If key missing → return key (safe fallback, never crash)
"""

import logging

from . import en

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"

LANGUAGES = {
    "en": en.LANG,
}


def get_text(key: str, language: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Get text for key.

    Args:
        key: Dot-separated key (e.g. announce.member_joined)
        language: Language code
        **kwargs: Format placeholders (e.g. total=5 for {total})

    Returns:
        Formatted string. Never raises.
    """
    lang_dict = LANGUAGES.get(language, LANGUAGES[DEFAULT_LANGUAGE])
    text = lang_dict.get(key)
    if text is None:
        logger.error("I18N missing key: %s", key)
        return key
    if not kwargs:
        return text
    try:
        return text.format(**kwargs)
    except (KeyError, IndexError, ValueError) as e:
        logger.error("I18N format error for key=%s: %s", key, e)
        return text


__all__ = ["get_text", "LANGUAGES", "DEFAULT_LANGUAGE"]
