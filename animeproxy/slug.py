from __future__ import annotations

import re

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(title: str) -> str:
    """Guess the upstream slug for ``title``.

    Accented letters are dropped rather than transliterated ("Épico" -> "pico"),
    matching the keys upstream links and cached entries were built with.
    """
    value = _DISALLOWED.sub("", title.lower()).strip()
    value = _WHITESPACE.sub("-", value)
    return _HYPHENS.sub("-", value).strip("-")
