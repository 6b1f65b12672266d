"""Ingredient name normalization.

Turns a raw ingredient string into the key used for every comparison in the
matching engine. The function is pure and idempotent:
normalize_ingredient(normalize_ingredient(x)) == normalize_ingredient(x).
"""

import re
from typing import Any, Iterable

_DISALLOWED_CHARS = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
# Crude pluralization strip: "tomato s" -> "tomato"
_STANDALONE_S = re.compile(r"\bs\b")


def normalize_ingredient(raw: Any) -> str:
    """Normalize an ingredient name into a comparable key.

    Steps: lowercase, trim, drop everything except word characters, whitespace
    and hyphens, collapse whitespace, remove standalone "s" tokens, then
    collapse and trim again (removing a token can leave a double space).

    Args:
        raw: Raw ingredient name. None or non-string input yields "".

    Returns:
        Normalized key, possibly empty.

    Example:
        >>> normalize_ingredient("  Spring Onion(s)! ")
        'spring onions'
        >>> normalize_ingredient("Tomato 's")
        'tomato'
    """
    if not isinstance(raw, str) or not raw:
        return ""

    key = raw.lower().strip()
    key = _DISALLOWED_CHARS.sub("", key)
    key = _WHITESPACE.sub(" ", key)
    key = _STANDALONE_S.sub("", key)
    return _WHITESPACE.sub(" ", key).strip()


def normalize_query(ingredients: Iterable[Any]) -> list[str]:
    """Normalize a query, dropping empty keys and duplicates (order preserved)."""
    keys = (normalize_ingredient(ingredient) for ingredient in ingredients or [])
    return list(dict.fromkeys(key for key in keys if key))
