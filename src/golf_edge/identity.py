"""Order-invariant player identity keys for cross-source joins."""

from __future__ import annotations

import re
import unicodedata

_NON_KEY_CHARS_RE = re.compile(r"[^a-z\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_PARENS_RE = re.compile(r"\([^)]*\)")
_FLAG_RE = re.compile("[\U0001f1e6-\U0001f1ff]")


def fold_to_ascii(text: str) -> str:
    """Decompose accented letters and drop the combining marks (``Å`` -> ``A``)."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if ord(ch) < 128)


def identity_key(name: str | None, *, fold_accents: bool = True) -> str:
    """Canonicalize a person's name into a key invariant to token order.

    ``identity_key("Woods, Tiger") == identity_key("Tiger Woods") == "tiger woods"``.

    With ``fold_accents=False`` non-ASCII letters are stripped outright, which
    reproduces keys written by older feeds ("Åberg" -> "berg").
    """
    if not name:
        return ""
    lowered = name.lower()
    if fold_accents:
        lowered = fold_to_ascii(lowered)
    cleaned = _NON_KEY_CHARS_RE.sub("", lowered)
    collapsed = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if not collapsed:
        return ""
    return " ".join(sorted(collapsed.split(" ")))


def clean_display_name(raw: str | None) -> str:
    """Tidy a feed name for display: drop flags and ``(a)`` notes, reorder "Last, First"."""
    if not raw:
        return ""
    text = _FLAG_RE.sub("", raw)
    text = _PARENS_RE.sub("", text)
    if text.count(",") == 1:
        last, first = (part.strip() for part in text.split(","))
        text = f"{first} {last}" if first and last else (first or last)
    else:
        text = text.replace(",", "")
    return _WHITESPACE_RE.sub(" ", text).strip()
