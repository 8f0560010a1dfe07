"""Centralized name normalization and slug utilities.

This module is the single source of truth for:
- Route slugs (brand/model/year/engine URLs, stage anchors)
- Duplicate detection keys used by the catalog importer
- Year-range comparison across vendor spellings ("2018-2021", "2018 → 2021")
- Portable-text (rich text block list) to plain text
"""

import re
import unicodedata
from typing import Any

# Range separators vendors use between two years
_YEAR_SEPARATORS = re.compile(r"(\.\.\.|…|→|–|—|/|-)")


def strip_diacritics(text: str) -> str:
    """Remove accents so that "Škoda" and "Skoda" compare equal.

    Examples:
        >>> strip_diacritics("Citroën")
        'Citroen'
    """
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_key(text: str | None) -> str:
    """Lowercase, strip diacritics and drop every non-alphanumeric character.

    Examples:
        >>> normalize_key("Golf GTI")
        'golfgti'
        >>> normalize_key("golf-gti")
        'golfgti'
        >>> normalize_key("VW")
        'vw'
    """
    if not text:
        return ""
    return re.sub(r"[^a-z0-9]", "", strip_diacritics(text).lower())


def normalize_year_range(text: str | None) -> str:
    """Normalize a year range so separator variants compare equal.

    Examples:
        >>> normalize_year_range("2018 - 2021")
        '2018-2021'
        >>> normalize_year_range("2018→2021")
        '2018-2021'
        >>> normalize_year_range("2018...")
        '2018'
    """
    if not text:
        return ""
    value = strip_diacritics(text).lower()
    value = _YEAR_SEPARATORS.sub("-", value)
    value = re.sub(r"\s+", "", value)
    value = re.sub(r"[^a-z0-9-]", "", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def slugify(text: str | None) -> str:
    """Build a URL slug: lowercase, no diacritics, spaces to single hyphens.

    Examples:
        >>> slugify("Golf GTI")
        'golf-gti'
        >>> slugify("2.0 TDI 150hk")
        '20-tdi-150hk'
        >>> slugify("Škoda")
        'skoda'
    """
    if not text:
        return ""
    value = strip_diacritics(text).lower()
    value = re.sub(r"[^\w\s-]", "", value)
    value = re.sub(r"[\s_]+", "-", value)
    value = re.sub(r"-+", "-", value)
    return value.strip("-")


def slugify_stage(stage_name: str) -> str:
    """Anchor for a stage on an engine page, e.g. "Steg 1" -> "steg-1"."""
    value = re.sub(r"\s+", "-", stage_name.lower())
    return re.sub(r"[^\w-]", "", value)


def names_match(a: str | None, b: str | None) -> bool:
    """Compare two display names ignoring case, whitespace and punctuation."""
    return bool(a) and bool(b) and normalize_key(a) == normalize_key(b)


def slugs_match(name: str | None, slug: str | None) -> bool:
    """Check whether a route slug addresses a display name."""
    return bool(name) and bool(slug) and slugify(name) == slugify(slug)


def plain_text(blocks: Any) -> str:
    """Flatten portable-text blocks to plain text, one line per block."""
    if isinstance(blocks, str):
        return blocks.strip()
    if not isinstance(blocks, list):
        return ""

    lines: list[str] = []
    for block in blocks:
        if not isinstance(block, dict):
            continue
        children = block.get("children")
        if block.get("_type") == "block" and isinstance(children, list):
            lines.append(
                "".join(
                    child.get("text", "")
                    for child in children
                    if isinstance(child, dict) and isinstance(child.get("text"), str)
                )
            )
        elif isinstance(block.get("text"), str):
            lines.append(block["text"])
    return "\n".join(line for line in lines if line).strip()


def text_to_blocks(text: str) -> list[dict[str, Any]]:
    """Wrap plain text into a single portable-text block."""
    return [
        {
            "_type": "block",
            "style": "normal",
            "children": [{"_type": "span", "text": text}],
        }
    ]
