"""Alef-tolerant matching for category title prefixes.

Arabic writers freely swap the alef glyphs ا أ إ آ, so a category prefix such
as "اسال بابل: " must also match titles typed as "أسأل بابل: ". The prefix is
normalised to bare alefs and every glyph variant is enumerated at the first
few alef positions; a title matches if it starts with any of the variants.
"""

from __future__ import annotations

import itertools
import re

from babel_board.core.settings import settings

BARE_ALEF = "ا"
ALEF_VARIANTS = ("ا", "أ", "إ", "آ")

_ALEF_PATTERN = re.compile("[أإآ]")


def normalize_alef(text: str) -> str:
    """Replace every hamza/madda alef with the bare alef."""
    return _ALEF_PATTERN.sub(BARE_ALEF, text)


def alef_variants(prefix: str, max_positions: int | None = None) -> list[str]:
    """Return every spelling of ``prefix`` reachable by swapping alef glyphs.

    Only the first ``max_positions`` alef positions vary, which caps the
    result at ``4 ** max_positions`` patterns. Order is deterministic and
    duplicates are removed.
    """
    limit = settings.alef_variant_positions if max_positions is None else max_positions
    normalized = normalize_alef(prefix)
    positions = [index for index, char in enumerate(normalized) if char == BARE_ALEF][:limit]
    if not positions:
        return [prefix]

    variants: list[str] = []
    seen: set[str] = set()
    for glyphs in itertools.product(ALEF_VARIANTS, repeat=len(positions)):
        chars = list(normalized)
        for position, glyph in zip(positions, glyphs):
            chars[position] = glyph
        candidate = "".join(chars)
        if candidate not in seen:
            seen.add(candidate)
            variants.append(candidate)
    return variants


def matches_prefix(title: str | None, prefix: str, max_positions: int | None = None) -> bool:
    """Return True if ``title`` starts with any alef variant of ``prefix``."""
    if not title:
        return False
    return any(title.startswith(variant) for variant in alef_variants(prefix, max_positions))
