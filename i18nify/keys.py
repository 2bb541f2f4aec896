"""Lookup key generation from pinyin romanization."""

from __future__ import annotations

import re
from typing import List, Sequence

from pypinyin import Style, lazy_pinyin

WORD_PATTERN = re.compile(r"[A-Za-z0-9]+")

# (minimum syllable count, characters kept per syllable), highest tier first.
TRUNCATION_TIERS = (
    (16, 1),
    (8, 2),
    (4, 4),
)


def _split_words(chars: str) -> List[str]:
    """Turn a run of non-Chinese text into ASCII words, dropping everything else."""

    return WORD_PATTERN.findall(chars)


def romanize(text: str) -> List[str]:
    """Return tone-free pinyin syllables for ``text``.

    Every Chinese character yields one syllable. Other text contributes its
    ASCII alphanumeric words; whitespace and punctuation contribute nothing.
    """

    if not text:
        return []
    return lazy_pinyin(text, style=Style.NORMAL, errors=_split_words)


def join_syllables(syllables: Sequence[str]) -> str:
    """Concatenate syllables, truncating each according to how many there are."""

    count = len(syllables)
    for minimum, width in TRUNCATION_TIERS:
        if count >= minimum:
            return "".join(syllable[:width] for syllable in syllables)
    return "".join(syllables)


def generate_key(text: str) -> str:
    """Derive the lookup key for a piece of Chinese text."""

    return join_syllables(romanize(text))
