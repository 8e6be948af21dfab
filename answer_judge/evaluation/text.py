"""Pure text heuristics shared by the signals and fallback tiers.

Everything here is deterministic and side-effect free. The matching is
deliberately crude: it only has to be good enough for short, spoken answers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

STOP_WORDS: frozenset[str] = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should",
    "this", "that", "these", "those", "can", "may", "might", "must",
})

FLOW_INDICATORS: tuple[str, ...] = (
    "first", "second", "third", "finally", "therefore",
    "however", "moreover", "furthermore", "additionally",
)

MIN_KEYWORD_LENGTH = 4

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_NON_WORD_RE = re.compile(r"\W+")
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_FLOW_RE = re.compile(r"\b(?:" + "|".join(FLOW_INDICATORS) + r")\b", re.IGNORECASE)
_DEFINITION_RE = re.compile(r"\bis\s+\w+|\bdefin\w+|\bmeans?\b", re.IGNORECASE)

# Checked in order; only the first matching suffix is stripped.
_STEM_SUFFIXES: tuple[str, ...] = ("ing", "ed", "s")


def normalize(text: str) -> str:
    """Lowercase, turn punctuation into spaces, and collapse whitespace."""
    return " ".join(_PUNCTUATION_RE.sub(" ", (text or "").lower()).split())


def normalize_compact(text: str) -> str:
    """Lowercase and delete punctuation outright ("don't" -> "dont")."""
    return _PUNCTUATION_RE.sub("", (text or "").lower()).strip()


def words(text: str) -> list[str]:
    """Lowercase word tokens split on any non-word run, empties dropped."""
    return [w for w in _NON_WORD_RE.split((text or "").lower()) if w]


def word_count(text: str) -> int:
    return len((text or "").split())


def is_stop_word(word: str) -> bool:
    return word.lower() in STOP_WORDS


def extract_keywords(text: str) -> list[str]:
    """Content words longer than three characters, stop-words removed.

    Order of first appearance is preserved and duplicates are dropped.
    """
    seen: dict[str, None] = {}
    for token in normalize(text).split():
        if len(token) < MIN_KEYWORD_LENGTH or is_stop_word(token):
            continue
        seen.setdefault(token, None)
    return list(seen)


def simple_stem(word: str) -> str:
    """Strip one trailing ``ing``, ``ed`` or ``s`` (in that priority)."""
    for suffix in _STEM_SUFFIXES:
        if word.endswith(suffix):
            return word[: -len(suffix)]
    return word


def contains_keyword(text: str, keyword: str) -> bool:
    """Approximate "does *text* mention *keyword*" check.

    True on substring containment in either direction, or when the stemmed
    keyword appears in the text.
    """
    haystack = normalize(text)
    needle = keyword.lower().strip()
    if not needle or not haystack:
        return False
    if needle in haystack or haystack in needle:
        return True
    stem = simple_stem(needle)
    return bool(stem) and stem in haystack


def split_sentences(text: str) -> list[str]:
    """Split on ``.``, ``!`` and ``?`` runs, dropping empty fragments."""
    return [s.strip() for s in _SENTENCE_SPLIT_RE.split(text or "") if s.strip()]


def has_flow_indicators(text: str) -> bool:
    return _FLOW_RE.search(text or "") is not None


def has_definition_pattern(text: str) -> bool:
    """Matches "is <word>", "defin*", "mean"/"means"."""
    return _DEFINITION_RE.search(text or "") is not None


@dataclass(frozen=True)
class StructureProfile:
    """Shape of a piece of text, as seen by the structural signal."""

    sentences: int
    avg_sentence_length: float
    has_flow_indicators: bool
    has_definitions: bool


def analyze_structure(text: str) -> StructureProfile:
    sentences = split_sentences(text)
    avg = (
        sum(len(s.split()) for s in sentences) / len(sentences)
        if sentences
        else 0.0
    )
    return StructureProfile(
        sentences=len(sentences),
        avg_sentence_length=avg,
        has_flow_indicators=has_flow_indicators(text),
        has_definitions=has_definition_pattern(text),
    )
