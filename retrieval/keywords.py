"""Keyword extraction for the fallback scan.

The extractor splits a query on particles, punctuation and whitespace, then drops
request verbs / politeness markers and single-character tokens. Duplicate tokens
are kept: the fallback scan counts each occurrence separately.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property
from pathlib import Path

import yaml

from retrieval.errors import ConfigurationError

DEFAULT_SEPARATOR_PHRASES = (
    "でしょうか",
    "ですか",
    "ですが",
    "について",
    "に関する",
    "に関して",
    "における",
    "みたいな",
    "から",
    "まで",
    "より",
    "とか",
    "など",
    "って",
)

DEFAULT_SEPARATOR_CHARS = "のをはがにでともへや、。，．・！？!?,.:;：；「」『』（）()[]【】〜~\"'/"

DEFAULT_STOP_TOKENS = frozenset(
    {
        "教えて",
        "教えてください",
        "教えてほしい",
        "教えて欲しい",
        "ください",
        "下さい",
        "お願い",
        "お願いします",
        "知りたい",
        "ほしい",
        "欲しい",
        "ありますか",
        "あります",
        "して",
        "please",
        "tell",
        "me",
        "show",
        "give",
        "about",
        "some",
    }
)

# Generic qualifiers that say little about the subject; kept, but listed last.
DEFAULT_LOW_PRIORITY_TERMS = frozenset(
    {
        "おすすめ",
        "オススメ",
        "お勧め",
        "お薦め",
        "人気",
        "最新",
        "面白い",
        "recommended",
        "popular",
    }
)


@dataclass(frozen=True)
class KeywordLexicon:
    """Separator, stop-token and priority sets used by ``extract_keywords``."""

    separator_phrases: tuple[str, ...] = DEFAULT_SEPARATOR_PHRASES
    separator_chars: str = DEFAULT_SEPARATOR_CHARS
    stop_tokens: frozenset[str] = DEFAULT_STOP_TOKENS
    low_priority_terms: frozenset[str] = DEFAULT_LOW_PRIORITY_TERMS
    min_length: int = 2

    @cached_property
    def split_pattern(self) -> re.Pattern[str]:
        # Longest phrases first so "に関する" wins over the particle "に"
        phrases = sorted((p for p in self.separator_phrases if p), key=len, reverse=True)
        parts = [re.escape(p) for p in phrases]
        if self.separator_chars:
            parts.append(f"[{re.escape(self.separator_chars)}]")
        parts.append(r"\s")
        return re.compile("|".join(parts))

    @classmethod
    def from_yaml(cls, path: str | Path) -> "KeywordLexicon":
        """
        Load a lexicon from YAML. Missing keys keep their defaults.

        Recognised keys: separator_phrases, separator_chars, stop_tokens,
        low_priority_terms, min_length.
        """
        lexicon_path = Path(path)
        if not lexicon_path.exists():
            raise ConfigurationError(f"Keyword lexicon not found at {lexicon_path}")

        try:
            data = yaml.safe_load(lexicon_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid keyword lexicon {lexicon_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid keyword lexicon {lexicon_path}: expected a mapping")

        def string_list(key: str) -> list[str]:
            value = data[key] or []
            if not isinstance(value, list):
                raise ConfigurationError(
                    f"Invalid keyword lexicon {lexicon_path}: '{key}' must be a list, got {type(value).__name__}"
                )
            return [str(item) for item in value]

        kwargs = {}
        if "separator_phrases" in data:
            kwargs["separator_phrases"] = tuple(string_list("separator_phrases"))
        if "separator_chars" in data:
            kwargs["separator_chars"] = str(data["separator_chars"] or "")
        if "stop_tokens" in data:
            kwargs["stop_tokens"] = frozenset(t.lower() for t in string_list("stop_tokens"))
        if "low_priority_terms" in data:
            kwargs["low_priority_terms"] = frozenset(t.lower() for t in string_list("low_priority_terms"))
        if "min_length" in data:
            try:
                kwargs["min_length"] = int(data["min_length"])
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"Invalid keyword lexicon {lexicon_path}: 'min_length' must be an integer, "
                    f"got {data['min_length']!r}"
                ) from e
        return cls(**kwargs)


DEFAULT_LEXICON = KeywordLexicon()


def load_lexicon(path: str | None) -> KeywordLexicon:
    """Return the lexicon at ``path``, or the built-in one when no path is configured."""
    if not path:
        return DEFAULT_LEXICON
    return KeywordLexicon.from_yaml(path)


def extract_keywords(query: str, lexicon: KeywordLexicon = DEFAULT_LEXICON) -> list[str]:
    """
    Extract the meaningful tokens of a query.

    >>> extract_keywords("おすすめの漫画を教えて")
    ['漫画', 'おすすめ']

    Tokens appear in first-occurrence order, with low-priority qualifiers moved
    after the subject tokens. Never raises; returns [] when nothing qualifies.
    """
    if not query:
        return []

    subject: list[str] = []
    qualifiers: list[str] = []
    for raw_token in lexicon.split_pattern.split(query):
        token = raw_token.strip()
        if len(token) < lexicon.min_length:
            continue
        folded = token.lower()
        if folded in lexicon.stop_tokens:
            continue
        if folded in lexicon.low_priority_terms:
            qualifiers.append(token)
        else:
            subject.append(token)
    return subject + qualifiers
