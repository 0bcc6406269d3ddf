"""Content filtering utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable


@dataclass(slots=True, frozen=True)
class FilterResult:
    clean: bool
    display_text: str


@dataclass(slots=True)
class WordFilter:
    """Case-insensitive substring filter that masks banned words."""

    banned_words: set[str]
    mask_char: str = "*"
    _pattern: re.Pattern[str] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        words = sorted({word.lower() for word in self.banned_words if word}, key=len, reverse=True)
        if words:
            self._pattern = re.compile(
                "|".join(re.escape(word) for word in words), re.IGNORECASE
            )

    @classmethod
    def from_iterable(cls, words: Iterable[str], mask_char: str = "*") -> "WordFilter":
        return cls({word.lower() for word in words}, mask_char=mask_char)

    def contains_banned(self, text: str) -> bool:
        if not text or self._pattern is None:
            return False
        return self._pattern.search(text) is not None

    def mask(self, text: str) -> str:
        if not text or self._pattern is None:
            return text
        return self._pattern.sub(lambda match: self.mask_char * len(match.group(0)), text)

    def filter(self, text: str) -> FilterResult:
        if not self.contains_banned(text):
            return FilterResult(clean=True, display_text=text)
        return FilterResult(clean=False, display_text=self.mask(text))
