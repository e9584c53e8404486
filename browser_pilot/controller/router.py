"""
Literal keyword routing for free-text commands.

This is deliberately plain pattern matching: "go to <x>" / "visit <x>" navigates,
anything mentioning "search" searches for the rest of the text, everything else
is a no-op.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PromptIntent(str, Enum):
    NAVIGATE = 'navigate'
    SEARCH = 'search'
    NONE = 'none'


@dataclass(frozen=True)
class ParsedPrompt:
    intent: PromptIntent
    argument: Optional[str] = None


_NAVIGATE_RE = re.compile(r'\b(?:go\s+to|visit)\s+(\S+)', re.IGNORECASE)
_SEARCH_RE = re.compile(r'\bsearch\b', re.IGNORECASE)
_SEARCH_TRIGGER_RE = re.compile(r'\bsearch(?:\s+for)?\b', re.IGNORECASE)

# punctuation that commonly trails a URL typed at the end of a sentence
_TRAILING_PUNCTUATION = '.,;:!?)"\''


def parse_prompt(prompt: str) -> ParsedPrompt:
    text = ' '.join(prompt.split())

    match = _NAVIGATE_RE.search(text)
    if match:
        target = match.group(1).rstrip(_TRAILING_PUNCTUATION).lstrip('("\'')
        if target:
            return ParsedPrompt(PromptIntent.NAVIGATE, target)

    if _SEARCH_RE.search(text):
        query = ' '.join(_SEARCH_TRIGGER_RE.sub(' ', text, count=1).split())
        return ParsedPrompt(PromptIntent.SEARCH, query)

    return ParsedPrompt(PromptIntent.NONE)
