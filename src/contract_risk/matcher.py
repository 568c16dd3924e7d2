"""Pattern matching for configured rule patterns.

Each ``PatternType`` has one matching function, dispatched through
``_MATCHERS``. All matching is case-insensitive. A malformed pattern (an
invalid regular expression, an empty literal, a proximity pattern without
exactly two terms) produces no matches and a logged warning; it never
raises.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from .models import Match, Pattern, PatternType

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LENGTH = 200
DEFAULT_PROXIMITY = 100
ELLIPSIS = "..."


def get_context(text: str, position: int, context_length: int = DEFAULT_CONTEXT_LENGTH) -> str:
    """Return ``context_length`` characters of ``text`` centred on ``position``.

    The window is clipped to the text bounds and marked with ``...`` on
    each side where text was cut off.
    """
    half = context_length // 2
    start = max(0, position - half)
    end = min(len(text), position + half)
    context = text[start:end]
    if start > 0:
        context = ELLIPSIS + context
    if end < len(text):
        context = context + ELLIPSIS
    return context.strip()


def _literal_matches(pattern: Pattern, text: str) -> list[Match]:
    matches: list[Match] = []
    context_length = pattern.context or DEFAULT_CONTEXT_LENGTH
    for value in pattern.values:
        if not value:
            logger.warning("Skipping empty %s value", pattern.type.value)
            continue
        for m in re.finditer(re.escape(value), text, re.IGNORECASE):
            matches.append(Match(m.group(), m.start(), get_context(text, m.start(), context_length)))
    return matches


def _regex_matches(pattern: Pattern, text: str) -> list[Match]:
    try:
        compiled = [re.compile(value, re.IGNORECASE) for value in pattern.values]
    except re.error as exc:
        logger.warning("Skipping invalid regular expression in %r: %s", pattern.values, exc)
        return []

    matches: list[Match] = []
    context_length = pattern.context or DEFAULT_CONTEXT_LENGTH
    for regex in compiled:
        for m in regex.finditer(text):
            # Zero-width hits carry no matched text
            if m.end() > m.start():
                matches.append(
                    Match(m.group(), m.start(), get_context(text, m.start(), context_length))
                )
    return matches


def _proximity_matches(pattern: Pattern, text: str) -> list[Match]:
    if len(pattern.values) != 2 or not all(pattern.values):
        logger.warning("Skipping proximity pattern %r: exactly two terms required", pattern.values)
        return []

    term1, term2 = pattern.values
    distance = pattern.proximity or DEFAULT_PROXIMITY
    context_length = pattern.context or DEFAULT_CONTEXT_LENGTH
    needle = term2.lower()

    matches: list[Match] = []
    for m in re.finditer(re.escape(term1), text, re.IGNORECASE):
        window = text[max(0, m.start() - distance) : min(len(text), m.end() + distance)]
        if needle in window.lower():
            matches.append(Match(m.group(), m.start(), get_context(text, m.start(), context_length)))
    return matches


_MATCHERS: dict[PatternType, Callable[[Pattern, str], list[Match]]] = {
    PatternType.KEYWORD: _literal_matches,
    PatternType.PHRASE: _literal_matches,
    PatternType.REGEX: _regex_matches,
    PatternType.PROXIMITY: _proximity_matches,
}


class PatternMatcher:
    """Evaluate a single ``Pattern`` against a text body.

    Stateless; one instance can be shared between threads.

    Example::

        matcher = PatternMatcher()
        pattern = Pattern(PatternType.KEYWORD, ("indemnify",))
        for match in matcher.match(pattern, contract_text):
            print(match.position, match.context)
    """

    def match(self, pattern: Pattern, text: str) -> list[Match]:
        """Return every match of ``pattern`` in ``text``, in scan order."""
        if not text:
            return []
        return _MATCHERS[pattern.type](pattern, text)
