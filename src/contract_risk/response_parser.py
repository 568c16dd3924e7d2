"""Parse the language model's free-form reply into structured insights.

The model is asked for four numbered sections (Summary, Key Findings,
Recommendations, Critical Warnings) but does not always follow the
requested layout. Each section is looked up with an ordered list of
heading formats; the first format whose heading is present wins:

1. ``1. Summary``   numbered with a period
2. ``1) Summary``   numbered with a parenthesis
3. ``**Summary**``  bold markdown heading

A section's content runs from its heading to the next heading of the same
format (or the end of the reply). Anything on the heading line after a
colon (``**Summary:** text``) belongs to the content. Sections that
cannot be found are left empty.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from .models import AIInsights

_SECTION_LABELS = r"(?:Summary|Key\s+Findings|Recommendations?|(?:Critical\s+)?Warnings?)"

# Optional markdown heading hashes in front of any heading
_LEAD = r"[ \t]*(?:#+[ \t]*)?"

_BULLET_RE = re.compile(r"^(?:[-*•](?!\*)|\d+\.)\s*(.*)$")
_SUMMARY_BULLET_RE = re.compile(r"^[-*•]\s*")

# A line holding nothing but a bold label, e.g. "**Heading:**"
_BOLD_HEADING_RE = re.compile(r"^\*\*[^*]+\*\*:?\s*$")
_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")


@dataclass(frozen=True)
class HeadingFormat:
    """One way of writing section headings.

    Attributes:
        name: Short identifier, for debugging.
        heading: Builds the regex prefix for section ``index`` and label
            regex ``label``.
        next_heading: Regex (without the leading newline) that marks the
            start of any following section in this format.
    """

    name: str
    heading: Callable[[int, str], str]
    next_heading: str

    def find(self, response: str, index: int, label: str) -> Optional[str]:
        """Return the raw content of the section, or None if its heading is absent."""
        regex = re.compile(
            rf"^{self.heading(index, label)}\b(?P<rest>[^\n]*)"
            rf"(?P<body>.*?)(?=\n{self.next_heading}|\Z)",
            re.IGNORECASE | re.MULTILINE | re.DOTALL,
        )
        match = regex.search(response)
        if match is None:
            return None

        inline = ""
        rest = match.group("rest")
        if ":" in rest:
            inline = rest.split(":", 1)[1].strip(" \t*")
        return f"{inline}\n{match.group('body')}".strip()


DEFAULT_FORMATS: tuple[HeadingFormat, ...] = (
    HeadingFormat(
        name="numbered-period",
        heading=lambda i, label: rf"{_LEAD}(?:\*\*)?{i}\.[ \t]*(?:\*\*)?[ \t]*{label}",
        next_heading=rf"{_LEAD}(?:\*\*)?\d\.[ \t]*(?:\*\*)?[ \t]*{_SECTION_LABELS}\b",
    ),
    HeadingFormat(
        name="numbered-paren",
        heading=lambda i, label: rf"{_LEAD}(?:\*\*)?{i}\)[ \t]*(?:\*\*)?[ \t]*{label}",
        next_heading=rf"{_LEAD}(?:\*\*)?\d\)[ \t]*(?:\*\*)?[ \t]*{_SECTION_LABELS}\b",
    ),
    HeadingFormat(
        name="bold",
        heading=lambda i, label: rf"{_LEAD}\*\*[ \t]*{label}",
        next_heading=rf"{_LEAD}\*\*",
    ),
)


def clean_summary(text: str) -> str:
    """Strip one leading bullet marker from summary text."""
    return _SUMMARY_BULLET_RE.sub("", text.strip(), count=1).strip()


def extract_bullet_points(text: str) -> list[str]:
    """Turn a section block into list items.

    Bulleted lines (``-``, ``*``, ``•`` or ``1.``) contribute the text after
    the marker; other non-empty lines are kept as they are. A line that is
    only a bold label (``**Heading**``) is skipped, while bold-led items
    such as ``**Liability:** uncapped`` are kept with the ``**`` removed.
    Empty items are dropped.
    """
    items: list[str] = []
    for line in text.split("\n"):
        line = line.strip()
        if not line or _BOLD_HEADING_RE.match(line):
            continue
        bullet = _BULLET_RE.match(line)
        item = _BOLD_RE.sub(r"\1", bullet.group(1) if bullet else line).strip()
        if item:
            items.append(item)
    return items


@dataclass(frozen=True)
class _Field:
    attr: str
    index: int
    label: str
    extract: Callable[[str], object]


_FIELDS: tuple[_Field, ...] = (
    _Field("summary", 1, r"Summary", clean_summary),
    _Field("key_findings", 2, r"Key\s+Findings", extract_bullet_points),
    _Field("recommendations", 3, r"Recommendations?", extract_bullet_points),
    _Field("warnings", 4, r"(?:Critical\s+)?Warnings?", extract_bullet_points),
)


class ResponseParser:
    """Parse model replies into ``AIInsights``.

    Example::

        insights = ResponseParser().parse(
            "1. Summary\\nA SaaS agreement.\\n2. Key Findings\\n- Auto-renews"
        )
        insights.summary       # "A SaaS agreement."
        insights.key_findings  # ["Auto-renews"]

    Args:
        formats: Heading formats to try, in order. New formats can be
            appended without touching the existing ones.
    """

    def __init__(self, formats: Sequence[HeadingFormat] = DEFAULT_FORMATS) -> None:
        self.formats = tuple(formats)

    def parse(self, response: str) -> AIInsights:
        """Extract the four sections; unknown layouts give empty fields."""
        insights = AIInsights()
        if not response:
            return insights

        response = response.replace("\r\n", "\n")
        for field in _FIELDS:
            for fmt in self.formats:
                content = fmt.find(response, field.index, field.label)
                if content is not None:
                    setattr(insights, field.attr, field.extract(content))
                    break
        return insights
