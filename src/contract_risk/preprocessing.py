"""Text cleanup and extraction-quality scoring for contract text.

Text handed to the analyzer usually comes out of PDF/Word conversion or
OCR and carries the usual damage: ragged whitespace, smart quotes, stray
pipes from table borders, page numbers and separator lines. The
``TextNormalizer`` repairs what it can with plain regex processing and
scores how trustworthy the remaining text looks.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Character substitutions for common OCR misreads, applied in order
_OCR_SUBSTITUTIONS: list[tuple[re.Pattern, str]] = [
    # Isolated zero read in place of a capital O
    (re.compile(r"\b0\b"), "O"),
    # Isolated lowercase L read in place of a capital I
    (re.compile(r"\bl\b"), "I"),
    # Pipe read in place of a capital I
    (re.compile(r"\|"), "I"),
    (re.compile("[\u2018\u2019]"), "'"),
    (re.compile("[\u201c\u201d]"), '"'),
    (re.compile("[\u2013\u2014]"), "-"),
]

# Whole lines that are page furniture rather than contract text
_PAGE_ARTIFACT_PATTERNS: list[re.Pattern] = [
    # Standalone page numbers
    re.compile(r"^[ \t]*\d+[ \t]*$", re.MULTILINE),
    # "Page 3 of 12"
    re.compile(r"^[ \t]*Page[ \t]+\d+[ \t]+of[ \t]+\d+[ \t]*$", re.MULTILINE | re.IGNORECASE),
    # Separator rules
    re.compile(r"^[ \t]*[-_=]{3,}[ \t]*$", re.MULTILINE),
]

# Terms whose presence suggests the text really is a legal document
LEGAL_TERMS: tuple[str, ...] = (
    "agreement",
    "contract",
    "party",
    "shall",
    "terms",
    "conditions",
    "liability",
)

_SPECIAL_CHAR_RE = re.compile(r"[^\w\s.,;:'\"!?-]")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")

MIN_QUALITY_LENGTH = 100
SPECIAL_CHAR_THRESHOLD = 0.05
SINGLE_CHAR_THRESHOLD = 0.1


class TextNormalizer:
    """Clean extracted contract text and assess its quality.

    Example::

        normalizer = TextNormalizer()
        cleaned = normalizer.clean(raw_text)
        quality = normalizer.assess_quality(cleaned)  # 0-100
    """

    def __init__(self, fix_ocr: bool = True, strip_page_artifacts: bool = True) -> None:
        """Initialize the normalizer.

        Args:
            fix_ocr: Apply the OCR character substitution table.
            strip_page_artifacts: Remove page numbers, "Page X of Y" lines
                and separator rules.
        """
        self.fix_ocr = fix_ocr
        self.strip_page_artifacts = strip_page_artifacts

    def clean(self, text: str) -> str:
        """Normalize raw extracted text.

        Processing order:
        1. Line endings to ``\\n``, horizontal whitespace runs to one space
        2. OCR character substitutions
        3. Page artifact removal
        4. Per-line trimming
        5. Three or more consecutive line breaks collapsed to two

        The result is a fixed point: ``clean(clean(x)) == clean(x)``.

        Args:
            text: Raw document text.

        Returns:
            Cleaned text.
        """
        if not text:
            return ""

        text = text.replace("\r\n", "\n").replace("\r", "\n")
        text = re.sub(r"[^\S\n]+", " ", text)

        if self.fix_ocr:
            for pattern, replacement in _OCR_SUBSTITUTIONS:
                text = pattern.sub(replacement, text)

        if self.strip_page_artifacts:
            for pattern in _PAGE_ARTIFACT_PATTERNS:
                text = pattern.sub("", text)

        text = "\n".join(line.strip() for line in text.split("\n"))
        text = re.sub(r"\n{3,}", "\n\n", text)

        return text.strip()

    def assess_quality(self, text: str) -> int:
        """Score extraction quality from 0 (garbage) to 100 (clean legal text).

        Starts at 100 and applies:
        - -30 when the text is shorter than 100 characters
        - -30 when more than 5% of characters are unusual symbols
        - -20 when more than 10% of words are a single character
        - +2 for every distinct legal term present

        Args:
            text: Document text, cleaned or raw.

        Returns:
            Integer score clamped to [0, 100].
        """
        score = 100

        if len(text) < MIN_QUALITY_LENGTH:
            score -= 30

        if text:
            special_rate = len(_SPECIAL_CHAR_RE.findall(text)) / len(text)
            if special_rate > SPECIAL_CHAR_THRESHOLD:
                score -= 30

        words = text.split()
        if words:
            single_rate = sum(1 for w in words if len(w) == 1) / len(words)
            if single_rate > SINGLE_CHAR_THRESHOLD:
                score -= 20

        lower = text.lower()
        score += 2 * sum(1 for term in LEGAL_TERMS if term in lower)

        return max(0, min(100, score))

    def extract_sentences(self, text: str, min_length: int = 10) -> list[str]:
        """Split text into sentences, dropping fragments shorter than ``min_length``."""
        sentences = (s.strip() for s in _SENTENCE_RE.findall(text))
        return [s for s in sentences if len(s) >= min_length]

    @staticmethod
    def word_count(text: str) -> int:
        return len(text.split())
