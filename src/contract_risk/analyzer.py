"""Main analyzer orchestrating cleanup, the rules pass and AI insights.

The ``ContractAnalyzer`` class is the primary entry point for users. It
accepts contract text (or a file path), validates and normalizes the
text, runs the rules engine and returns an ``AnalysisResult``. AI
insights are a separate, optional step so that a failing model call never
costs the caller the rules-derived result.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date
from pathlib import Path

from .config import Settings, load_rules, load_templates
from .engine import RuleEngine
from .exceptions import TextTooShortError
from .extraction import extract_text
from .llm import InsightGenerator
from .models import AnalysisResult
from .preprocessing import TextNormalizer

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 50


class ContractAnalyzer:
    """High-level contract risk analyzer.

    Example::

        analyzer = ContractAnalyzer()
        result = analyzer.analyze(contract_text)
        print(result.risk_score.overall, result.risk_score.risk_level.value)

        # Optional second pass through the language model
        try:
            result = analyzer.add_insights(result, contract_text)
        except InsightError as exc:
            ...  # result still holds the rules-only analysis

    Args:
        engine: Custom RuleEngine (optional, bundled rules by default).
        normalizer: Custom TextNormalizer (optional).
        insight_generator: Pre-configured InsightGenerator (optional).
            Created lazily from ``settings`` on first use.
        settings: Runtime settings (optional).
    """

    def __init__(
        self,
        engine: RuleEngine | None = None,
        normalizer: TextNormalizer | None = None,
        insight_generator: InsightGenerator | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings
        if engine is None and settings is not None:
            engine = RuleEngine(
                rules=load_rules(settings.rules_path),
                templates=load_templates(settings.templates_path),
            )
        self._engine = engine or RuleEngine()
        self._normalizer = normalizer or TextNormalizer()
        self._insight_generator = insight_generator

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(self, text: str, reference_date: date | None = None) -> AnalysisResult:
        """Run the rules pass on contract text.

        Args:
            text: Raw contract text.
            reference_date: Date relative deadlines are resolved from
                (defaults to today).

        Returns:
            AnalysisResult without AI insights.

        Raises:
            TextTooShortError: If the cleaned text is below the minimum length.
        """
        cleaned = self.prepare(text)
        logger.debug("Analyzing %d characters of cleaned text", len(cleaned))
        result = self._engine.analyze(cleaned, reference_date=reference_date)
        result.metadata.quality_score = self._normalizer.assess_quality(cleaned)
        return result

    def analyze_file(self, file_path: str | Path, reference_date: date | None = None) -> AnalysisResult:
        """Extract text from a file and analyze it.

        Raises:
            FileNotFoundError: If the file does not exist.
            ExtractionError: If the file format is unsupported or unreadable.
            TextTooShortError: If the document has too little text.
        """
        return self.analyze(extract_text(file_path), reference_date=reference_date)

    def prepare(self, text: str) -> str:
        """Normalize text and check it is long enough to analyze.

        Raises:
            TextTooShortError: If the cleaned text is below the minimum length.
        """
        cleaned = self._normalizer.clean(text or "")
        minimum = self._settings.min_text_length if self._settings else MIN_TEXT_LENGTH
        if len(cleaned) < minimum:
            raise TextTooShortError(len(cleaned), minimum)
        return cleaned

    def add_insights(
        self,
        result: AnalysisResult,
        text: str,
        generator: InsightGenerator | None = None,
    ) -> AnalysisResult:
        """Return a copy of ``result`` with AI insights merged in.

        ``result`` itself is never modified, so on failure the caller still
        has the complete rules-only analysis.

        Raises:
            InsightError: If the language-model round trip fails.
        """
        generator = generator or self._get_insight_generator()
        insights = generator.generate(self._normalizer.clean(text), result)
        return dataclasses.replace(result, ai_insights=insights)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_insight_generator(self) -> InsightGenerator:
        if self._insight_generator is None:
            self._insight_generator = InsightGenerator(settings=self._settings)
        return self._insight_generator
