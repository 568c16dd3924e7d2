"""Rules engine: contract-type detection, clause detection, missing terms,
obligation extraction and risk scoring.

The engine holds only immutable configuration (rules and templates). The
text under analysis is passed to every method explicitly, so a single
``RuleEngine`` can serve any number of concurrent analyses.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timezone
from typing import Mapping, Optional, Sequence

from .dates import DateResolver
from .matcher import PatternMatcher
from .models import (
    AnalysisResult,
    ContractMetadata,
    ContractTemplate,
    DetectedClause,
    Match,
    MissingTerm,
    Obligation,
    ObligationType,
    RiskBreakdown,
    RiskLevel,
    RiskScore,
    Rule,
    Severity,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Obligation extraction tables
# ---------------------------------------------------------------------------

_OBLIGATION_SPAN = r"\s+([^.;]{10,200})"

# Scanned in this order; results are capped at MAX_OBLIGATIONS overall
OBLIGATION_PATTERNS: list[re.Pattern] = [
    # Modal obligation verbs
    re.compile(r"\b(?:shall|must|will|required to|obligated to)" + _OBLIGATION_SPAN, re.IGNORECASE),
    # Explicit responsibility
    re.compile(r"\b(?:responsible for|responsibility to)" + _OBLIGATION_SPAN, re.IGNORECASE),
    # Payment indicators
    re.compile(r"\b(?:pay|payment of|fee of|charge of)" + _OBLIGATION_SPAN, re.IGNORECASE),
]

# Evaluated top to bottom, first hit wins
OBLIGATION_CLASSIFIERS: tuple[tuple[re.Pattern, ObligationType], ...] = (
    (re.compile(r"\b(?:pay|payment|fee|charge|invoice)\b", re.IGNORECASE), ObligationType.PAYMENT),
    (re.compile(r"\b(?:deliver|provide|submit|send)\b", re.IGNORECASE), ObligationType.DELIVERY),
    (re.compile(r"\b(?:notice|notify|inform)\b", re.IGNORECASE), ObligationType.NOTICE),
    (re.compile(r"\b(?:deadline|due|within|before)\b", re.IGNORECASE), ObligationType.DEADLINE),
)

MAX_OBLIGATIONS = 20

# ---------------------------------------------------------------------------
# Risk scoring tables
# ---------------------------------------------------------------------------

CLAUSE_POINTS: dict[Severity, int] = {
    Severity.CRITICAL: 25,
    Severity.HIGH: 15,
    Severity.MEDIUM: 8,
    Severity.LOW: 3,
}

MISSING_TERM_POINTS: dict[Severity, int] = {
    Severity.CRITICAL: 15,
    Severity.HIGH: 10,
    Severity.MEDIUM: 5,
    Severity.LOW: 2,
}

_CLAUSE_COUNTERS: dict[Severity, str] = {
    Severity.CRITICAL: "critical_issues",
    Severity.HIGH: "high_risk_clauses",
    Severity.MEDIUM: "medium_risk_clauses",
    Severity.LOW: "low_risk_clauses",
}

# (minimum score, level), highest first
RISK_LEVEL_THRESHOLDS: tuple[tuple[int, RiskLevel], ...] = (
    (70, RiskLevel.CRITICAL),
    (50, RiskLevel.HIGH),
    (30, RiskLevel.MEDIUM),
)

MAX_SCORE = 100


def classify_obligation(text: str) -> ObligationType:
    """Classify an obligation span using ``OBLIGATION_CLASSIFIERS``."""
    for pattern, obligation_type in OBLIGATION_CLASSIFIERS:
        if pattern.search(text):
            return obligation_type
    return ObligationType.OTHER


def risk_level_for(score: int) -> RiskLevel:
    """Map an overall score to its risk level."""
    for minimum, level in RISK_LEVEL_THRESHOLDS:
        if score >= minimum:
            return level
    return RiskLevel.LOW


class RuleEngine:
    """Run the rules pass over contract text.

    Example::

        engine = RuleEngine()              # bundled rules and templates
        result = engine.analyze(cleaned_text)
        print(result.risk_score.overall, result.risk_score.risk_level.value)

    Args:
        rules: Rules to evaluate. Defaults to the bundled rule set.
        templates: Contract templates keyed by contract type, in tie-break
            order. Defaults to the bundled templates.
        matcher: Custom PatternMatcher (optional).
    """

    def __init__(
        self,
        rules: Sequence[Rule] | None = None,
        templates: Mapping[str, ContractTemplate] | None = None,
        matcher: PatternMatcher | None = None,
    ) -> None:
        if rules is None or templates is None:
            from .config import load_rules, load_templates

            rules = load_rules() if rules is None else rules
            templates = load_templates() if templates is None else templates

        self.rules: tuple[Rule, ...] = tuple(rules)
        self.templates: dict[str, ContractTemplate] = dict(templates)
        self._matcher = matcher or PatternMatcher()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(self, text: str, reference_date: date | None = None) -> AnalysisResult:
        """Run the complete rules pass.

        Detects the contract type, risky clauses, missing required
        sections and obligations, then scores the result. AI insights are
        left unset; see ``ContractAnalyzer.add_insights``.

        Args:
            text: Normalized contract text.
            reference_date: Date that relative deadlines are resolved
                from. Defaults to today.

        Returns:
            AnalysisResult without AI insights.
        """
        contract_type = self.detect_contract_type(text)
        clauses = self.detect_clauses(text)
        missing_terms = self.check_missing_terms(text, contract_type)
        obligations = self.parse_obligations(text, reference_date)
        risk_score = self.calculate_risk_score(clauses, missing_terms)

        logger.debug(
            "Rules pass: type=%s clauses=%d missing=%d obligations=%d score=%d",
            contract_type,
            len(clauses),
            len(missing_terms),
            len(obligations),
            risk_score.overall,
        )

        now = datetime.now(timezone.utc)
        return AnalysisResult(
            metadata=ContractMetadata(
                detected_type=contract_type,
                confidence=self.type_confidence(text, contract_type),
                word_count=len(text.split()),
                extracted_at=now,
            ),
            risk_score=risk_score,
            detected_clauses=clauses,
            missing_terms=missing_terms,
            obligations=obligations,
            analyzed_at=now,
        )

    def detect_contract_type(self, text: str) -> Optional[str]:
        """Return the contract type whose identifiers best match ``text``.

        The template with the strictly highest identifier count wins; on a
        tie the template listed first is kept. Returns None when no
        identifier matches at all.
        """
        lower = text.lower()
        best_type: Optional[str] = None
        best_count = 0
        for contract_type, template in self.templates.items():
            count = self._count_identifiers(lower, template)
            if count > best_count:
                best_type, best_count = contract_type, count
        return best_type

    def type_confidence(self, text: str, contract_type: Optional[str]) -> float:
        """Percentage of the template's identifiers found in ``text`` (0-100)."""
        template = self.templates.get(contract_type) if contract_type else None
        if template is None or not template.identifiers:
            return 0.0
        matched = self._count_identifiers(text.lower(), template)
        return min(100.0, matched / len(template.identifiers) * 100)

    def detect_clauses(self, text: str) -> list[DetectedClause]:
        """Evaluate every rule; keep rules with at least one match."""
        clauses: list[DetectedClause] = []
        for rule in self.rules:
            matches = self.match_rule(rule, text)
            if matches:
                clauses.append(DetectedClause(rule=rule, matches=matches))
        return clauses

    def match_rule(self, rule: Rule, text: str) -> list[Match]:
        """Collect a rule's matches across its patterns, one per offset.

        When two patterns hit the same character offset the first match
        is kept.
        """
        seen: set[int] = set()
        unique: list[Match] = []
        for pattern in rule.patterns:
            for match in self._matcher.match(pattern, text):
                if match.position not in seen:
                    seen.add(match.position)
                    unique.append(match)
        return unique

    def check_missing_terms(self, text: str, contract_type: Optional[str]) -> list[MissingTerm]:
        """List the template's required sections that ``text`` lacks.

        A section is present when any of its keywords occurs anywhere in
        the text. Unknown or undetected contract types yield an empty list.
        """
        template = self.templates.get(contract_type) if contract_type else None
        if template is None:
            return []

        lower = text.lower()
        missing: list[MissingTerm] = []
        for section in template.required_sections:
            if any(keyword.lower() in lower for keyword in section.keywords):
                continue
            missing.append(
                MissingTerm(
                    id=section.id,
                    name=section.name,
                    importance=section.importance,
                    description=section.description or f"Missing {section.name} section",
                    recommendation=f"Add a {section.name} section to the contract",
                )
            )
        return missing

    def parse_obligations(self, text: str, reference_date: date | None = None) -> list[Obligation]:
        """Extract up to ``MAX_OBLIGATIONS`` obligations in scan order.

        Each span's deadline is its first absolute date, else its first
        relative expression resolved from ``reference_date`` (default:
        today), else None.
        """
        reference = reference_date or date.today()
        obligations: list[Obligation] = []

        for pattern in OBLIGATION_PATTERNS:
            for match in pattern.finditer(text):
                if len(obligations) >= MAX_OBLIGATIONS:
                    return obligations
                span = match.group()
                obligations.append(
                    Obligation(
                        id=f"obligation-{len(obligations) + 1}",
                        type=classify_obligation(span),
                        description=match.group(1).strip(),
                        extracted_text=span,
                        position=match.start(),
                        deadline=self._resolve_deadline(span, reference),
                    )
                )
        return obligations

    def calculate_risk_score(
        self,
        clauses: Sequence[DetectedClause],
        missing_terms: Sequence[MissingTerm],
    ) -> RiskScore:
        """Score detected clauses and missing terms, capped at 100."""
        score = 0
        breakdown = RiskBreakdown()

        for clause in clauses:
            score += CLAUSE_POINTS[clause.severity]
            counter = _CLAUSE_COUNTERS[clause.severity]
            setattr(breakdown, counter, getattr(breakdown, counter) + 1)

        for term in missing_terms:
            score += MISSING_TERM_POINTS[term.importance]
            breakdown.missing_terms += 1

        score = min(MAX_SCORE, score)
        return RiskScore(overall=score, breakdown=breakdown, risk_level=risk_level_for(score))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _count_identifiers(lower_text: str, template: ContractTemplate) -> int:
        return sum(1 for identifier in template.identifiers if identifier.lower() in lower_text)

    @staticmethod
    def _resolve_deadline(span: str, reference: date) -> Optional[date]:
        dates = DateResolver.extract_dates(span)
        if dates:
            return dates[0].date
        relative = DateResolver.extract_relative_time(span)
        if relative:
            first = relative[0]
            return DateResolver.resolve_future_date(first.amount, first.unit, reference)
        return None
