"""Data models for contract risk analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class Severity(str, Enum):
    """Ordinal risk weight shared by rule severity and section importance."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RuleCategory(str, Enum):
    """What a rule is looking for."""

    RISK = "risk"
    MISSING = "missing"
    OBLIGATION = "obligation"


class PatternType(str, Enum):
    """Matching strategy of a rule pattern."""

    KEYWORD = "keyword"
    PHRASE = "phrase"
    REGEX = "regex"
    PROXIMITY = "proximity"


class ObligationType(str, Enum):
    """Obligation categories, see ``engine.OBLIGATION_CLASSIFIERS``."""

    PAYMENT = "payment"
    DELIVERY = "delivery"
    NOTICE = "notice"
    DEADLINE = "deadline"
    OTHER = "other"


class Confidence(str, Enum):
    """Confidence tag attached to an extracted date."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    """Risk level derived from the overall score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ---------------------------------------------------------------------------
# Configuration records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Pattern:
    """A single matching pattern belonging to a rule.

    ``values`` holds one or more literals (or regular expressions for
    ``PatternType.REGEX``). A proximity pattern carries exactly two terms.
    ``context`` and ``proximity`` fall back to the matcher defaults when
    unset.
    """

    type: PatternType
    values: tuple[str, ...]
    context: Optional[int] = None
    proximity: Optional[int] = None


@dataclass(frozen=True)
class Rule:
    """A configured detection rule."""

    id: str
    name: str
    category: RuleCategory
    severity: Severity
    patterns: tuple[Pattern, ...]
    description: str
    recommendation: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "severity": self.severity.value,
            "description": self.description,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class RequiredSection:
    """A section a contract of a given type is expected to contain."""

    id: str
    name: str
    importance: Severity
    keywords: tuple[str, ...]
    description: Optional[str] = None


@dataclass(frozen=True)
class ContractTemplate:
    """Reference definition of one contract type."""

    contract_type: str
    identifiers: tuple[str, ...]
    required_sections: tuple[RequiredSection, ...]
    display_name: str = ""


# ---------------------------------------------------------------------------
# Analysis output
# ---------------------------------------------------------------------------


@dataclass
class Match:
    """One occurrence of a pattern in the source text."""

    text: str
    position: int
    context: str

    def to_dict(self) -> dict:
        return {"text": self.text, "position": self.position, "context": self.context}


@dataclass
class DetectedClause:
    """A rule together with its (non-empty) set of matches."""

    rule: Rule
    matches: list[Match]

    @property
    def id(self) -> str:
        return self.rule.id

    @property
    def severity(self) -> Severity:
        return self.rule.severity

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rule": self.rule.to_dict(),
            "severity": self.severity.value,
            "matches": [m.to_dict() for m in self.matches],
        }


@dataclass
class MissingTerm:
    """A required section with no keyword present in the text."""

    id: str
    name: str
    importance: Severity
    description: str
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "importance": self.importance.value,
            "description": self.description,
            "recommendation": self.recommendation,
        }


@dataclass
class ExtractedDate:
    """An absolute calendar date found in text."""

    date: date
    text: str
    position: int
    confidence: Confidence = Confidence.HIGH

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "text": self.text,
            "position": self.position,
            "confidence": self.confidence.value,
        }


@dataclass
class RelativeTime:
    """A relative time expression such as "within 30 days"."""

    amount: int
    unit: str
    text: str
    position: int

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "unit": self.unit,
            "text": self.text,
            "position": self.position,
        }


@dataclass
class Obligation:
    """A required action, payment or deadline extracted from the text."""

    id: str
    type: ObligationType
    description: str
    extracted_text: str
    position: int
    party: str = "unknown"
    deadline: Optional[date] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "description": self.description,
            "party": self.party,
            "deadline": self.deadline.isoformat() if self.deadline else None,
            "extracted_text": self.extracted_text,
            "position": self.position,
        }


@dataclass
class RiskBreakdown:
    """Per-bucket counters behind the overall risk score."""

    critical_issues: int = 0
    high_risk_clauses: int = 0
    medium_risk_clauses: int = 0
    low_risk_clauses: int = 0
    missing_terms: int = 0

    def to_dict(self) -> dict:
        return {
            "critical_issues": self.critical_issues,
            "high_risk_clauses": self.high_risk_clauses,
            "medium_risk_clauses": self.medium_risk_clauses,
            "low_risk_clauses": self.low_risk_clauses,
            "missing_terms": self.missing_terms,
        }


@dataclass
class RiskScore:
    """Aggregate risk score (0-100) with its breakdown and level."""

    overall: int
    breakdown: RiskBreakdown
    risk_level: RiskLevel

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "breakdown": self.breakdown.to_dict(),
            "risk_level": self.risk_level.value,
        }


@dataclass
class ContractMetadata:
    """Contract-type detection results and basic text statistics."""

    detected_type: Optional[str]
    confidence: float
    word_count: int
    extracted_at: datetime
    quality_score: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "detected_type": self.detected_type,
            "confidence": round(self.confidence, 2),
            "word_count": self.word_count,
            "extracted_at": self.extracted_at.isoformat(),
            "quality_score": self.quality_score,
        }


@dataclass
class AIInsights:
    """Structured sections parsed out of the language model's reply."""

    summary: str = ""
    key_findings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.summary or self.key_findings or self.recommendations or self.warnings)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "key_findings": list(self.key_findings),
            "recommendations": list(self.recommendations),
            "warnings": list(self.warnings),
        }


@dataclass
class AnalysisResult:
    """Complete analysis result for one document."""

    metadata: ContractMetadata
    risk_score: RiskScore
    detected_clauses: list[DetectedClause] = field(default_factory=list)
    missing_terms: list[MissingTerm] = field(default_factory=list)
    obligations: list[Obligation] = field(default_factory=list)
    ai_insights: Optional[AIInsights] = None
    analyzed_at: Optional[datetime] = None

    @property
    def critical_clauses(self) -> list[DetectedClause]:
        return [c for c in self.detected_clauses if c.severity == Severity.CRITICAL]

    def to_dict(self) -> dict:
        return {
            "metadata": self.metadata.to_dict(),
            "risk_score": self.risk_score.to_dict(),
            "detected_clauses": [c.to_dict() for c in self.detected_clauses],
            "missing_terms": [t.to_dict() for t in self.missing_terms],
            "obligations": [o.to_dict() for o in self.obligations],
            "ai_insights": self.ai_insights.to_dict() if self.ai_insights else None,
            "analyzed_at": self.analyzed_at.isoformat() if self.analyzed_at else None,
        }
