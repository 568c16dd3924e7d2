"""Contract Risk Analyzer -- rule-based contract risk analysis with optional AI insights."""

__version__ = "0.1.0"

from .analyzer import ContractAnalyzer
from .config import Settings, load_rules, load_templates
from .dates import DateResolver
from .engine import RuleEngine, classify_obligation, risk_level_for
from .exceptions import (
    ConfigurationError,
    ContractRiskError,
    ExtractionError,
    InsightConfigurationError,
    InsightError,
    InsightGenerationError,
    InsightRateLimitError,
    TextTooShortError,
)
from .extraction import extract_text
from .llm import InsightGenerator
from .matcher import PatternMatcher, get_context
from .models import (
    AIInsights,
    AnalysisResult,
    ContractMetadata,
    ContractTemplate,
    DetectedClause,
    Match,
    MissingTerm,
    Obligation,
    ObligationType,
    Pattern,
    PatternType,
    RequiredSection,
    RiskBreakdown,
    RiskLevel,
    RiskScore,
    Rule,
    RuleCategory,
    Severity,
)
from .preprocessing import TextNormalizer
from .prompts import build_analysis_prompt
from .response_parser import ResponseParser

__all__ = [
    # Core
    "ContractAnalyzer",
    "RuleEngine",
    "AnalysisResult",
    "ContractMetadata",
    "DetectedClause",
    "Match",
    "MissingTerm",
    "Obligation",
    "ObligationType",
    "RiskBreakdown",
    "RiskLevel",
    "RiskScore",
    "classify_obligation",
    "risk_level_for",
    # Configuration
    "Settings",
    "Rule",
    "RuleCategory",
    "Pattern",
    "PatternType",
    "Severity",
    "ContractTemplate",
    "RequiredSection",
    "load_rules",
    "load_templates",
    # Text processing
    "TextNormalizer",
    "PatternMatcher",
    "DateResolver",
    "get_context",
    "extract_text",
    # AI insights
    "InsightGenerator",
    "ResponseParser",
    "AIInsights",
    "build_analysis_prompt",
    # Errors
    "ContractRiskError",
    "ConfigurationError",
    "TextTooShortError",
    "ExtractionError",
    "InsightError",
    "InsightConfigurationError",
    "InsightRateLimitError",
    "InsightGenerationError",
]
