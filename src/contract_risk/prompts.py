"""
Prompt templates for the AI insights pass.
"""

from __future__ import annotations

from .models import AnalysisResult

SYSTEM_PROMPT = """You are an expert legal analyst specializing in contract review. Your role is to:
1. Provide plain-English summaries of complex legal language
2. Identify key risks and red flags in contracts
3. Offer practical recommendations for negotiation
4. Explain legal implications in terms non-lawyers can understand

Guidelines:
- Be concise and actionable
- Focus on the most important issues first
- Use clear, simple language
- Provide specific recommendations
- Highlight critical risks prominently
- Be objective and balanced
"""

INSTRUCTIONS = """## Your Analysis
Please provide:
1. **Summary** (2-3 sentences): What is this contract about?
2. **Key Findings** (3-5 bullet points): Most important things to know
3. **Recommendations** (3-5 bullet points): Specific actions to take
4. **Critical Warnings** (if any): Urgent issues that need immediate attention

Keep your response concise and actionable. Focus on what matters most."""

TRUNCATION_MARKER = "\n\n[...text truncated for length...]"
MAX_PROMPT_CHARS = 6000
TOP_ITEMS = 5


def truncate_text(text: str, max_chars: int = MAX_PROMPT_CHARS) -> str:
    """Cut ``text`` to ``max_chars`` and append the truncation marker if cut."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


def build_analysis_prompt(
    contract_text: str,
    result: AnalysisResult | None = None,
    max_chars: int = MAX_PROMPT_CHARS,
) -> str:
    """Build the user prompt from the rules pass and the contract text.

    Args:
        contract_text: The contract text (truncated to ``max_chars``).
        result: Rules-only analysis to summarize for the model (optional).
        max_chars: Contract text budget.

    Returns:
        The prompt requesting the four numbered sections.
    """
    parts = ["Please analyze this contract and provide insights:", ""]

    if result is not None:
        score = result.risk_score
        breakdown = score.breakdown
        parts += [
            "## Automated Risk Assessment",
            f"Overall Risk Score: {score.overall}/100 ({score.risk_level.value} risk)",
            f"- Critical Issues: {breakdown.critical_issues}",
            f"- High Risk Clauses: {breakdown.high_risk_clauses}",
            f"- Medium Risk Clauses: {breakdown.medium_risk_clauses}",
            f"- Missing Terms: {breakdown.missing_terms}",
            "",
        ]

        if result.detected_clauses:
            parts.append("## Detected Risky Clauses")
            for clause in result.detected_clauses[:TOP_ITEMS]:
                parts.append(
                    f"- {clause.rule.name} ({clause.severity.value}): {clause.rule.description}"
                )
            parts.append("")

        if result.missing_terms:
            parts.append("## Missing Important Terms")
            for term in result.missing_terms[:TOP_ITEMS]:
                parts.append(f"- {term.name} ({term.importance.value}): {term.description}")
            parts.append("")

        if result.obligations:
            parts.append("## Key Obligations Found")
            for obligation in result.obligations[:TOP_ITEMS]:
                parts.append(f"- {obligation.type.value}: {obligation.description}")
            parts.append("")

    parts += ["## Contract Text", truncate_text(contract_text, max_chars), "", INSTRUCTIONS]
    return "\n".join(parts)
