"""Shared test fixtures for contract-risk-analyzer tests."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from contract_risk.models import (
    ContractTemplate,
    Pattern,
    PatternType,
    RequiredSection,
    Rule,
    RuleCategory,
    Severity,
)


@pytest.fixture
def sample_contract_path() -> Path:
    """Path to the sample SaaS contract text file."""
    return Path(__file__).parent.parent / "examples" / "sample_contract.txt"


@pytest.fixture
def sample_contract_text(sample_contract_path: Path) -> str:
    """Full text of the sample contract."""
    return sample_contract_path.read_text(encoding="utf-8")


@pytest.fixture
def short_legal_text() -> str:
    """A short services agreement with a handful of red flags."""
    return (
        "This Agreement is entered into as of March 10, 2024, "
        'by and between Alpha Corp. ("Client") and Beta Services LLC ("Provider").\n\n'
        "1. PAYMENT\n"
        "The Client shall pay the Provider $50,000 within 30 days of signing. "
        "A late fee of 2% applies to overdue invoices.\n\n"
        "2. RENEWAL\n"
        "This Agreement shall automatically renew for one year unless cancelled.\n\n"
        "3. LIABILITY\n"
        "The Client accepts unlimited liability for any breach of this Agreement.\n"
    )


@pytest.fixture
def minimal_text() -> str:
    """Minimal text with no legal content (for edge-case testing)."""
    return "Hello world. This is a simple document with no legal clauses at all."


@pytest.fixture
def reference_date() -> date:
    """Fixed date that relative deadlines are resolved from."""
    return date(2024, 1, 1)


@pytest.fixture
def tmp_text_file(tmp_path: Path, short_legal_text: str) -> Path:
    """Create a temporary text file with legal content."""
    file = tmp_path / "test_contract.txt"
    file.write_text(short_legal_text, encoding="utf-8")
    return file


@pytest.fixture
def keyword_rule() -> Rule:
    """A single-pattern high-severity rule."""
    return Rule(
        id="indemnity",
        name="Indemnity",
        category=RuleCategory.RISK,
        severity=Severity.HIGH,
        patterns=(Pattern(PatternType.KEYWORD, ("indemnify",)),),
        description="Indemnification obligation",
    )


@pytest.fixture
def simple_templates() -> dict[str, ContractTemplate]:
    """Two small templates whose identifiers do not collide with common words."""
    return {
        "lease": ContractTemplate(
            contract_type="lease",
            identifiers=("landlord", "tenant", "premises", "rent"),
            required_sections=(
                RequiredSection("lease-deposit", "Security Deposit", Severity.HIGH, ("deposit",)),
                RequiredSection(
                    "lease-repairs",
                    "Repairs",
                    Severity.MEDIUM,
                    ("repair", "maintenance"),
                    description="Who fixes what",
                ),
            ),
        ),
        "loan": ContractTemplate(
            contract_type="loan",
            identifiers=("lender", "borrower", "principal", "interest rate"),
            required_sections=(
                RequiredSection("loan-repayment", "Repayment", Severity.CRITICAL, ("repay",)),
            ),
        ),
    }
