"""Tests for rule/template loading and runtime settings."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from contract_risk.config import (
    Settings,
    load_rules,
    load_templates,
    parse_pattern,
    parse_rule,
)
from contract_risk.exceptions import ConfigurationError
from contract_risk.models import PatternType, RuleCategory, Severity

_ENV_KEYS = (
    "CONTRACT_RISK_PROVIDER",
    "CONTRACT_RISK_MODEL",
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "CONTRACT_RISK_RULES",
    "CONTRACT_RISK_TEMPLATES",
    "CONTRACT_RISK_MIN_TEXT_LENGTH",
    "CONTRACT_RISK_MAX_PROMPT_CHARS",
    "CONTRACT_RISK_LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every setting from the environment."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Bundled data
# ---------------------------------------------------------------------------


class TestBundledData:
    """The shipped rules and templates load cleanly."""

    def test_bundled_rules(self) -> None:
        rules = load_rules()
        assert len(rules) >= 12
        assert len({r.id for r in rules}) == len(rules)
        assert all(r.patterns for r in rules)
        used_types = {p.type for r in rules for p in r.patterns}
        assert used_types == set(PatternType)

    def test_bundled_templates_in_tie_break_order(self) -> None:
        templates = load_templates()
        assert list(templates) == ["saas", "employment", "nda"]
        assert all(t.required_sections for t in templates.values())

    def test_proximity_patterns_have_two_terms(self) -> None:
        for rule in load_rules():
            for pattern in rule.patterns:
                if pattern.type == PatternType.PROXIMITY:
                    assert len(pattern.values) == 2, rule.id


# ---------------------------------------------------------------------------
# Rule parsing
# ---------------------------------------------------------------------------


class TestParseRule:
    """Tests for parse_rule / parse_pattern."""

    def test_minimal_rule(self) -> None:
        rule = parse_rule(
            {
                "id": "fee",
                "name": "Fee",
                "severity": "LOW",
                "patterns": [{"type": "keyword", "value": "fee"}],
            }
        )
        assert rule.category == RuleCategory.RISK
        assert rule.severity == Severity.LOW
        assert rule.patterns[0].values == ("fee",)
        assert rule.recommendation is None

    def test_pattern_options(self) -> None:
        pattern = parse_pattern(
            {"type": "proximity", "value": ["waive", "jury"], "proximity": "40", "context": 80}
        )
        assert pattern is not None
        assert pattern.values == ("waive", "jury")
        assert pattern.proximity == 40
        assert pattern.context == 80

    @pytest.mark.parametrize(
        "record",
        [
            {"type": "fuzzy", "value": "x"},
            {"type": "keyword", "value": ""},
            {"type": "keyword"},
            {"type": "phrase", "value": "x", "context": "wide"},
        ],
    )
    def test_unusable_pattern_skipped(
        self, record: dict, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="contract_risk.config"):
            assert parse_pattern(record) is None
        assert "skipping" in caplog.text

    def test_rule_keeps_good_patterns(self) -> None:
        rule = parse_rule(
            {
                "id": "mixed",
                "name": "Mixed",
                "severity": "medium",
                "patterns": [{"type": "nope", "value": "x"}, {"type": "phrase", "value": "ok"}],
            }
        )
        assert [p.type for p in rule.patterns] == [PatternType.PHRASE]

    def test_invalid_severity_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="severity"):
            parse_rule({"id": "x", "name": "X", "severity": "extreme"})

    def test_invalid_category_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="category"):
            parse_rule({"id": "x", "name": "X", "severity": "low", "category": "other"})

    def test_missing_name_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="name"):
            parse_rule({"id": "x", "severity": "low"})


# ---------------------------------------------------------------------------
# File loading
# ---------------------------------------------------------------------------


class TestLoadFiles:
    """Tests for load_rules / load_templates with custom files."""

    def test_bare_list_of_rules(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "rules.yaml",
            "- id: a\n  name: A\n  severity: high\n  patterns:\n"
            "    - {type: keyword, value: alpha}\n",
        )
        rules = load_rules(path)
        assert [r.id for r in rules] == ["a"]

    def test_duplicate_rule_ids_rejected(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "rules.yaml",
            "rules:\n"
            "  - {id: a, name: A, severity: low}\n"
            "  - {id: a, name: B, severity: low}\n",
        )
        with pytest.raises(ConfigurationError, match="duplicate rule id"):
            load_rules(path)

    def test_duplicate_contract_types_rejected(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "templates.yaml",
            "templates:\n"
            "  - {contract_type: lease, identifiers: [tenant]}\n"
            "  - {contract_type: lease, identifiers: [landlord]}\n",
        )
        with pytest.raises(ConfigurationError, match="duplicate template"):
            load_templates(path)

    def test_template_file_order_preserved(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path,
            "templates.yaml",
            "templates:\n"
            "  - contract_type: loan\n"
            "    identifiers: [lender]\n"
            "    required_sections:\n"
            "      - {id: repay, name: Repayment, importance: critical, keywords: [repay]}\n"
            "  - {contract_type: lease, identifiers: [tenant]}\n",
        )
        templates = load_templates(path)
        assert list(templates) == ["loan", "lease"]
        section = templates["loan"].required_sections[0]
        assert section.importance == Severity.CRITICAL
        assert section.keywords == ("repay",)
        assert templates["lease"].display_name == "lease"

    @pytest.mark.parametrize("section", ["identity", "[id, name]"])
    def test_non_mapping_required_section_rejected(self, tmp_path: Path, section: str) -> None:
        path = _write(
            tmp_path,
            "templates.yaml",
            "templates:\n"
            "  - contract_type: lease\n"
            "    identifiers: [tenant]\n"
            f"    required_sections:\n      - {section}\n",
        )
        with pytest.raises(ConfigurationError, match="malformed required section"):
            load_templates(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "rules.yaml", "rules: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_rules(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_rules(tmp_path / "absent.yaml")

    def test_wrong_shape(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "rules.yaml", "rules: just a string\n")
        with pytest.raises(ConfigurationError, match="expected a list"):
            load_rules(path)

    def test_empty_file_loads_nothing(self, tmp_path: Path) -> None:
        assert load_rules(_write(tmp_path, "rules.yaml", "")) == []


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings.from_env(dotenv=False)
        assert settings.provider == "openai"
        assert settings.model == "gpt-4o-mini"
        assert settings.api_key is None
        assert settings.min_text_length == 50
        assert settings.max_prompt_chars == 6000
        assert settings.log_level == "WARNING"
        assert settings.rules_path is None

    def test_claude_model_implies_anthropic(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("CONTRACT_RISK_MODEL", "claude-3-5-sonnet-latest")
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        clean_env.setenv("OPENAI_API_KEY", "sk-openai-test")
        settings = Settings.from_env(dotenv=False)
        assert settings.provider == "anthropic"
        assert settings.api_key == "sk-ant-test"

    def test_explicit_values(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        clean_env.setenv("CONTRACT_RISK_PROVIDER", "OpenAI")
        clean_env.setenv("CONTRACT_RISK_RULES", str(tmp_path / "rules.yaml"))
        clean_env.setenv("CONTRACT_RISK_MIN_TEXT_LENGTH", "200")
        clean_env.setenv("CONTRACT_RISK_LOG_LEVEL", "debug")
        settings = Settings.from_env(dotenv=False)
        assert settings.provider == "openai"
        assert settings.rules_path == tmp_path / "rules.yaml"
        assert settings.min_text_length == 200
        assert settings.log_level == "DEBUG"

    def test_unknown_provider(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("CONTRACT_RISK_PROVIDER", "mystery")
        with pytest.raises(ConfigurationError, match="Unsupported provider"):
            Settings.from_env(dotenv=False)

    def test_non_integer_setting(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("CONTRACT_RISK_MAX_PROMPT_CHARS", "lots")
        with pytest.raises(ConfigurationError, match="must be an integer"):
            Settings.from_env(dotenv=False)
