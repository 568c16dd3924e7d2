"""Runtime settings and rule/template configuration loading.

Rules and contract templates are plain YAML records. The bundled
reference data lives in ``contract_risk/data/``; either file can be
replaced by pointing ``CONTRACT_RISK_RULES`` / ``CONTRACT_RISK_TEMPLATES``
(or the explicit ``path`` arguments) at another file.

Loading turns the records into frozen dataclasses. Individual patterns
that cannot be used are dropped with a warning; structural problems
(unknown severity, duplicate ids, missing fields) raise
``ConfigurationError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .models import (
    ContractTemplate,
    Pattern,
    PatternType,
    RequiredSection,
    Rule,
    RuleCategory,
    Severity,
)

logger = logging.getLogger(__name__)

RULES_FILE = "rules.yaml"
TEMPLATES_FILE = "templates.yaml"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Settings:
    """Process-level settings, read from the environment.

    Attributes:
        provider: Language-model provider, ``openai`` or ``anthropic``.
        model: Model name passed to the provider.
        openai_api_key: Key for the OpenAI provider.
        anthropic_api_key: Key for the Anthropic provider.
        rules_path: Optional rule file overriding the bundled rules.
        templates_path: Optional template file overriding the bundled templates.
        min_text_length: Shortest text accepted for analysis.
        max_prompt_chars: Contract text budget in the model prompt.
        log_level: Logging level name used by the CLI.
    """

    provider: str = "openai"
    model: str = "gpt-4o-mini"
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    rules_path: Optional[Path] = None
    templates_path: Optional[Path] = None
    min_text_length: int = 50
    max_prompt_chars: int = 6000
    log_level: str = "WARNING"

    @property
    def api_key(self) -> Optional[str]:
        if self.provider == "anthropic":
            return self.anthropic_api_key
        return self.openai_api_key

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from environment variables.

        Args:
            dotenv: Merge a local ``.env`` file into the environment first.

        Raises:
            ConfigurationError: If a numeric setting is not an integer.
        """
        if dotenv:
            load_dotenv()

        model = os.getenv("CONTRACT_RISK_MODEL", cls.model)
        provider = os.getenv("CONTRACT_RISK_PROVIDER", "").lower()
        if not provider:
            provider = "anthropic" if model.startswith("claude") else "openai"
        if provider not in ("openai", "anthropic"):
            raise ConfigurationError(f"Unsupported provider '{provider}'")

        rules_path = os.getenv("CONTRACT_RISK_RULES")
        templates_path = os.getenv("CONTRACT_RISK_TEMPLATES")

        return cls(
            provider=provider,
            model=model,
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY"),
            rules_path=Path(rules_path) if rules_path else None,
            templates_path=Path(templates_path) if templates_path else None,
            min_text_length=_int_env("CONTRACT_RISK_MIN_TEXT_LENGTH", cls.min_text_length),
            max_prompt_chars=_int_env("CONTRACT_RISK_MAX_PROMPT_CHARS", cls.max_prompt_chars),
            log_level=os.getenv("CONTRACT_RISK_LOG_LEVEL", cls.log_level).upper(),
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------


def _read_yaml(path: Optional[Path], bundled: str) -> Any:
    try:
        if path is None:
            raw = resources.files("contract_risk.data").joinpath(bundled).read_text(encoding="utf-8")
        else:
            raw = Path(path).read_text(encoding="utf-8")
        return yaml.safe_load(raw)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration file {path or bundled}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path or bundled}: {exc}") from exc


def _records(data: Any, key: str, source: str) -> list[dict]:
    """Accept either a bare list or a mapping with the list under ``key``."""
    if isinstance(data, dict):
        data = data.get(key)
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ConfigurationError(f"{source}: expected a list of records under '{key}'")
    return data


def _enum(enum_cls, value: Any, field_name: str, owner: str):
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"{owner}: invalid {field_name} {value!r} (expected one of: {allowed})"
        ) from None


def _require(record: dict, field_name: str, owner: str) -> Any:
    if field_name not in record or record[field_name] in (None, ""):
        raise ConfigurationError(f"{owner}: missing required field '{field_name}'")
    return record[field_name]


def _as_strings(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return (str(value),)


def parse_pattern(record: dict, owner: str = "pattern") -> Optional[Pattern]:
    """Build a Pattern from a record, or None if the record is unusable."""
    try:
        pattern_type = PatternType(str(record.get("type", "")).lower())
    except ValueError:
        logger.warning("%s: skipping pattern with unknown type %r", owner, record.get("type"))
        return None

    values = tuple(v for v in _as_strings(record.get("value")) if v)
    if not values:
        logger.warning("%s: skipping %s pattern without a value", owner, pattern_type.value)
        return None

    try:
        context = int(record["context"]) if record.get("context") is not None else None
        proximity = int(record["proximity"]) if record.get("proximity") is not None else None
    except (TypeError, ValueError):
        logger.warning("%s: skipping pattern with non-numeric context/proximity", owner)
        return None

    return Pattern(type=pattern_type, values=values, context=context, proximity=proximity)


def parse_rule(record: dict) -> Rule:
    """Build a Rule from a record.

    Raises:
        ConfigurationError: On missing fields or out-of-range enumerations.
    """
    rule_id = str(_require(record, "id", "rule"))
    owner = f"rule '{rule_id}'"
    patterns = []
    for raw_pattern in record.get("patterns") or []:
        if not isinstance(raw_pattern, dict):
            logger.warning("%s: skipping malformed pattern %r", owner, raw_pattern)
            continue
        pattern = parse_pattern(raw_pattern, owner)
        if pattern is not None:
            patterns.append(pattern)

    return Rule(
        id=rule_id,
        name=str(_require(record, "name", owner)),
        category=_enum(RuleCategory, record.get("category", "risk"), "category", owner),
        severity=_enum(Severity, _require(record, "severity", owner), "severity", owner),
        patterns=tuple(patterns),
        description=str(record.get("description", "")),
        recommendation=record.get("recommendation"),
    )


def parse_template(record: dict) -> ContractTemplate:
    """Build a ContractTemplate from a record.

    Raises:
        ConfigurationError: On missing fields or out-of-range importances.
    """
    contract_type = str(_require(record, "contract_type", "template"))
    owner = f"template '{contract_type}'"
    sections = []
    for raw in record.get("required_sections") or []:
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{owner}: malformed required section {raw!r}")
        section_id = str(_require(raw, "id", owner))
        sections.append(
            RequiredSection(
                id=section_id,
                name=str(_require(raw, "name", owner)),
                importance=_enum(
                    Severity, _require(raw, "importance", owner), "importance", owner
                ),
                keywords=_as_strings(raw.get("keywords")),
                description=raw.get("description"),
            )
        )

    return ContractTemplate(
        contract_type=contract_type,
        display_name=str(record.get("display_name", contract_type)),
        identifiers=_as_strings(record.get("identifiers")),
        required_sections=tuple(sections),
    )


def load_rules(path: str | Path | None = None) -> list[Rule]:
    """Load rules from ``path`` or from the bundled reference data.

    Raises:
        ConfigurationError: If the file is unreadable or a rule is invalid.
    """
    source = str(path) if path else RULES_FILE
    records = _records(_read_yaml(Path(path) if path else None, RULES_FILE), "rules", source)

    rules: list[Rule] = []
    seen: set[str] = set()
    for record in records:
        rule = parse_rule(record)
        if rule.id in seen:
            raise ConfigurationError(f"{source}: duplicate rule id '{rule.id}'")
        seen.add(rule.id)
        rules.append(rule)

    logger.debug("Loaded %d rules from %s", len(rules), source)
    return rules


def load_templates(path: str | Path | None = None) -> dict[str, ContractTemplate]:
    """Load contract templates keyed by contract type, preserving file order.

    Raises:
        ConfigurationError: If the file is unreadable, a template is invalid
            or two templates share a contract type.
    """
    source = str(path) if path else TEMPLATES_FILE
    records = _records(
        _read_yaml(Path(path) if path else None, TEMPLATES_FILE), "templates", source
    )

    templates: dict[str, ContractTemplate] = {}
    for record in records:
        template = parse_template(record)
        if template.contract_type in templates:
            raise ConfigurationError(
                f"{source}: duplicate template for contract type '{template.contract_type}'"
            )
        templates[template.contract_type] = template

    logger.debug("Loaded %d templates from %s", len(templates), source)
    return templates
