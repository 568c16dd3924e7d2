"""
Language-model insights for contract analysis.
Sends the rules-pass summary and contract text to OpenAI or Anthropic
models and parses the reply into ``AIInsights``.
"""

from __future__ import annotations

import logging
from typing import Any

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import Settings
from .exceptions import (
    InsightConfigurationError,
    InsightError,
    InsightGenerationError,
    InsightRateLimitError,
)
from .models import AIInsights, AnalysisResult
from .prompts import SYSTEM_PROMPT, build_analysis_prompt
from .response_parser import ResponseParser

logger = logging.getLogger(__name__)

MAX_TOKENS = 2048


class InsightGenerator:
    """
    Generates AI insights for a contract using an LLM.
    Supports both OpenAI and Anthropic models.

    Args:
        settings: Provider, model and API key settings. Read from the
            environment when omitted.
        client: Pre-built SDK client (optional). Must expose the OpenAI
            ``chat.completions.create`` or Anthropic ``messages.create``
            interface matching ``settings.provider``.
        parser: Custom ResponseParser (optional).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: Any = None,
        parser: ResponseParser | None = None,
    ) -> None:
        self.settings = settings or Settings.from_env()
        self.is_anthropic = self.settings.provider == "anthropic"
        self.parser = parser or ResponseParser()
        self.client = client if client is not None else self._init_client()

    def _init_client(self) -> Any:
        """Initialize the appropriate API client."""
        api_key = self.settings.api_key
        if not api_key:
            key_name = "ANTHROPIC_API_KEY" if self.is_anthropic else "OPENAI_API_KEY"
            raise InsightConfigurationError(f"{key_name} not found in environment")

        try:
            if self.is_anthropic:
                from anthropic import Anthropic

                return Anthropic(api_key=api_key)

            from openai import OpenAI

            return OpenAI(api_key=api_key)
        except ImportError as exc:
            raise InsightConfigurationError(
                f"The {self.settings.provider} package is required for AI insights"
            ) from exc

    def generate(self, contract_text: str, result: AnalysisResult | None = None) -> AIInsights:
        """
        Generate insights for a contract.

        Args:
            contract_text: The contract text
            result: The rules-only analysis, summarized in the prompt

        Returns:
            Parsed AIInsights; sections the model did not provide are empty.

        Raises:
            InsightConfigurationError: Credentials were rejected.
            InsightRateLimitError: Still rate limited after retrying.
            InsightGenerationError: Any other provider failure.
        """
        prompt = build_analysis_prompt(
            contract_text, result, max_chars=self.settings.max_prompt_chars
        )
        logger.info("Requesting AI insights from %s (%s)", self.settings.provider, self.settings.model)
        try:
            response = self._call_llm(prompt)
        except InsightError as exc:
            logger.error("AI insights failed: %s", exc)
            raise

        insights = self.parser.parse(response)
        if insights.is_empty:
            logger.warning("AI response did not contain any recognized sections")
        else:
            logger.info("Received AI insights (%d findings)", len(insights.key_findings))
        return insights

    def test_connection(self) -> bool:
        """Check that the configured credentials are accepted."""
        try:
            self.client.models.list()
        except Exception as exc:  # any SDK failure means "not usable"
            logger.debug("Connection test failed: %s", exc)
            return False
        return True

    @retry(
        retry=retry_if_exception_type(InsightRateLimitError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        reraise=True,
    )
    def _call_llm(self, prompt: str, system_prompt: str = SYSTEM_PROMPT) -> str:
        """
        Make a call to the LLM, retrying on rate limits.

        Args:
            prompt: The user prompt
            system_prompt: The system prompt

        Returns:
            The model's response text
        """
        try:
            if self.is_anthropic:
                response = self.client.messages.create(
                    model=self.settings.model,
                    max_tokens=MAX_TOKENS,
                    system=system_prompt,
                    messages=[{"role": "user", "content": prompt}],
                )
                return response.content[0].text

            response = self.client.chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,  # Lower temperature for more consistent analysis
                max_tokens=MAX_TOKENS,
            )
            return response.choices[0].message.content or ""
        except InsightError:
            raise
        except Exception as exc:
            raise _map_provider_error(exc) from exc


def _map_provider_error(exc: Exception) -> InsightError:
    """Translate an SDK exception into the matching InsightError.

    Both SDKs attach the HTTP status to ``status_code`` on API errors.
    """
    status = getattr(exc, "status_code", None)
    if status == 429:
        return InsightRateLimitError("AI service rate limit exceeded. Please try again later.")
    if status in (401, 403):
        return InsightConfigurationError("Invalid API key configuration")
    return InsightGenerationError(f"Failed to generate AI insights: {exc}")
