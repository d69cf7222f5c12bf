"""Symptom Analysis Service.

Sends a list of symptom labels to an OpenAI-compatible chat-completion
gateway, parses the model's reply into a RiskAnalysis, and substitutes a
fixed fallback when the reply cannot be parsed.

Upstream failures are raised as AnalysisError subclasses carrying the HTTP
status and user-facing message the endpoint should return. Timeouts and
bounded retries (exponential backoff on 429, 5xx and connection errors) are
delegated to the OpenAI client.
"""

import logging
import time
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from app.config import DEFAULT_AI_GATEWAY_URL, DEFAULT_AI_MODEL, Settings
from app.schemas.analysis import FALLBACK_ANALYSIS, RiskAnalysis
from app.services.response_parser import ParseFailure, parse_risk_analysis

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_RETRIES = 2

SYSTEM_PROMPT = """You are a medical AI assistant specialized in symptom analysis.
Analyze the provided symptoms and provide risk assessments for potential conditions.

IMPORTANT: You are NOT providing medical diagnoses. You are providing educational risk assessments only.
Always include a disclaimer that users should consult healthcare professionals.

Based on the symptoms, provide:
1. Top 3 possible conditions with probability scores (0-100)
2. Overall risk level (low, medium, high)
3. Brief explanation for each condition
4. Recommended next steps

Return your response in JSON format with this structure:
{
  "conditions": [
    {"name": "condition name", "probability": 75, "explanation": "brief explanation"}
  ],
  "riskLevel": "medium",
  "recommendations": ["recommendation 1", "recommendation 2"],
  "disclaimer": "This is not a medical diagnosis..."
}"""


class AnalysisError(Exception):
    """Base class for analysis failures that map to an HTTP error response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AnalysisConfigurationError(AnalysisError):
    """The AI gateway credential is missing."""


class UpstreamRateLimitError(AnalysisError):
    """The gateway rejected the call with HTTP 429."""

    status_code = 429

    def __init__(self, message: str = "Rate limit exceeded. Please try again later."):
        super().__init__(message)


class UpstreamQuotaError(AnalysisError):
    """The gateway rejected the call with HTTP 402 (credits exhausted)."""

    status_code = 402

    def __init__(self, message: str = "AI credits exhausted. Please add credits to continue."):
        super().__init__(message)


class UpstreamError(AnalysisError):
    """Any other gateway failure (non-success status, network, timeout)."""


@dataclass
class AnalysisOutcome:
    """Result of an analysis call."""

    analysis: RiskAnalysis
    used_fallback: bool = False


def build_user_message(symptoms: list[str]) -> str:
    """Format the user turn listing the symptoms."""
    return f"Analyze these symptoms: {', '.join(symptoms)}"


class SymptomAnalysisService:
    """Client for AI-generated symptom risk assessments.

    The credential is passed in explicitly so tests can construct the
    service without touching the environment. The OpenAI client is built
    lazily on first use, after the credential check.

    Example:
        service = SymptomAnalysisService(api_key="sk-...")
        outcome = await service.analyze(["Fever", "Cough"])
        print(outcome.analysis.risk_level)
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_AI_GATEWAY_URL,
        model: str = DEFAULT_AI_MODEL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        client: AsyncOpenAI | None = None,
    ):
        """Initialize SymptomAnalysisService.

        Args:
            api_key: AI gateway API key. May be empty; analyze() then raises
                AnalysisConfigurationError.
            base_url: Gateway base URL (OpenAI-compatible).
            model: Model identifier sent with each request.
            timeout: Per-request timeout in seconds.
            max_retries: Retry budget for retryable upstream failures.
            client: Optional pre-configured AsyncOpenAI client (for testing).
        """
        self._api_key = api_key
        self._base_url = base_url
        self._model = model
        self._timeout = timeout
        self._max_retries = max_retries
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SymptomAnalysisService":
        """Build a service from application settings."""
        return cls(
            api_key=settings.ai_gateway_api_key,
            base_url=settings.ai_gateway_url,
            model=settings.ai_model,
            timeout=settings.ai_timeout_seconds,
            max_retries=settings.ai_max_retries,
        )

    @property
    def model(self) -> str:
        return self._model

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise AnalysisConfigurationError("AI gateway API key is not configured")
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                timeout=self._timeout,
                max_retries=self._max_retries,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client, if one was created."""
        if self._client is not None:
            await self._client.close()

    async def analyze(self, symptoms: list[str]) -> AnalysisOutcome:
        """Produce a risk assessment for the given symptoms.

        Args:
            symptoms: Non-empty list of symptom labels.

        Returns:
            AnalysisOutcome with the parsed analysis, or the fallback analysis
            (used_fallback=True) when the model reply could not be parsed.

        Raises:
            ValueError: If symptoms is empty.
            AnalysisConfigurationError: If no API key is configured.
            UpstreamRateLimitError: On HTTP 429 after retries.
            UpstreamQuotaError: On HTTP 402.
            UpstreamError: On any other upstream failure.
        """
        if not symptoms:
            raise ValueError("At least one symptom is required")
        if not self._api_key:
            raise AnalysisConfigurationError("AI gateway API key is not configured")

        client = self._get_client()
        logger.info("Analyzing symptoms: %s", symptoms)
        t0 = time.perf_counter()

        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_message(symptoms)},
                ],
            )
        except openai.APIStatusError as e:
            logger.error("AI gateway error: %s %s", e.status_code, e.message)
            if e.status_code == 429:
                raise UpstreamRateLimitError() from e
            if e.status_code == 402:
                raise UpstreamQuotaError() from e
            raise UpstreamError(f"AI gateway error: {e.status_code}") from e
        except openai.APIConnectionError as e:
            # APITimeoutError is a subclass
            logger.error("AI gateway unreachable: %s", e)
            raise UpstreamError(f"AI gateway error: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        logger.debug("AI response: %s", content)

        result = parse_risk_analysis(content)
        elapsed = time.perf_counter() - t0

        if isinstance(result, ParseFailure):
            logger.warning(
                "Failed to parse AI response (%s), returning fallback analysis after %.1fs",
                result.reason, elapsed,
            )
            return AnalysisOutcome(
                analysis=FALLBACK_ANALYSIS.model_copy(deep=True),
                used_fallback=True,
            )

        logger.info(
            "analyze complete: %.1fs, risk_level=%s, conditions=%d",
            elapsed, result.risk_level.value, len(result.conditions),
        )
        return AnalysisOutcome(analysis=result)
