import json
import logging
from typing import Any, Dict, Optional

import openai
from fastapi import Request
from pydantic import ValidationError as SchemaValidationError
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

import config
from errors import UpstreamError
from ..logic.contracts import CVAnalysis
from .prompt_builder import (
    build_chat_system_prompt,
    build_cv_analysis_system_prompt,
    build_cv_analysis_user_prompt,
)

logger = logging.getLogger(__name__)

# Transient failures worth another attempt
RETRYABLE_ERRORS = (
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


def _extract_json_from_markdown(response_text: str) -> str:
    """Strip ``` / ```json fences some models wrap around JSON."""
    json_text = response_text.strip()
    if json_text.startswith("```json"):
        json_text = json_text[7:]
    elif json_text.startswith("```"):
        json_text = json_text[3:]
    if json_text.endswith("```"):
        json_text = json_text[:-3]
    return json_text.strip()


class ReasoningOracle:
    """
    Thin client over the chat-completions API.

    Every failure mode (missing key, timeout after retries, API error,
    empty or non-JSON content) surfaces as ``UpstreamError``.
    """

    def __init__(
        self,
        client: Optional[Any] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
    ):
        self.model = model or config.OPENAI_MODEL
        self.timeout = timeout if timeout is not None else config.ORACLE_TIMEOUT_SECONDS
        self.max_attempts = max(1, max_attempts if max_attempts is not None else config.ORACLE_MAX_ATTEMPTS)
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else config.ORACLE_BACKOFF_SECONDS
        self.temperature = 0.2

        self.client = client
        api_key = api_key or config.OPENAI_API_KEY
        if self.client is None and api_key:
            # Retries are handled here, not by the SDK
            self.client = openai.OpenAI(api_key=api_key, timeout=self.timeout, max_retries=0)
        if self.client is None:
            logger.warning("OPENAI_API_KEY not set; AI endpoints will fail until it is configured.")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _create(self, **kwargs):
        return self.client.chat.completions.create(model=self.model, **kwargs)

    def _complete(self, system_prompt: str, user_prompt: str, **kwargs) -> str:
        if self.client is None:
            raise UpstreamError("Oracle API key is not configured")

        retryer = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=10),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            response = retryer(
                self._create,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                **kwargs,
            )
        except RETRYABLE_ERRORS as e:
            raise UpstreamError(f"Oracle call failed after {self.max_attempts} attempt(s): {e}") from e
        except openai.OpenAIError as e:
            raise UpstreamError(f"Oracle call failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as e:
            raise UpstreamError(f"Oracle returned an unexpected response object: {e}") from e
        if not content:
            raise UpstreamError("Oracle returned empty content")
        return content

    def complete_json(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        content = self._complete(
            system_prompt,
            user_prompt,
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        try:
            parsed = json.loads(_extract_json_from_markdown(content))
        except json.JSONDecodeError as e:
            logger.debug(f"Unparseable oracle content: {content[:200]!r}")
            raise UpstreamError(f"Oracle returned non-JSON content: {e}") from e
        if not isinstance(parsed, dict):
            raise UpstreamError(f"Oracle returned JSON {type(parsed).__name__}, expected an object")
        return parsed

    def complete_text(self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None) -> str:
        return self._complete(
            system_prompt,
            user_prompt,
            max_tokens=max_tokens or config.CHAT_MAX_TOKENS,
        )

    # ------------------------------------------------------------------
    # Tasks
    # ------------------------------------------------------------------

    def analyze_cv(self, cv_text: str) -> CVAnalysis:
        payload = self.complete_json(
            build_cv_analysis_system_prompt(),
            build_cv_analysis_user_prompt(cv_text),
        )
        try:
            return CVAnalysis.model_validate(payload)
        except SchemaValidationError as e:
            raise UpstreamError(f"Oracle CV analysis has the wrong shape: {e.error_count()} error(s)") from e

    def chat(self, message: str, context: Optional[Any] = None) -> str:
        return self.complete_text(build_chat_system_prompt(context), message)


def get_oracle(request: Request) -> ReasoningOracle:
    return request.app.state.oracle
