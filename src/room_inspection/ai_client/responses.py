"""OpenAI and Gemini backends for the text oracle."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

from openai import OpenAI
import google.generativeai as genai

from room_inspection.ai_client import prompts, schemas
from room_inspection.config import AppConfig
from room_inspection.utils.rate_limit import RateLimiter


class LLMClient(Protocol):
    """Interface for LLM clients. Calls are blocking; run them off the event loop."""
    def refine_note(self, note: str) -> dict[str, Any]: ...
    def daily_report(self, data: list[dict[str, str]]) -> str: ...


class OpenAIBackend:
    """Client for OpenAI's Chat Completions API."""
    def __init__(self, config: AppConfig, rate_limiter: RateLimiter) -> None:
        self._client = OpenAI(api_key=config.openai_api_key, timeout=config.llm_timeout_seconds, max_retries=0)
        self._model = config.openai_model
        self._rate_limiter = rate_limiter
        self._logger = logging.getLogger(self.__class__.__name__)

    def _complete(self, *, system_prompt: str, user_text: str, response_format: dict | None = None) -> str:
        self._rate_limiter.wait()
        kwargs: dict[str, Any] = {}
        if response_format is not None:
            kwargs["response_format"] = response_format
        response = self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_text},
            ],
            **kwargs,
        )
        output_text = response.choices[0].message.content
        if not output_text:
            raise ValueError("Empty response output")
        return output_text

    def refine_note(self, note: str) -> dict[str, Any]:
        output_text = self._complete(
            system_prompt=prompts.REFINE_SYSTEM,
            user_text=f"Note: {note}",
            response_format={"type": "json_schema", "json_schema": schemas.refine_schema()},
        )
        return json.loads(output_text)

    def daily_report(self, data: list[dict[str, str]]) -> str:
        return self._complete(
            system_prompt=prompts.DAILY_REPORT_SYSTEM,
            user_text=f"Data: {json.dumps(data, ensure_ascii=False)}",
        )


class GeminiBackend:
    """Client for Google's Gemini API."""
    def __init__(self, config: AppConfig, rate_limiter: RateLimiter) -> None:
        genai.configure(api_key=config.google_api_key)
        self._model_name = config.google_model
        self._timeout = config.llm_timeout_seconds
        self._rate_limiter = rate_limiter
        self._logger = logging.getLogger("GeminiBackend")

    def _clean_schema(self, schema: Any) -> Any:
        """Recursively remove unsupported keys from schema for Gemini compatibility."""
        UNSUPPORTED_KEYS = {"additionalProperties", "minimum", "maximum"}

        if isinstance(schema, dict):
            return {
                k: self._clean_schema(v)
                for k, v in schema.items()
                if k not in UNSUPPORTED_KEYS
            }
        if isinstance(schema, list):
            return [self._clean_schema(item) for item in schema]
        return schema

    def _generate(self, system_prompt: str, parts: list[Any], schema: dict | None = None) -> str:
        self._rate_limiter.wait()
        generation_config = None
        if schema is not None:
            generation_config = genai.GenerationConfig(
                response_mime_type="application/json",
                response_schema=self._clean_schema(schema.get("schema", schema)),
            )
        model = genai.GenerativeModel(
            self._model_name,
            system_instruction=system_prompt,
            generation_config=generation_config,
        )
        response = model.generate_content(parts, request_options={"timeout": self._timeout})
        if not response.text:
            raise ValueError("Empty response output")
        return response.text

    def refine_note(self, note: str) -> dict[str, Any]:
        text = self._generate(prompts.REFINE_SYSTEM, [f"Note: {note}"], schemas.refine_schema())
        return json.loads(text)

    def daily_report(self, data: list[dict[str, str]]) -> str:
        return self._generate(prompts.DAILY_REPORT_SYSTEM, [f"Data: {json.dumps(data, ensure_ascii=False)}"])


def create_client(config: AppConfig) -> LLMClient:
    """Factory to create the appropriate LLM client."""
    limiter = RateLimiter(config.requests_per_minute)

    if config.llm_provider == "google":
        if not config.google_api_key:
            raise ValueError("LLM_PROVIDER is 'google' but GOOGLE_API_KEY is missing")
        return GeminiBackend(config, limiter)

    if not config.openai_api_key:
        raise ValueError("OPENAI_API_KEY is missing")
    return OpenAIBackend(config, limiter)
