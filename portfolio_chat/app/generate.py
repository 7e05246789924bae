#!/usr/bin/env python3
"""
Generation module for the portfolio chatbot.

This module handles answer generation using the Gemini LLM API.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from .config import Config
from .errors import EmptyResponseError, InferenceUnavailableError
from ..utils.logger import get_logger

logger = get_logger()


@dataclass(frozen=True)
class SamplingParams:
    temperature: float = 0.3
    top_p: float = 0.8
    top_k: int = 40
    max_output_tokens: int = 800

    @classmethod
    def from_config(cls) -> "SamplingParams":
        return cls(
            temperature=Config.GEMINI_TEMPERATURE,
            top_p=Config.GEMINI_TOP_P,
            top_k=Config.GEMINI_TOP_K,
            max_output_tokens=Config.GEMINI_MAX_OUTPUT_TOKENS,
        )

    def to_generation_config(self) -> Dict[str, Any]:
        return {
            "temperature": self.temperature,
            "topP": self.top_p,
            "topK": self.top_k,
            "maxOutputTokens": self.max_output_tokens,
        }


class GenerationClient:
    """Client for generating answers using Gemini LLM API.

    Sampling parameters are fixed when the client is built. The client never
    retries; a failed call is reported to the caller as-is.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        sampling: Optional[SamplingParams] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the generation client."""
        self.api_key = api_key if api_key is not None else Config.GEMINI_API_KEY
        self.llm_model = model or Config.GEMINI_MODEL
        self.sampling = sampling or SamplingParams.from_config()
        self.timeout = timeout if timeout is not None else Config.GEMINI_REQUEST_TIMEOUT
        self.api_base_url = f"{Config.GEMINI_API_BASE}/models/{self.llm_model}:generateContent"

        if not self.api_key:
            logger.warning("GEMINI_API_KEY is not set; chat turns will fail until it is configured")

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "parts": [
                        {
                            "text": prompt
                        }
                    ]
                }
            ],
            "generationConfig": self.sampling.to_generation_config(),
        }

    def infer(self, prompt: str) -> str:
        """
        Generate an answer using the Gemini LLM.

        Args:
            prompt: Formatted prompt for the LLM

        Returns:
            Generated answer text

        Raises:
            InferenceUnavailableError: missing key, transport failure or non-200 status
            EmptyResponseError: the response carried no usable text
        """
        if not self.api_key:
            raise InferenceUnavailableError("GEMINI_API_KEY is not configured")

        logger.info(f"[GENERATE] Calling {self.llm_model}, prompt length: {len(prompt)}")
        try:
            response = requests.post(
                self.api_base_url,
                headers={"x-goog-api-key": self.api_key},
                json=self._payload(prompt),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"[GENERATE] Request to Gemini failed: {e}")
            raise InferenceUnavailableError(f"Error calling Gemini: {e}") from e

        if response.status_code != 200:
            logger.error(f"[GENERATE] Gemini returned {response.status_code}: {response.text[:500]}")
            raise InferenceUnavailableError(f"Gemini returned status {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise EmptyResponseError("Gemini response was not valid JSON") from e

        answer = self._extract_text(data)
        if not answer:
            logger.warning(f"[GENERATE] No usable text in Gemini response: {str(data)[:500]}")
            raise EmptyResponseError("Gemini returned no usable text")

        logger.info(f"[GENERATE] Received answer, length: {len(answer)}")
        return answer

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates") or []
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            return ""
        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        text = "".join(
            part.get("text") or "" for part in parts
            if isinstance(part, dict) and isinstance(part.get("text") or "", str)
        )
        return text.strip()
