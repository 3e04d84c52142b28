"""LLM Client for Groq API integration."""
import time
import threading
from dataclasses import dataclass
from typing import List, Optional, Dict, Any
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from config import GROQ_API_KEY, GENERATION_MODEL, EXTRACTION_MODEL
from services.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(Exception):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        super().__init__(error.message)


class LLMClient:
    """Client for interfacing with Groq API for text and vision generation."""

    def __init__(self, api_key: Optional[str] = None, client: Optional[Groq] = None):
        """
        Configure the LLM client. The Groq client is created on first use.

        Args:
            api_key: Groq API key (defaults to GROQ_API_KEY from environment)
            client: Pre-built Groq client, used as-is
        """
        self.api_key = api_key or GROQ_API_KEY
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> Groq:
        """
        Groq client, created on first access.

        Raises:
            ConfigurationError: If no API key is available
        """
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self.api_key:
                        raise ConfigurationError("GROQ_API_KEY must be provided or set in environment")
                    self._client = Groq(api_key=self.api_key)
                    logger.info("LLMClient initialized successfully")
        return self._client

    def generate(
        self,
        prompt: str,
        model: str = GENERATION_MODEL,
        max_tokens: int = 1024
    ) -> LLMResponse:
        """
        Generate a text response for a single prompt.

        Args:
            prompt: Complete prompt with context and question
            model: Model name
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            ConfigurationError: If no API key is available
            LLMClientError: Structured error with code, message, and details
        """
        messages = [{"role": "user", "content": prompt}]
        return self._complete(model, messages, max_tokens=max_tokens, temperature=0.2)

    def generate_from_images(
        self,
        prompt: str,
        image_data_uris: List[str],
        model: str = EXTRACTION_MODEL,
        json_mode: bool = False,
        max_tokens: int = 8192
    ) -> LLMResponse:
        """
        Generate a response for a prompt plus one or more images.

        Args:
            prompt: Instruction text
            image_data_uris: Images as base64 data URIs
            model: Vision-capable model name
            json_mode: Ask the API to constrain output to a JSON object
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            ValueError: If no images are given
            ConfigurationError: If no API key is available
            LLMClientError: Structured error with code, message, and details
        """
        if not image_data_uris:
            raise ValueError("At least one image is required")

        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        content.extend(
            {"type": "image_url", "image_url": {"url": uri}}
            for uri in image_data_uris
        )
        messages = [{"role": "user", "content": content}]

        extra: Dict[str, Any] = {}
        if json_mode:
            extra["response_format"] = {"type": "json_object"}

        return self._complete(model, messages, max_tokens=max_tokens, temperature=0, **extra)

    def _complete(self, model: str, messages: List[Dict[str, Any]], **options) -> LLMResponse:
        client = self.client
        start_time = time.time()

        try:
            logger.debug(f"Generating response with model: {model}")

            response = client.chat.completions.create(
                model=model,
                messages=messages,
                **options
            )
        except Exception as e:
            raise self._to_client_error(e, model, start_time) from e

        latency_ms = int((time.time() - start_time) * 1000)

        # Groq returns None content for empty completions
        text = response.choices[0].message.content or ""

        usage = response.usage
        tokens_input = usage.prompt_tokens if usage else 0
        tokens_output = usage.completion_tokens if usage else 0

        logger.info(
            f"Generated response: model={model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=text,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=model
        )

    @staticmethod
    def _to_client_error(exc: Exception, model: str, start_time: float) -> LLMClientError:
        """Map a Groq SDK exception onto a structured LLMClientError and log it."""
        latency_ms = int((time.time() - start_time) * 1000)
        details: Dict[str, Any] = {
            "model": model,
            "latency_ms": latency_ms,
            "original_error": str(exc)
        }

        # Subclasses before APIError, which they all inherit from
        if isinstance(exc, RateLimitError):
            code = "RATE_LIMIT_ERROR"
            message = "Rate limit exceeded. Please try again in a few moments."
            details["retry_after"] = 60
        elif isinstance(exc, AuthenticationError):
            code = "AUTHENTICATION_ERROR"
            message = "Authentication failed. Please check your API key."
        elif isinstance(exc, APITimeoutError):
            code = "TIMEOUT_ERROR"
            message = "Request timed out. Please try again."
        elif isinstance(exc, APIError):
            code = "API_ERROR"
            message = f"Groq API error: {str(exc)}"
        else:
            code = "UNKNOWN_ERROR"
            message = f"Unexpected error during generation: {str(exc)}"
            details["error_type"] = type(exc).__name__

        error = LLMError(code=code, message=message, details=details)
        logger.error(
            f"LLM error: code={code}, model={model}, latency={latency_ms}ms, error={exc}",
            exc_info=exc,
            extra={"error_code": error.code, "error_details": error.details}
        )
        return LLMClientError(error)
