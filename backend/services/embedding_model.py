"""Embedding function backed by the Hugging Face Inference API."""
import time
import logging
from typing import Any, Dict, List, Optional

import httpx
from chromadb import Documents, EmbeddingFunction, Embeddings

from config import HUGGINGFACE_API_KEY, EMBEDDING_MODEL
from services.errors import ConfigurationError

logger = logging.getLogger(__name__)


class HuggingFaceEmbeddingFunction(EmbeddingFunction[Documents]):
    """
    Chroma embedding function that calls the Hugging Face feature-extraction endpoint.

    The vector collection invokes it for both stored chunks and query texts,
    so the rest of the backend never handles vectors directly.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = EMBEDDING_MODEL,
        timeout: float = 120.0
    ):
        """
        Initialize the embedding function.

        Args:
            api_key: Hugging Face API key (defaults to HUGGINGFACE_API_KEY)
            model_name: Model identifier (default: sentence-transformers/all-mpnet-base-v2)
            timeout: Request timeout in seconds

        Raises:
            ConfigurationError: If no API key is available
        """
        api_key = api_key or HUGGINGFACE_API_KEY
        if not api_key:
            raise ConfigurationError("HUGGINGFACE_API_KEY environment variable is required")

        self.api_key = api_key
        self.model_name = model_name
        self.timeout = timeout
        self.api_url = f"https://api-inference.huggingface.co/models/{model_name}"

        logger.info(f"Initialized HuggingFaceEmbeddingFunction with model: {model_name}")

    def __call__(self, input: Documents) -> Embeddings:
        """
        Embed a batch of texts in one request.

        Args:
            input: Texts to embed

        Returns:
            One embedding vector per input text

        Raises:
            RuntimeError: If the API call fails
        """
        return self._request(list(input))

    @staticmethod
    def name() -> str:
        return "huggingface-inference"

    def get_config(self) -> Dict[str, Any]:
        """Collection configuration; the API key is never persisted."""
        return {"model_name": self.model_name, "timeout": self.timeout}

    @staticmethod
    def build_from_config(config: Dict[str, Any]) -> "HuggingFaceEmbeddingFunction":
        return HuggingFaceEmbeddingFunction(
            model_name=config.get("model_name", EMBEDDING_MODEL),
            timeout=config.get("timeout", 120.0)
        )

    def _request(self, texts: List[str]) -> List[List[float]]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = {
            "inputs": texts,
            "options": {
                "wait_for_model": True  # Block while a sleeping model loads
            }
        }

        start_time = time.time()
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.api_url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"Embedding request timed out after {self.timeout}s")
            raise RuntimeError(f"Embedding request timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            logger.error(f"Embedding request failed: {e}")
            raise RuntimeError(f"Network error: {str(e)}") from e

        if response.status_code == 429:
            logger.error("Rate limit exceeded for Hugging Face API")
            raise RuntimeError("Rate limit exceeded. Please try again later.")

        if response.status_code == 401:
            logger.error("Authentication failed for Hugging Face API")
            raise RuntimeError("Invalid API key")

        if response.status_code != 200:
            error_msg = f"API request failed with status {response.status_code}: {response.text}"
            logger.error(error_msg)
            raise RuntimeError(error_msg)

        embeddings = response.json()
        if len(embeddings) != len(texts):
            raise RuntimeError(
                f"Expected {len(texts)} embeddings, got {len(embeddings)}"
            )

        logger.debug(
            f"Generated embeddings for {len(texts)} texts in {time.time() - start_time:.2f}s"
        )
        return embeddings
