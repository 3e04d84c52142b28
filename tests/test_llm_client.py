"""Unit tests for LLMClient."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock, patch
from services.errors import ConfigurationError
from services.llm_client import LLMClient, LLMResponse, LLMClientError
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError


def _completion(content="Answer", prompt_tokens=100, completion_tokens=10):
    response = Mock()
    response.choices = [Mock(message=Mock(content=content))]
    response.usage = Mock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens)
    return response


class TestLLMClient:
    """Test suite for LLMClient class."""

    def test_initialization_with_api_key(self):
        """Test LLMClient initializes with provided API key."""
        client = LLMClient(api_key="test_key")
        assert client.api_key == "test_key"

    def test_missing_api_key_raises_on_first_use(self):
        """Construction succeeds; the missing key surfaces when the client is used."""
        with patch('services.llm_client.GROQ_API_KEY', None):
            client = LLMClient()

            with pytest.raises(ConfigurationError, match="GROQ_API_KEY must be provided"):
                client.generate(prompt="Hello")

    @patch('services.llm_client.Groq')
    def test_groq_client_created_once(self, mock_groq_class):
        mock_groq_class.return_value.chat.completions.create.return_value = _completion()

        client = LLMClient(api_key="test_key")
        client.generate(prompt="one")
        client.generate(prompt="two")

        mock_groq_class.assert_called_once_with(api_key="test_key")

    @patch('services.llm_client.Groq')
    def test_generate_success(self, mock_groq_class):
        """Test successful response generation."""
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _completion(
            "Revenue grew 12% in Q3.", prompt_tokens=150, completion_tokens=12
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")
        response = client.generate(prompt="What was Q3 revenue growth?")

        assert isinstance(response, LLMResponse)
        assert response.text == "Revenue grew 12% in Q3."
        assert response.tokens_input == 150
        assert response.tokens_output == 12
        assert response.model_used == "llama-3.3-70b-versatile"
        assert isinstance(response.latency_ms, int)
        assert response.latency_ms >= 0

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "user", "content": "What was Q3 revenue growth?"}]

    @patch('services.llm_client.Groq')
    def test_generate_none_content_becomes_empty_text(self, mock_groq_class):
        mock_groq_class.return_value.chat.completions.create.return_value = _completion(content=None)

        response = LLMClient(api_key="test_key").generate(prompt="Hi")

        assert response.text == ""

    @patch('services.llm_client.Groq')
    def test_generate_from_images_builds_multimodal_message(self, mock_groq_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _completion('{"text": "Page 1"}')
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")
        response = client.generate_from_images(
            "Extract text",
            ["data:image/png;base64,AAA", "data:image/png;base64,BBB"],
            json_mode=True
        )

        assert response.text == '{"text": "Page 1"}'
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        content = kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "Extract text"}
        assert content[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAA"}}
        assert content[2]["image_url"]["url"] == "data:image/png;base64,BBB"
        assert kwargs["response_format"] == {"type": "json_object"}

    @patch('services.llm_client.Groq')
    def test_generate_from_images_free_form(self, mock_groq_class):
        mock_client = Mock()
        mock_client.chat.completions.create.return_value = _completion("text")
        mock_groq_class.return_value = mock_client

        LLMClient(api_key="test_key").generate_from_images("Extract", ["data:image/png;base64,AAA"])

        assert "response_format" not in mock_client.chat.completions.create.call_args.kwargs

    def test_generate_from_images_requires_images(self):
        with pytest.raises(ValueError, match="At least one image"):
            LLMClient(api_key="test_key").generate_from_images("Extract", [])

    @patch('services.llm_client.Groq')
    def test_generate_handles_unknown_error(self, mock_groq_class):
        """Unexpected exceptions become UNKNOWN_ERROR."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = Exception("API Error")
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(prompt="Test prompt")

        error = exc_info.value.error
        assert error.code == "UNKNOWN_ERROR"
        assert "Unexpected error" in error.message
        assert error.details["model"] == "llama-3.3-70b-versatile"
        assert error.details["error_type"] == "Exception"

    @patch('services.llm_client.Groq')
    def test_generate_handles_rate_limit_error(self, mock_groq_class):
        """Test that rate limit errors are handled with retry suggestion."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = RateLimitError(
            message="Rate limit exceeded",
            response=Mock(status_code=429),
            body=None
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(prompt="Test prompt")

        error = exc_info.value.error
        assert error.code == "RATE_LIMIT_ERROR"
        assert "Rate limit exceeded" in error.message
        assert error.details["retry_after"] == 60
        assert isinstance(error.details["latency_ms"], int)

    @patch('services.llm_client.Groq')
    def test_generate_handles_authentication_error(self, mock_groq_class):
        """Test that authentication errors are handled properly."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = AuthenticationError(
            message="Invalid API key",
            response=Mock(status_code=401),
            body=None
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(prompt="Test prompt")

        error = exc_info.value.error
        assert error.code == "AUTHENTICATION_ERROR"
        assert "Authentication failed" in error.message

    @patch('services.llm_client.Groq')
    def test_generate_handles_timeout_error(self, mock_groq_class):
        """Test that timeout errors are handled properly."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = APITimeoutError(request=Mock())
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(prompt="Test prompt")

        error = exc_info.value.error
        assert error.code == "TIMEOUT_ERROR"
        assert "timed out" in error.message

    @patch('services.llm_client.Groq')
    def test_generate_handles_generic_api_error(self, mock_groq_class):
        """Test that generic API errors are handled properly."""
        mock_client = Mock()
        mock_client.chat.completions.create.side_effect = APIError(
            message="Service unavailable",
            request=Mock(),
            body=None
        )
        mock_groq_class.return_value = mock_client

        client = LLMClient(api_key="test_key")

        with pytest.raises(LLMClientError) as exc_info:
            client.generate(prompt="Test prompt")

        error = exc_info.value.error
        assert error.code == "API_ERROR"
        assert "Groq API error" in error.message
