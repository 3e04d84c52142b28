"""Text extraction and summarization of uploaded reports with a vision model."""
import json
import logging
import re
from enum import Enum
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from services.document_loader import DocumentLoader
from services.errors import ExtractionError
from services.llm_client import LLMClient
from services.prompts import EXTRACT_TEXT_PROMPT, SUMMARIZE_REPORT_PROMPT

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL)

OutputT = TypeVar("OutputT", bound=BaseModel)


class ExtractedText(BaseModel):
    """Single-field output of the extraction prompt."""

    text: str = Field(description="The extracted text content of the document")


class ReportSummary(BaseModel):
    """Single-field output of the summary prompt."""

    summary: str = Field(description="A concise summary of the report's key findings")


class ExtractionPolicy(str, Enum):
    """How model output is turned into the single-field result."""

    # Free-form output; parse JSON if present, otherwise use the raw text.
    DEFENSIVE = "defensive"
    # JSON-mode output validated against the schema; invalid output raises.
    STRICT = "strict"


def parse_single_field(raw: str, model: Type[OutputT]) -> OutputT:
    """
    Read model output as a one-field JSON object, falling back to the raw text.

    Args:
        raw: Model output
        model: Single-field pydantic model to build

    Returns:
        Instance of model; never raises on malformed output
    """
    (field_name,) = model.model_fields.keys()
    candidate = raw.strip()

    fenced = _CODE_FENCE_RE.match(candidate)
    if fenced:
        candidate = fenced.group("body")

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        logger.debug(f"Model output is not JSON; using raw text as '{field_name}'")
        return model(**{field_name: raw})

    if isinstance(parsed, dict) and isinstance(parsed.get(field_name), str):
        return model(**{field_name: parsed[field_name]})

    logger.debug(f"Model JSON lacks a string '{field_name}'; using raw text")
    return model(**{field_name: raw})


class TextExtractor:
    """Runs one vision-model call per document to transcribe or summarize it."""

    def __init__(
        self,
        llm_client: LLMClient,
        document_loader: Optional[DocumentLoader] = None,
        policy: ExtractionPolicy = ExtractionPolicy.DEFENSIVE
    ):
        self.llm_client = llm_client
        self.document_loader = document_loader or DocumentLoader()
        self.policy = policy

    def extract_text(self, data_uri: str) -> str:
        """
        Transcribe a PDF or image into plain text.

        Raises:
            DocumentDecodeError: If the document cannot be decoded
            ExtractionError: Under the strict policy, if the output does not validate
            LLMClientError: If the model call fails
        """
        return self._run(data_uri, EXTRACT_TEXT_PROMPT, ExtractedText).text

    def summarize(self, data_uri: str) -> str:
        """
        Summarize the key findings of a PDF or image report.

        Raises:
            DocumentDecodeError: If the document cannot be decoded
            ExtractionError: Under the strict policy, if the output does not validate
            LLMClientError: If the model call fails
        """
        return self._run(data_uri, SUMMARIZE_REPORT_PROMPT, ReportSummary).summary

    def _run(self, data_uri: str, prompt: str, output_model: Type[OutputT]) -> OutputT:
        document = self.document_loader.load(data_uri)
        images = [page.image_data_uri for page in document.pages]

        strict = self.policy is ExtractionPolicy.STRICT
        response = self.llm_client.generate_from_images(prompt, images, json_mode=strict)

        logger.info(
            f"Processed {document.mime_type} ({len(images)}/{document.total_pages} pages) "
            f"with {self.policy.value} policy"
        )

        if not strict:
            return parse_single_field(response.text, output_model)

        try:
            return output_model.model_validate_json(response.text)
        except ValidationError as e:
            logger.error(f"Model output did not match {output_model.__name__}: {e}")
            raise ExtractionError(f"Model output did not match {output_model.__name__}") from e
