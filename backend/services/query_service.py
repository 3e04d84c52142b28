"""Answer questions about a user's reports."""
import logging
from dataclasses import dataclass
from typing import Optional

from services.context_provider import ContextProvider
from services.llm_client import LLMClient
from services.prompts import NO_CONTEXT_ANSWER, build_answer_prompt

logger = logging.getLogger(__name__)


@dataclass
class Answer:
    """Generated answer plus how it was produced."""
    text: str
    chunks_retrieved: int
    context_mode: str
    model_used: Optional[str] = None


class QueryService:
    """Assemble context for a question, then ask the generation model."""

    def __init__(self, llm_client: LLMClient, default_provider: ContextProvider):
        """
        Args:
            llm_client: Client used for the generation call
            default_provider: Context strategy used when a request names none
        """
        self.llm_client = llm_client
        self.default_provider = default_provider

    def answer(
        self,
        question: str,
        owner_id: str,
        provider: Optional[ContextProvider] = None
    ) -> Answer:
        """
        Answer a question from the owner's documents.

        With no context the fixed NO_CONTEXT_ANSWER is returned and the model
        is not called. Otherwise the model's text is returned unmodified.
        Errors from the context provider or the model propagate.

        Args:
            question: User question
            owner_id: Owner whose documents are searched
            provider: Context strategy (defaults to the service's default)

        Returns:
            Answer
        """
        provider = provider or self.default_provider
        context = provider.get_context(question, owner_id)

        logger.info(f"Assembled {len(context)} context texts ({provider.mode})")

        if not context.texts:
            return Answer(text=NO_CONTEXT_ANSWER, chunks_retrieved=0, context_mode=provider.mode)

        prompt = build_answer_prompt(question, context.texts)
        response = self.llm_client.generate(prompt)

        return Answer(
            text=response.text,
            chunks_retrieved=len(context),
            context_mode=provider.mode,
            model_used=response.model_used
        )
