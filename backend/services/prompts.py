"""Prompt templates for answering, extraction, and summarization."""
from typing import List

CONTEXT_DELIMITER = "\n\n---\n\n"

NO_CONTEXT_ANSWER = (
    "I couldn't find any relevant information in your documents to answer that question. "
    "Please try uploading more documents or rephrasing your question."
)

REFUSAL_PHRASE = "I could not find an answer in the provided documents."

ANSWER_PROMPT_TEMPLATE = """You are an AI assistant that answers questions based *only* on the provided context from user-uploaded documents. If the answer is not found in the context, say "{refusal}"

Context from documents:
\"\"\"
{context}
\"\"\"

Question:
\"\"\"
{question}
\"\"\"

Based on the context above, what is the answer?"""

EXTRACT_TEXT_PROMPT = """Extract all the text from the following document.

Transcribe every page shown, in reading order, without commentary.
Respond with a JSON object of the form {"text": "<the extracted text>"}."""

SUMMARIZE_REPORT_PROMPT = """You are an expert AI assistant that summarizes reports and papers.

Summarize the key findings of the following report.
Respond with a JSON object of the form {"summary": "<the summary>"}."""


def build_context(texts: List[str]) -> str:
    """Join context texts, in order, with the horizontal-rule delimiter."""
    return CONTEXT_DELIMITER.join(texts)


def build_answer_prompt(question: str, texts: List[str]) -> str:
    """
    Build the generation prompt for a question and its context texts.

    Args:
        question: User question
        texts: Context texts in the order they should appear

    Returns:
        Complete prompt string
    """
    return ANSWER_PROMPT_TEMPLATE.format(
        refusal=REFUSAL_PHRASE,
        context=build_context(texts),
        question=question
    )
