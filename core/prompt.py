"""Prompt construction and answer extraction for the inference model.

Small instruction-tuned models often echo part of the prompt back before
answering, so the extractor trims everything up to the turn marker (or the
echoed question when the marker is missing).
"""

from __future__ import annotations

from typing import Any

from core.errors import UpstreamError

TURN_MARKER = "Assistant:"
QUESTION_PREFIX = "User question:"

PREAMBLE = (
    "You are a helpful movie expert assistant. Answer questions based strictly "
    "on the following movie database.\n"
    "If the question is not related to movies in the database, politely inform "
    "the user that you can only answer questions about movies in your database.\n"
    "\n"
    "Do not fabricate or make up information about movies that aren't in the database.\n"
    "\n"
    "Format your responses with:\n"
    "- Proper spacing between paragraphs (use double line breaks)\n"
    "- Well-organized bullet points or numbered lists when appropriate\n"
    "- Consistent heading styles when needed\n"
    "- Clear visual separation between different parts of your answer\n"
)


def compose_prompt(context: str, message: str) -> str:
    return (
        f"{PREAMBLE}\n"
        "Here's the movie database information:\n\n"
        f"{context}\n"
        f"{QUESTION_PREFIX} {message}\n\n"
        f"{TURN_MARKER}"
    )


def generated_text(payload: Any) -> str:
    """Pull ``generated_text`` out of ``[{"generated_text": ...}]``."""
    first = payload[0] if isinstance(payload, list) and payload else None
    text = first.get("generated_text") if isinstance(first, dict) else None
    if not isinstance(text, str):
        raise UpstreamError(
            "Something went wrong with the AI service. Please try again later.",
            details={"unexpected_payload": payload},
        )
    return text


def trim_reply(text: str, message: str) -> str:
    if TURN_MARKER in text:
        return text.rsplit(TURN_MARKER, 1)[1].strip()
    echo = f"{QUESTION_PREFIX} {message}"
    idx = text.find(echo)
    if idx != -1:
        return text[idx + len(echo):].strip()
    return text.strip()


def extract_answer(payload: Any, message: str) -> str:
    return trim_reply(generated_text(payload), message)
