"""Chat relay: turns one user message into one model answer.

Rebuilds the context block from the catalog on every call, composes the
prompt, calls the inference endpoint and extracts the answer text. Errors
from ``tools.hf_inference`` propagate unchanged as ``RelayError`` subclasses.
"""

from __future__ import annotations

from typing import Any

from core.catalog import build_context, get_catalog
from core.errors import ValidationError
from core.prompt import compose_prompt, extract_answer
from tools.hf_inference import query_model

MESSAGE_REQUIRED = "Message is required"


def normalize_message(message: Any) -> str:
    if not isinstance(message, str) or not message.strip():
        raise ValidationError(MESSAGE_REQUIRED)
    return message.strip()


def answer(message: Any) -> str:
    text = normalize_message(message)
    prompt = compose_prompt(build_context(get_catalog()), text)
    payload = query_model(prompt)
    return extract_answer(payload, text)
