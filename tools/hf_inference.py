"""Client for the Hugging Face Inference API.

Posts ``{"inputs": prompt}`` to the configured model endpoint and classifies
failures into the relay error types. No retries are attempted; callers get
exactly one error per failed call.
"""

from __future__ import annotations

import os
import sys
from typing import Any

import requests

from core.errors import ConnectivityError, RateLimited, TransientUnavailable, UpstreamError

DEFAULT_API_URL = "https://api-inference.huggingface.co/models/google/flan-t5-base"

LOADING_MESSAGE = "The AI model is currently loading. Please try again in a few moments."
RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment before trying again."
GENERIC_MESSAGE = "Something went wrong with the AI service. Please try again later."


def _api_url() -> str:
    return os.getenv("HF_API_URL") or DEFAULT_API_URL


def _timeout() -> float:
    try:
        return float(os.getenv("INFERENCE_TIMEOUT_SECONDS", "60"))
    except ValueError:
        return 60.0


def _debug() -> bool:
    return os.getenv("MOVIE_BOT_DEBUG") in {"1", "true", "yes", "on"}


def _headers() -> dict:
    headers = {"Content-Type": "application/json"}
    # Public models work anonymously at low volume
    token = os.getenv("HF_API_TOKEN")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _error_body(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _is_loading(body: Any) -> bool:
    err = body.get("error") if isinstance(body, dict) else body
    return isinstance(err, str) and "currently loading" in err.lower()


def _classify(resp: requests.Response) -> None:
    if resp.ok:
        return
    body = _error_body(resp)
    if resp.status_code == 503 or _is_loading(body):
        eta = body.get("estimated_time") if isinstance(body, dict) else None
        detail = body.get("error") if isinstance(body, dict) and body.get("error") else body
        raise TransientUnavailable(LOADING_MESSAGE, details=detail, estimated_time=eta)
    if resp.status_code == 429:
        raise RateLimited(RATE_LIMIT_MESSAGE, details=body)
    raise UpstreamError(GENERIC_MESSAGE, details={"status": resp.status_code, "body": body})


def query_model(prompt: str) -> Any:
    """Send one prompt to the model and return the decoded JSON payload."""
    url = _api_url()
    if _debug():
        print(f"[hf] POST {url} ({len(prompt)} chars)", file=sys.stderr)
    try:
        resp = requests.post(url, json={"inputs": prompt}, headers=_headers(), timeout=_timeout())
    except requests.RequestException as e:
        raise ConnectivityError(GENERIC_MESSAGE, details=str(e)) from e

    if _debug():
        print(f"[hf] <- {resp.status_code}", file=sys.stderr)
    _classify(resp)
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamError(GENERIC_MESSAGE, details=resp.text[:500]) from e
