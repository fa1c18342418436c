"""Prompt-to-payload adapter.

Architectural role:
    Turns a `RequestDescriptor`, the execution options and the prompt text into
    the provider-specific wire payload sent by `cai.llm.client`.

Shape precedence (first match wins):
    1. Prompt parses as a JSON object -> sent verbatim.
    2. Google -> `contents/parts` + `generationConfig`.
    3. OpenAI speech model (`-tts`) -> `{model, input, voice}`.
    4. OpenAI transcription model or `transcribe` context -> multipart form.
    5. OpenAI/xAI image model or `image` context -> `{model, prompt}`.
    6. xAI image model -> `{model, prompt, n}`.
    7. Everything else -> chat completions / messages body.

Capability gating:
    JSON mode and JSON schemas are only forwarded to providers that accept
    them. Other providers raise `UnsupportedCapabilityError` before any
    payload is built.

Determinism:
    Pure transform. No I/O; multipart files are opened by the dispatcher.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from cai.core.errors import UnsupportedCapabilityError
from cai.core.types import (
    ExecutionOptions,
    JsonPayload,
    MultipartPayload,
    Provider,
    RequestDescriptor,
    WirePayload,
)
from cai.llm.provider_config import (
    XAI_IMAGE_MODEL,
    is_speech_model,
    is_transcription_model,
)

logger = logging.getLogger(__name__)


JSON_MODE_PROVIDERS = frozenset({Provider.OPENAI, Provider.GROQ, Provider.OLLAMA})
JSON_SCHEMA_PROVIDERS = frozenset({Provider.OPENAI, Provider.OLLAMA})

REASONING_MODEL_PREFIXES = ("o1", "o3", "o4", "gpt-5")
OPENAI_IMAGE_PREFIXES = ("gpt-image", "dall-e")

SPEECH_VOICE = "alloy"

IMAGE_CONTEXT = "image"
TRANSCRIBE_CONTEXT = "transcribe"


def _parse_custom_body(prompt: str) -> dict[str, Any] | None:
    """Return the prompt as a request body if it is a JSON object."""
    try:
        body = json.loads(prompt)
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _check_capabilities(provider: Provider, options: ExecutionOptions) -> None:
    if options.is_json and provider not in JSON_MODE_PROVIDERS:
        raise UnsupportedCapabilityError(provider, "JSON mode")
    if options.json_schema is not None and provider not in JSON_SCHEMA_PROVIDERS:
        raise UnsupportedCapabilityError(provider, "JSON schema mode")


def token_budget_field(model: str) -> str:
    """Reasoning models take `max_completion_tokens` instead of `max_tokens`."""
    if model.startswith(REASONING_MODEL_PREFIXES):
        return "max_completion_tokens"
    return "max_tokens"


def _google_body(request: RequestDescriptor, prompt: str) -> dict[str, Any]:
    generation_config: dict[str, Any] = {"maxOutputTokens": request.max_tokens}
    if "-image" in request.model:
        generation_config["responseModalities"] = ["IMAGE"]

    return {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": generation_config,
    }


def _chat_body(
    request: RequestDescriptor,
    options: ExecutionOptions,
    prompt: str,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "model": request.model,
        token_budget_field(request.model): request.max_tokens,
        "messages": [{"role": "user", "content": prompt}],
    }

    if options.is_json:
        body["response_format"] = {"type": "json_object"}

    # A schema is stricter than plain JSON mode and replaces it.
    if options.json_schema is not None:
        body["response_format"] = {
            "type": "json_schema",
            "json_schema": options.json_schema,
        }

    return body


def shape_payload(
    request: RequestDescriptor,
    options: ExecutionOptions,
    prompt: str,
) -> WirePayload:
    """Build the wire payload for one dispatch.

    Args:
        request: Resolved request target.
        options: Caller flags (JSON mode, schema, subcommand context).
        prompt: Assembled prompt text.

    Returns:
        `JsonPayload` or `MultipartPayload`.

    Raises:
        UnsupportedCapabilityError: JSON mode or schema requested from a
            provider that doesn't accept it.
    """
    custom_body = _parse_custom_body(prompt)
    if custom_body is not None:
        logger.debug("Prompt is a JSON object, sending it verbatim")
        return JsonPayload(custom_body, custom=True)

    provider, model = request.provider, request.model
    _check_capabilities(provider, options)

    if provider is Provider.GOOGLE:
        return JsonPayload(_google_body(request, prompt))

    if provider is Provider.OPENAI and is_speech_model(model):
        return JsonPayload({"model": model, "input": prompt, "voice": SPEECH_VOICE})

    if provider is Provider.OPENAI and (
        options.subcommand == TRANSCRIBE_CONTEXT or is_transcription_model(model)
    ):
        return MultipartPayload(
            fields={"model": model},
            file_field="file",
            file_path=Path(prompt.strip()),
        )

    if provider in (Provider.OPENAI, Provider.XAI) and (
        options.subcommand == IMAGE_CONTEXT or model.startswith(OPENAI_IMAGE_PREFIXES)
    ):
        return JsonPayload({"model": model, "prompt": prompt})

    if provider is Provider.XAI and model == XAI_IMAGE_MODEL:
        return JsonPayload({"model": model, "prompt": prompt, "n": 1})

    return JsonPayload(_chat_body(request, options, prompt))
