"""Provider response parsing.

Architectural role:
    Converts the raw `httpx.Response` returned by `cai.llm.client` into a
    uniform `Outcome` (display text, saved media, or raw passthrough).

Extraction order for successful responses:
    1. OpenAI speech: body is audio bytes, written to disk.
    2. OpenAI transcription: `{text}`.
    3. OpenAI/xAI image generation: `data[]` entries, base64 written to disk,
       hosted URLs reported otherwise.
    4. Google image models: `candidates[].content.parts[].inlineData`.
    5. Anthropic: `content[0].text`.
    6. Google text: `candidates[0].content.parts[0].text`, empty when absent.
    7. Everyone else: `choices[0].message.content` (+ Perplexity citations).

Failure handling model:
    - Non-2xx -> `ProviderError` carrying the pretty-printed upstream body.
    - Unexpected 2xx shape -> `MalformedResponseError`, except for Google text
      (degrades to empty output) and caller-supplied bodies (passed through
      as `RawOutput`).
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import Any

import httpx

from cai.core.errors import MalformedResponseError, ProviderError
from cai.core.types import (
    DisplayText,
    ExecutionOptions,
    MediaKind,
    Outcome,
    Provider,
    RawOutput,
    RequestDescriptor,
    SavedBinary,
    SearchResult,
)
from cai.llm.payload import IMAGE_CONTEXT, TRANSCRIBE_CONTEXT
from cai.llm.provider_config import (
    is_image_model,
    is_speech_model,
    is_transcription_model,
)
from cai.media.storage import DEFAULT_SLUG, save_bytes, slugify

logger = logging.getLogger(__name__)


SPEECH_EXTENSION = "mp3"

IMAGE_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "png": "png",
    "jpeg": "jpg",
    "webp": "webp",
}


def format_error_body(response: httpx.Response) -> str:
    """Pretty-print a JSON error body; fall back to the raw text."""
    try:
        return json.dumps(response.json(), indent=2, ensure_ascii=False)
    except ValueError:
        return response.text


def _json(request: RequestDescriptor, response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as err:
        raise MalformedResponseError(request.provider, f"body is not JSON ({err})") from err


def _first(value: Any) -> Any:
    """First element of a non-empty list, else `None`."""
    if isinstance(value, list) and value:
        return value[0]
    return None


def _field(value: Any, key: str) -> Any:
    """`value[key]` for a dict, else `None`."""
    if isinstance(value, dict):
        return value.get(key)
    return None


# =========================================================
# MEDIA
# =========================================================

def _save_generated_images(
    request: RequestDescriptor,
    data: Any,
    prompt: str,
    output_dir: Path | str,
) -> SavedBinary:
    entries = data.get("data") if isinstance(data, dict) else None
    if not isinstance(entries, list) or not entries:
        raise MalformedResponseError(request.provider, "no generated images in `data`")

    output_format = data.get("output_format")
    ext = IMAGE_EXTENSIONS.get(output_format, "png") if isinstance(output_format, str) else "png"
    slug = slugify(prompt)
    paths: list[Path] = []
    urls: list[str] = []

    for entry in entries:
        if not isinstance(entry, dict):
            continue
        if isinstance(entry.get("b64_json"), str) and entry["b64_json"]:
            try:
                blob = base64.b64decode(entry["b64_json"], validate=True)
            except (binascii.Error, ValueError) as err:
                raise MalformedResponseError(request.provider, f"invalid base64 image ({err})") from err
            paths.append(save_bytes(blob, slug, ext, output_dir))
        elif isinstance(entry.get("url"), str) and entry["url"]:
            urls.append(entry["url"])

    if not paths and not urls:
        raise MalformedResponseError(request.provider, "image entries carry neither `b64_json` nor `url`")

    return SavedBinary(MediaKind.IMAGE, tuple(paths), tuple(urls))


def _save_google_images(
    request: RequestDescriptor,
    data: Any,
    prompt: str,
    output_dir: Path | str,
) -> SavedBinary:
    candidates = _field(data, "candidates")
    slug = slugify(prompt)
    paths: list[Path] = []

    for candidate in candidates if isinstance(candidates, list) else []:
        parts = _field(_field(candidate, "content"), "parts")
        for part in parts if isinstance(parts, list) else []:
            inline = _field(part, "inlineData")
            if not isinstance(_field(inline, "data"), str) or not inline["data"]:
                continue
            try:
                blob = base64.b64decode(inline["data"], validate=True)
            except (binascii.Error, ValueError) as err:
                raise MalformedResponseError(request.provider, f"invalid base64 image ({err})") from err
            mime_type = inline.get("mimeType")
            ext = IMAGE_EXTENSIONS.get(mime_type, "png") if isinstance(mime_type, str) else "png"
            paths.append(save_bytes(blob, slug, ext, output_dir))

    if not paths:
        raise MalformedResponseError(request.provider, "no `inlineData` image parts in candidates")

    return SavedBinary(MediaKind.IMAGE, tuple(paths))


# =========================================================
# TEXT
# =========================================================

def _anthropic_text(request: RequestDescriptor, data: Any) -> str:
    block = _first(data.get("content") if isinstance(data, dict) else None)
    if not isinstance(block, dict) or not isinstance(block.get("text"), str):
        raise MalformedResponseError(request.provider, "missing `content[0].text`")
    return block["text"]


def _google_text(data: Any) -> str:
    candidate = _first(_field(data, "candidates"))
    part = _first(_field(_field(candidate, "content"), "parts"))
    text = _field(part, "text")
    if not isinstance(text, str):
        logger.warning("Google response carried no text part, returning empty output")
        return ""
    return text


def _chat_text(request: RequestDescriptor, data: Any) -> str:
    choice = _first(data.get("choices") if isinstance(data, dict) else None)
    message = choice.get("message") if isinstance(choice, dict) else None
    if not isinstance(message, dict) or "content" not in message:
        raise MalformedResponseError(request.provider, "missing `choices[0].message.content`")
    return message["content"] or ""


def _search_results(data: Any) -> tuple[SearchResult, ...]:
    results = []
    for item in data.get("search_results") or []:
        if not isinstance(item, dict):
            continue
        results.append(SearchResult(
            title=item.get("title") or "",
            url=item.get("url") or "",
            date=item.get("date"),
            last_updated=item.get("last_updated"),
        ))
    return tuple(results)


def extract(
    request: RequestDescriptor,
    response: httpx.Response,
    options: ExecutionOptions,
    prompt: str = "",
    output_dir: Path | str = ".",
    passthrough: bool = False,
) -> Outcome:
    """Turn a provider response into an `Outcome`.

    Args:
        request: Target the response came from.
        response: Fully read HTTP response.
        options: Caller flags; the subcommand context selects image handling.
        prompt: Prompt text, used to name generated images.
        output_dir: Directory receiving generated media.
        passthrough: Request body was supplied verbatim by the caller.

    Returns:
        `DisplayText`, `SavedBinary` or `RawOutput`.

    Raises:
        ProviderError: Non-success status.
        MalformedResponseError: Unexpected success body.
        OutputWriteError: Generated media could not be written.
    """
    if not response.is_success:
        raise ProviderError(response.status_code, format_error_body(response))

    provider, model = request.provider, request.model

    if provider is Provider.OPENAI and is_speech_model(model):
        path = save_bytes(response.content, DEFAULT_SLUG, SPEECH_EXTENSION, output_dir)
        return SavedBinary(MediaKind.AUDIO, (path,))

    if provider is Provider.OPENAI and (
        options.subcommand == TRANSCRIBE_CONTEXT or is_transcription_model(model)
    ):
        data = _json(request, response)
        if not isinstance(data, dict) or not isinstance(data.get("text"), str):
            raise MalformedResponseError(provider, "missing transcription `text`")
        return DisplayText(data["text"])

    if provider in (Provider.OPENAI, Provider.XAI) and (
        options.subcommand == IMAGE_CONTEXT or is_image_model(model)
    ):
        return _save_generated_images(request, _json(request, response), prompt, output_dir)

    if provider is Provider.GOOGLE and "-image" in model:
        return _save_google_images(request, _json(request, response), prompt, output_dir)

    data = _json(request, response)

    if provider is Provider.GOOGLE:
        return DisplayText(_google_text(data))

    try:
        if provider is Provider.ANTHROPIC:
            return DisplayText(_anthropic_text(request, data))

        text = _chat_text(request, data)
    except MalformedResponseError:
        if passthrough:
            return RawOutput(json.dumps(data, indent=2, ensure_ascii=False))
        raise

    if provider is Provider.PERPLEXITY:
        return DisplayText(text, _search_results(data))
    return DisplayText(text)
