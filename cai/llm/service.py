"""Prompt-to-outcome orchestration.

Architectural role:
    Canonical entrypoint used by the CLI adapter. Chains the pipeline stages:
    `selection.select` -> empty-prompt check -> `payload.shape_payload` ->
    `client.send` -> `extract.extract`.

Ordering:
    The empty-prompt check runs after provider selection, so missing-key
    guidance is reported first when both problems exist.

Prompt builders:
    `prompt_with_lang_context` and `build_ocr_request` assemble prompts for the
    language-context and OCR commands.

Determinism:
    Request construction is deterministic for fixed inputs and configuration.
    Output text remains non-deterministic because inference runs remotely.
"""

from __future__ import annotations

import base64
import json
import mimetypes
import time
from pathlib import Path
from typing import Mapping

import httpx

from cai.core.errors import EmptyPromptError, InputFileError
from cai.core.types import (
    ExecutionOptions,
    JsonPayload,
    ModelSpecifier,
    PromptResult,
    Provider,
    RequestDescriptor,
)
from cai.llm.client import send
from cai.llm.extract import extract
from cai.llm.payload import shape_payload
from cai.llm.provider_config import DEFAULT_MAX_TOKENS
from cai.llm.selection import select


# Sent to simultaneously by the `all` command.
BROADCAST_MODELS = (
    ModelSpecifier(Provider.GROQ, "llama"),
    ModelSpecifier(Provider.ANTHROPIC, "sonnet"),
    ModelSpecifier(Provider.OPENAI, "gpt-4o-mini"),
    ModelSpecifier(Provider.OLLAMA, "llama"),
    ModelSpecifier(Provider.LLAMAFILE, ""),
)

LANGUAGE_CONTEXT_MODEL = ModelSpecifier(Provider.ANTHROPIC, "sonnet")

OCR_MODEL = "gpt-4o"

OCR_INSTRUCTION = "Extract and return all text from this image."

# Command name -> language name.
LANGUAGE_CONTEXTS = {
    "bash": "Bash",
    "c": "C",
    "cpp": "C++",
    "cs": "C#",
    "elm": "Elm",
    "fish": "Fish",
    "fs": "F#",
    "gd": "GDScript",
    "gl": "Gleam",
    "go": "Go",
    "hs": "Haskell",
    "java": "Java",
    "js": "JavaScript",
    "kt": "Kotlin",
    "ly": "LilyPond",
    "lua": "Lua",
    "oc": "OCaml",
    "php": "PHP",
    "pg": "Postgres",
    "ps": "PureScript",
    "py": "Python",
    "rb": "Ruby",
    "rs": "Rust",
    "sql": "SQLite",
    "sw": "Swift",
    "ts": "TypeScript",
    "ty": "Typst",
    "wl": "Wolfram Language",
    "zig": "Zig",
}


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def dispatch_prompt(
    label: str,
    request: RequestDescriptor,
    options: ExecutionOptions,
    prompt: str,
    transport: httpx.AsyncBaseTransport | None = None,
    output_dir: Path | str = ".",
) -> PromptResult:
    """Shape, send and extract one prompt for an already selected target.

    Raises:
        EmptyPromptError: `prompt` is empty.
        CaiError: Any failure from shaping, transport or extraction.
    """
    if not prompt:
        raise EmptyPromptError()

    started = time.perf_counter()
    payload = shape_payload(request, options, prompt)
    response = await send(request, payload, transport=transport)
    elapsed_ms = _elapsed_ms(started)

    outcome = extract(
        request,
        response,
        options,
        prompt=prompt,
        output_dir=output_dir,
        passthrough=isinstance(payload, JsonPayload) and payload.custom,
    )
    return PromptResult(label, elapsed_ms, outcome)


async def exec_tool(
    specifier: ModelSpecifier | None,
    options: ExecutionOptions,
    prompt: str,
    config: Mapping[str, str],
    transport: httpx.AsyncBaseTransport | None = None,
    output_dir: Path | str = ".",
    secrets_path: Path | str | None = None,
) -> PromptResult:
    """Select a provider and run one prompt through it.

    Args:
        specifier: Explicit model, or `None` for the credential fallback chain.
        options: Caller flags.
        prompt: Assembled prompt text.
        config: Flat configuration map from `load_config`.
        transport: Optional HTTP transport override.
        output_dir: Directory for generated media.
        secrets_path: Path named in missing-key guidance.

    Returns:
        Label, elapsed time and outcome of the dispatch.

    Raises:
        CaiError: Typed failure from any stage.
    """
    label, request = select(specifier, config, secrets_path)
    return await dispatch_prompt(
        label, request, options, prompt, transport=transport, output_dir=output_dir
    )


def prompt_with_lang_context(language: str, prompt_words: list[str]) -> str:
    """Prefix the prompt with a programming-language expert instruction."""
    system_prompt = (
        f"You're a professional {language} developer.\n"
        f"Answer the following question in the context of {language}.\n"
        "Keep your answer concise and to the point.\n"
    )
    return system_prompt + " ".join(prompt_words)


def build_ocr_request(image_path: Path | str, model: str = OCR_MODEL) -> str:
    """Build a complete chat-completions body asking to transcribe an image.

    The returned JSON string is sent verbatim by the payload shaper.

    Raises:
        InputFileError: Image could not be read.
    """
    image_path = Path(image_path)
    try:
        content = image_path.read_bytes()
    except OSError as err:
        raise InputFileError(image_path, err) from err

    mime_type = mimetypes.guess_type(image_path.name)[0] or "image/jpeg"
    encoded = base64.b64encode(content).decode("ascii")

    return json.dumps({
        "model": model,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "messages": [{
            "role": "user",
            "content": [
                {"type": "text", "text": OCR_INSTRUCTION},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
                },
            ],
        }],
    })
