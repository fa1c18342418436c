"""Request and response data contracts for the `cai.llm` pipeline.

Architectural role:
    Defines the values exchanged by the pipeline stages:
    `selection` -> `provider_config` -> `payload` -> `client` -> `extract`.

Lifecycle:
    Every value is created once per invocation and never mutated afterwards.
    Nothing here is persisted.

Determinism:
    The classes are purely structural and state-free.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union


class Provider(enum.Enum):
    """Closed set of supported LLM backends.

    The enum value doubles as the configuration key prefix
    (`<value>_api_key`, `<value>_base_url`).
    """

    ANTHROPIC = "anthropic"
    CEREBRAS = "cerebras"
    DEEPSEEK = "deepseek"
    GOOGLE = "google"
    GROQ = "groq"
    OPENAI = "openai"
    LLAMAFILE = "llamafile"
    OLLAMA = "ollama"
    XAI = "xai"
    PERPLEXITY = "perplexity"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    Provider.ANTHROPIC: "Anthropic",
    Provider.CEREBRAS: "Cerebras",
    Provider.DEEPSEEK: "DeepSeek",
    Provider.GOOGLE: "Google",
    Provider.GROQ: "Groq",
    Provider.OPENAI: "OpenAI",
    Provider.LLAMAFILE: "Llamafile",
    Provider.OLLAMA: "Ollama",
    Provider.XAI: "xAI",
    Provider.PERPLEXITY: "Perplexity",
}


class MediaKind(enum.Enum):
    IMAGE = "image"
    AUDIO = "audio"


@dataclass(frozen=True)
class ModelSpecifier:
    """Caller-selected provider plus model alias or id.

    Attributes:
        provider: Target backend.
        model: Empty for the provider default, an alias, or a full model id.
    """

    provider: Provider
    model: str = ""


@dataclass(frozen=True)
class RequestDescriptor:
    """Resolved request target for one dispatch.

    Attributes:
        provider: Target backend.
        url: Endpoint URL. For Google this is the `models` collection; the
            model segment and action are appended by the dispatcher.
        model: Fully resolved provider-native model id.
        api_key: Non-empty credential (placeholder for local servers).
        max_tokens: Completion token budget.
    """

    provider: Provider
    url: str
    model: str
    api_key: str
    max_tokens: int = 4096


@dataclass(frozen=True)
class ExecutionOptions:
    """Per-invocation flags supplied by the CLI adapter.

    Attributes:
        is_raw: Print only the response body.
        is_json: Request a JSON object response.
        json_schema: Structured-output schema object.
        subcommand: Invocation context label (`image`, `transcribe`, a
            language context, ...). Only some labels affect payload shape.
    """

    is_raw: bool = False
    is_json: bool = False
    json_schema: dict[str, Any] | None = None
    subcommand: str | None = None


# =========================================================
# WIRE PAYLOADS
# =========================================================

@dataclass(frozen=True)
class JsonPayload:
    """JSON request body. `custom` marks a caller-supplied verbatim body."""

    body: Any
    custom: bool = False


@dataclass(frozen=True)
class MultipartPayload:
    """Multipart form body; the file is opened by the dispatcher."""

    fields: dict[str, str]
    file_field: str
    file_path: Path


WirePayload = Union[JsonPayload, MultipartPayload]


# =========================================================
# OUTCOMES
# =========================================================

@dataclass(frozen=True)
class SearchResult:
    """Citation returned by Perplexity alongside the answer text."""

    title: str
    url: str
    date: str | None = None
    last_updated: str | None = None


@dataclass(frozen=True)
class DisplayText:
    text: str
    search_results: tuple[SearchResult, ...] = ()


@dataclass(frozen=True)
class SavedBinary:
    """Generated media written to disk.

    Attributes:
        kind: Image or audio.
        paths: Files written, in response order.
        urls: Hosted URLs reported for entries without inline data.
    """

    kind: MediaKind
    paths: tuple[Path, ...] = ()
    urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawOutput:
    """Unrecognized response to a caller-supplied body, passed through."""

    body: str


Outcome = Union[DisplayText, SavedBinary, RawOutput]


@dataclass(frozen=True)
class PromptResult:
    """Successful dispatch as reported to the CLI adapter."""

    label: str
    elapsed_ms: int
    outcome: Outcome
