"""Provider configuration, credential lookup and request-target building.

Architectural role:
    Centralizes endpoint defaults, configuration loading and the mapping from a
    `ModelSpecifier` to a `RequestDescriptor` consumed by `payload` and
    `client`.

Configuration sources (lowest to highest precedence):
    1. Generic environment variables, e.g. `OPENAI_API_KEY`.
    2. Secrets file `$XDG_CONFIG_HOME/cai/secrets.env` (dotenv syntax), keys
       such as `openai_api_key` or `ollama_base_url`.
    3. Tool-specific environment variables, e.g. `CAI_OPENAI_API_KEY`.

Endpoint routing:
    Base URL (configured override or default, trailing slash stripped) plus a
    provider suffix. OpenAI and xAI pick the suffix from the resolved model
    name (speech, image generation, transcription, chat). Google always targets
    the `models` collection; `client` appends `/<model>:generateContent`.

Failure behavior:
    A missing key raises `MissingCredentialError` whose message lists every
    way to configure a key for every keyed provider.

Determinism:
    Deterministic for a fixed environment and secrets file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from dotenv import dotenv_values

from cai.core.errors import MissingCredentialError
from cai.core.types import ModelSpecifier, Provider, RequestDescriptor
from cai.llm.aliases import resolve

logger = logging.getLogger(__name__)


DEFAULT_MAX_TOKENS = 4096

# Local servers accept any bearer token.
DUMMY_KEY = "DUMMY_KEY"

ENV_PREFIX = "CAI_"

XAI_IMAGE_MODEL = "grok-2-image-1212"

IMAGE_MODEL_PREFIXES = ("gpt-image", "dall-e", "grok-2-image")


# Default endpoint map. Values are base URLs; suffixes are added per request.
PROVIDERS = {
    Provider.ANTHROPIC: {
        "base_url": "https://api.anthropic.com/v1",
        "default_model": "claude-sonnet-4-5",
        "keyless": False,
    },
    Provider.CEREBRAS: {
        "base_url": "https://api.cerebras.ai/v1",
        "default_model": "llama3.1-8b",
        "keyless": False,
    },
    Provider.DEEPSEEK: {
        "base_url": "https://api.deepseek.com",
        "default_model": "deepseek-chat",
        "keyless": False,
    },
    Provider.GOOGLE: {
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "default_model": "gemini-2.5-flash",
        "keyless": False,
    },
    Provider.GROQ: {
        "base_url": "https://api.groq.com/openai/v1",
        "default_model": "llama-3.1-8b-instant",
        "keyless": False,
    },
    Provider.OPENAI: {
        "base_url": "https://api.openai.com/v1",
        "default_model": "gpt-4o-mini",
        "keyless": False,
    },
    Provider.LLAMAFILE: {
        "base_url": "http://localhost:8080/v1",
        "default_model": "",
        "keyless": True,
    },
    Provider.OLLAMA: {
        "base_url": "http://localhost:11434/v1",
        "default_model": "llama3.2",
        "keyless": True,
    },
    Provider.XAI: {
        "base_url": "https://api.x.ai/v1",
        "default_model": "grok-4",
        "keyless": False,
    },
    Provider.PERPLEXITY: {
        "base_url": "https://api.perplexity.ai",
        "default_model": "sonar",
        "keyless": False,
    },
}

KEYED_PROVIDERS = tuple(p for p, conf in PROVIDERS.items() if not conf["keyless"])


# =========================================================
# MODEL KINDS
# =========================================================

def is_speech_model(model: str) -> bool:
    return "-tts" in model


def is_image_model(model: str) -> bool:
    return model.startswith(IMAGE_MODEL_PREFIXES)


def is_transcription_model(model: str) -> bool:
    return "transcribe" in model or model.startswith("whisper")


# =========================================================
# CONFIGURATION
# =========================================================

def get_secrets_path() -> Path:
    """Return the secrets file location under the XDG config directory."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(
        os.path.expanduser("~"), ".config"
    )
    return Path(config_home) / "cai" / "secrets.env"


def load_config(
    secrets_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build the flat configuration map read by the request builder.

    Args:
        secrets_path: Secrets file to read; defaults to `get_secrets_path()`.
        environ: Environment mapping; defaults to `os.environ`.

    Returns:
        Mapping of lower-case keys (`<provider>_api_key`,
        `<provider>_base_url`, ...) to non-empty values.

    Edge cases:
        - A missing secrets file contributes nothing.
        - Empty values from any source are dropped, so they never shadow a
          lower-precedence value.
    """
    environ = os.environ if environ is None else environ
    secrets_path = get_secrets_path() if secrets_path is None else secrets_path

    config: dict[str, str] = {}

    for provider in KEYED_PROVIDERS:
        value = environ.get(f"{provider.value.upper()}_API_KEY", "")
        if value:
            config[f"{provider.value}_api_key"] = value

    if secrets_path.is_file():
        logger.debug("Reading secrets from %s", secrets_path)
        for key, value in dotenv_values(secrets_path).items():
            if value:
                config[key.lower()] = value

    for key, value in environ.items():
        if key.startswith(ENV_PREFIX) and value:
            config[key[len(ENV_PREFIX):].lower()] = value

    return config


def key_setup_message(secrets_path: Path | str | None = None) -> str:
    """Return setup guidance naming all three ways to supply a key."""
    secrets_path = get_secrets_path() if secrets_path is None else secrets_path
    config_keys = ", ".join(f"`{p.value}_api_key`" for p in KEYED_PROVIDERS)
    prefixed_vars = ", ".join(
        f"{ENV_PREFIX}{p.value.upper()}_API_KEY" for p in KEYED_PROVIDERS
    )
    generic_vars = ", ".join(f"{p.value.upper()}_API_KEY" for p in KEYED_PROVIDERS)

    return (
        "An API key must be provided. Use one of the following options:\n"
        "\n"
        f"1. Set one or more API keys in {secrets_path}\n"
        f"   ({config_keys})\n"
        "2. Set one or more cai specific env variables\n"
        f"   ({prefixed_vars})\n"
        "3. Set one or more generic env variables\n"
        f"   ({generic_vars})\n"
    )


# =========================================================
# REQUEST BUILDING
# =========================================================

def resolve_model(specifier: ModelSpecifier) -> str:
    """Resolve the specifier's alias, falling back to the provider default."""
    model = specifier.model or PROVIDERS[specifier.provider]["default_model"]
    return resolve(specifier.provider, model)


def describe(specifier: ModelSpecifier) -> str:
    """Display label: provider name, plus the resolved model id if given."""
    if not specifier.model:
        return str(specifier.provider)
    return f"{specifier.provider} {resolve_model(specifier)}"


def endpoint_suffix(provider: Provider, model: str) -> str:
    """Return the path appended to the base URL for `provider`/`model`."""
    if provider is Provider.ANTHROPIC:
        return "/messages"
    if provider is Provider.GOOGLE:
        return "/models"
    if provider is Provider.OPENAI:
        if is_speech_model(model):
            return "/audio/speech"
        if is_image_model(model):
            return "/images/generations"
        if is_transcription_model(model):
            return "/audio/transcriptions"
        return "/chat/completions"
    if provider is Provider.XAI:
        if is_image_model(model):
            return "/images/generations"
        return "/chat/completions"
    return "/chat/completions"


def get_base_url(provider: Provider, config: Mapping[str, str]) -> str:
    base_url = config.get(f"{provider.value}_base_url") or PROVIDERS[provider]["base_url"]
    return base_url.rstrip("/")


def get_api_key(provider: Provider, config: Mapping[str, str]) -> str:
    if PROVIDERS[provider]["keyless"]:
        return DUMMY_KEY
    return config.get(f"{provider.value}_api_key", "")


def build_request(
    specifier: ModelSpecifier,
    config: Mapping[str, str],
    secrets_path: Path | str | None = None,
) -> RequestDescriptor:
    """Resolve a specifier into a dispatchable request target.

    Args:
        specifier: Provider plus model alias or id.
        config: Flat configuration map from `load_config`.
        secrets_path: Path named in the setup guidance on failure.

    Returns:
        Descriptor whose `model` is always the resolved provider-native id.

    Raises:
        MissingCredentialError: No non-empty key configured for the provider.
    """
    provider = specifier.provider
    api_key = get_api_key(provider, config)
    if not api_key:
        raise MissingCredentialError(provider, key_setup_message(secrets_path))

    model = resolve_model(specifier)
    url = get_base_url(provider, config) + endpoint_suffix(provider, model)

    logger.debug("Resolved %s model=%r url=%s", provider, model, url)

    return RequestDescriptor(
        provider=provider,
        url=url,
        model=model,
        api_key=api_key,
        max_tokens=DEFAULT_MAX_TOKENS,
    )
