"""Provider selection with credential-based fallback.

An explicit specifier is built as-is and its errors propagate. Without one,
`FALLBACK_MODELS` is tried in order and the first provider with a configured
key wins. When every attempt lacks a key the raised error still lists every
way to configure every provider.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping

from cai.core.errors import MissingCredentialError
from cai.core.types import ModelSpecifier, Provider, RequestDescriptor
from cai.llm.provider_config import build_request, describe, key_setup_message

logger = logging.getLogger(__name__)


FALLBACK_MODELS = (
    ModelSpecifier(Provider.GROQ, "llama-3.1-8b-instant"),
    ModelSpecifier(Provider.OPENAI, "gpt-4o-mini"),
    ModelSpecifier(Provider.ANTHROPIC, "claude-3-5-haiku-latest"),
)


def select(
    specifier: ModelSpecifier | None,
    config: Mapping[str, str],
    secrets_path: Path | str | None = None,
) -> tuple[str, RequestDescriptor]:
    """Pick the request target for one invocation.

    Args:
        specifier: Caller-chosen model, or `None` for the fallback chain.
        config: Flat configuration map.
        secrets_path: Path named in the setup guidance on failure.

    Returns:
        `(display_label, request)`.

    Raises:
        MissingCredentialError: The chosen provider (or every fallback
            provider) has no key.
    """
    if specifier is not None:
        return describe(specifier), build_request(specifier, config, secrets_path)

    for candidate in FALLBACK_MODELS:
        try:
            request = build_request(candidate, config, secrets_path)
        except MissingCredentialError:
            logger.debug("No key for %s, trying next provider", candidate.provider)
            continue
        return describe(candidate), request

    raise MissingCredentialError(None, key_setup_message(secrets_path))
