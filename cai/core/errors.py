"""Typed failures raised by the `cai.llm` pipeline.

Architectural role:
    Every stage raises a subclass of `CaiError`. Only the CLI adapter decides
    how a failure is printed and which exit status it maps to; library code
    never terminates the process.

Taxonomy:
    - `MissingCredentialError`: no usable API key; carries setup guidance.
    - `UnsupportedCapabilityError`: JSON mode / schema on a provider lacking it.
    - `TransportError`: network-level failure, no retry.
    - `ProviderError`: non-2xx response; upstream body kept verbatim.
    - `MalformedResponseError`: 2xx body with an unexpected shape.
    - `EmptyPromptError`: no prompt text after credential resolution.
    - `InputFileError`: a local input file (audio, image) could not be read.
    - `OutputWriteError`: generated media could not be written.
"""

from __future__ import annotations

from pathlib import Path


class CaiError(Exception):
    """Base class for all pipeline failures."""


class MissingCredentialError(CaiError):
    """No API key configured for a provider (or for any fallback provider).

    Attributes:
        provider: Provider that failed, `None` when the fallback chain was
            exhausted.
    """

    def __init__(self, provider, message: str):
        super().__init__(message)
        self.provider = provider


class UnsupportedCapabilityError(CaiError):
    def __init__(self, provider, capability: str):
        super().__init__(f"{provider} doesn't support a {capability}")
        self.provider = provider
        self.capability = capability


class TransportError(CaiError):
    """Request never produced an HTTP response (DNS, refused, timeout)."""

    def __init__(self, provider, detail: str):
        super().__init__(f"{provider} request failed: {detail}")
        self.provider = provider


class ProviderError(CaiError):
    """Provider answered with a non-success status.

    Attributes:
        status_code: HTTP status.
        body: Pretty-printed JSON body, or the raw text when not JSON.
    """

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP {status_code}\n\n{body}")
        self.status_code = status_code
        self.body = body


class MalformedResponseError(CaiError):
    def __init__(self, provider, detail: str):
        super().__init__(f"Unexpected {provider} response: {detail}")
        self.provider = provider


class EmptyPromptError(CaiError):
    def __init__(self):
        super().__init__("No prompt was provided")


class InputFileError(CaiError):
    def __init__(self, path: Path | str, cause: OSError):
        super().__init__(f"Couldn't read {path}: {cause.strerror or cause}")
        self.path = Path(path)


class OutputWriteError(CaiError):
    def __init__(self, path: Path | str, cause: OSError):
        super().__init__(f"Couldn't write {path}: {cause.strerror or cause}")
        self.path = Path(path)
