"""Provider-specific HTTP transport for prompt dispatch.

Architectural role:
    Sends one shaped payload to the endpoint described by a `RequestDescriptor`
    and hands the raw `httpx.Response` to `cai.llm.extract`.

Authentication:
    - Anthropic: `x-api-key` and `anthropic-version` headers.
    - Google: no auth header. The key goes into the `key` query parameter and
      `/<model>:generateContent` is appended to the `models` endpoint here,
      because the final URL depends on the resolved model.
    - Everyone else: bearer token.

Retry behavior:
    None. Each dispatch is a single POST awaited to completion.

Failure handling model:
    Transport failures are raised as `TransportError`; HTTP error statuses are
    returned untouched so the extractor can surface the upstream body.
"""

from __future__ import annotations

import logging
import time

import httpx

from cai.core.errors import InputFileError, TransportError
from cai.core.types import (
    MultipartPayload,
    Provider,
    RequestDescriptor,
    WirePayload,
)

logger = logging.getLogger(__name__)


ANTHROPIC_VERSION = "2023-06-01"

REQUEST_TIMEOUT_SECONDS = 120.0


def build_headers(request: RequestDescriptor) -> dict[str, str]:
    """Return the auth headers for the request's provider."""
    if request.provider is Provider.ANTHROPIC:
        return {
            "anthropic-version": ANTHROPIC_VERSION,
            "x-api-key": request.api_key,
        }
    if request.provider is Provider.GOOGLE:
        return {}
    return {"Authorization": f"Bearer {request.api_key}"}


def build_target(request: RequestDescriptor) -> tuple[str, dict[str, str]]:
    """Return the final URL and query parameters for the request."""
    if request.provider is Provider.GOOGLE:
        return f"{request.url}/{request.model}:generateContent", {"key": request.api_key}
    return request.url, {}


async def _post(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, str],
    headers: dict[str, str],
    payload: WirePayload,
) -> httpx.Response:
    if isinstance(payload, MultipartPayload):
        try:
            handle = payload.file_path.open("rb")
        except OSError as err:
            raise InputFileError(payload.file_path, err) from err
        with handle:
            return await client.post(
                url,
                params=params,
                headers=headers,
                data=payload.fields,
                files={payload.file_field: (payload.file_path.name, handle)},
            )

    return await client.post(url, params=params, headers=headers, json=payload.body)


async def send(
    request: RequestDescriptor,
    payload: WirePayload,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """POST `payload` to the request's endpoint.

    Args:
        request: Resolved request target including credentials.
        payload: Shaped JSON or multipart payload.
        transport: Optional transport override (tests use
            `httpx.MockTransport`).

    Returns:
        The response with its body fully read, whatever its status.

    Raises:
        TransportError: DNS, connection or timeout failure.
        InputFileError: Multipart file could not be opened.
    """
    url, params = build_target(request)
    headers = build_headers(request)

    # Google's query string carries the key; only the path is logged.
    logger.debug("POST %s (%s)", url, type(payload).__name__)
    started = time.perf_counter()

    try:
        async with httpx.AsyncClient(
            timeout=REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        ) as client:
            response = await _post(client, url, params, headers, payload)
    except httpx.RequestError as err:
        raise TransportError(request.provider, str(err) or type(err).__name__) from err

    logger.debug(
        "%s responded %d in %.0f ms",
        request.provider,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response
