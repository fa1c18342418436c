"""Terminal rendering and prompt submission.

Interface responsibilities:
- Render a successful dispatch as a header line (elapsed time and model
  label) followed by the body, or the body alone in raw mode.
- Render a failure as header, `ERROR:` marker and error detail.
- Run one prompt (`submit_prompt`) or fan it out to several providers
  concurrently (`broadcast`).

Output atomicity:
- Each dispatch writes its complete block with a single `print` call, so
  concurrent broadcast results never interleave below block granularity.

Error handling strategy:
- `CaiError` failures are printed to stderr and mapped to exit status 1.
- In broadcast mode an unexpected exception in one dispatch is logged and
  does not affect the others.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Mapping, Sequence

import httpx

from cai.core.errors import CaiError
from cai.core.types import (
    DisplayText,
    ExecutionOptions,
    ModelSpecifier,
    Outcome,
    PromptResult,
    RawOutput,
    SavedBinary,
)
from cai.llm.provider_config import describe
from cai.llm.service import BROADCAST_MODELS, exec_tool

logger = logging.getLogger(__name__)


# =========================================================
# RENDERING
# =========================================================

def render_header(elapsed_ms: int, label: str) -> str:
    return f"⏱️ {elapsed_ms: >5} ms | {label}"


def render_body(outcome: Outcome, is_raw: bool = False) -> str:
    if isinstance(outcome, DisplayText):
        if is_raw or not outcome.search_results:
            return outcome.text

        lines = [outcome.text, "", "Sources:"]
        for number, result in enumerate(outcome.search_results, start=1):
            dates = [result.date] if result.date else []
            if result.last_updated:
                dates.append(f"updated {result.last_updated}")
            dated = f" ({', '.join(dates)})" if dates else ""
            lines.append(f"{number}. {result.title}{dated}")
            lines.append(f"   {result.url}")
        return "\n".join(lines)

    if isinstance(outcome, SavedBinary):
        if is_raw:
            return "\n".join([str(path) for path in outcome.paths] + list(outcome.urls))

        kind = outcome.kind.value
        lines = [f"Saved {kind} to {path}" for path in outcome.paths]
        lines.extend(f"{kind.capitalize()} URL: {url}" for url in outcome.urls)
        return "\n".join(lines)

    if isinstance(outcome, RawOutput):
        return outcome.body

    raise TypeError(f"Unknown outcome type: {type(outcome).__name__}")


def render_outcome(result: PromptResult, options: ExecutionOptions) -> str:
    body = render_body(result.outcome, options.is_raw)
    if options.is_raw:
        return body
    return f"{render_header(result.elapsed_ms, result.label)}\n\n{body}\n"


def render_failure(elapsed_ms: int, label: str, err: Exception) -> str:
    return f"{render_header(elapsed_ms, label)}\nERROR:\n{err}\n"


# =========================================================
# SUBMISSION
# =========================================================

async def submit_prompt(
    specifier: ModelSpecifier | None,
    options: ExecutionOptions,
    prompt: str,
    config: Mapping[str, str],
    transport: httpx.AsyncBaseTransport | None = None,
    output_dir: Path | str = ".",
    secrets_path: Path | str | None = None,
) -> int:
    """Run one prompt and print its result block.

    Returns:
        Exit status: 0 on success, 1 on a `CaiError`.
    """
    started = time.perf_counter()
    label = describe(specifier) if specifier is not None else ""

    try:
        result = await exec_tool(
            specifier,
            options,
            prompt,
            config,
            transport=transport,
            output_dir=output_dir,
            secrets_path=secrets_path,
        )
    except CaiError as err:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        print(render_failure(elapsed_ms, label, err), file=sys.stderr, flush=True)
        return 1

    print(render_outcome(result, options), flush=True)
    return 0


async def broadcast(
    prompt: str,
    options: ExecutionOptions,
    config: Mapping[str, str],
    transport: httpx.AsyncBaseTransport | None = None,
    models: Sequence[ModelSpecifier] = BROADCAST_MODELS,
    output_dir: Path | str = ".",
    secrets_path: Path | str | None = None,
) -> int:
    """Send `prompt` to every model in `models` concurrently.

    Results are printed as each dispatch completes; there is no ordering
    across dispatches.

    Returns:
        0 if at least one dispatch succeeded, else 1.
    """
    statuses = await asyncio.gather(
        *(
            submit_prompt(
                specifier,
                options,
                prompt,
                config,
                transport=transport,
                output_dir=output_dir,
                secrets_path=secrets_path,
            )
            for specifier in models
        ),
        return_exceptions=True,
    )

    succeeded = 0
    for specifier, status in zip(models, statuses):
        if isinstance(status, Exception):
            logger.error("Dispatch to %s crashed", describe(specifier), exc_info=status)
        elif status == 0:
            succeeded += 1

    return 0 if succeeded else 1
